"""In-memory storage backend.

Keeps documents as ``file name -> text`` in a dict, using the same
``<document_id><extension>`` naming as the filesystem backend.  The CLI
uses it for ``--dry-run`` previews: a command saves into memory and
``files()`` shows what would have been written.

Classes
-------
- InMemoryBackend  — dict of would-be files
"""
from __future__ import annotations

from collections.abc import Mapping

from aistorm.storage.base import StorageBackend


class InMemoryBackend(StorageBackend):
    """Storage backend holding its files in a dict.

    Parameters
    ----------
    initial_data:
        Optional mapping of document IDs to text, stored under their file
        names.  The caller's mapping is not kept.
    extension:
        File-name suffix, as for ``FilesystemBackend``.
    """

    def __init__(
        self,
        initial_data: Mapping[str, str] | None = None,
        extension: str = ".md",
    ) -> None:
        super().__init__(extension)
        self._files: dict[str, str] = {}
        for document_id, text in (initial_data or {}).items():
            self.save(document_id, text)

    def files(self) -> dict[str, str]:
        """Return a copy of the stored files keyed by file name."""
        return dict(self._files)

    def _has_file(self, name: str) -> bool:
        return name in self._files

    def _read_file(self, name: str) -> str | None:
        return self._files.get(name)

    def _write_file(self, name: str, text: str) -> None:
        self._files[name] = text

    def _remove_file(self, name: str) -> bool:
        return self._files.pop(name, None) is not None

    def _file_names(self) -> list[str]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"InMemoryBackend(extension={self.extension!r}, documents={len(self._files)})"
