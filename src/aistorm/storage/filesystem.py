"""Filesystem storage backend.

Persists each document as an individual UTF-8 file under a configurable
directory, named ``<document_id><extension>``.

Classes
-------
- FilesystemBackend  — file-per-document storage
"""
from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from aistorm.storage.base import StorageBackend


class FilesystemBackend(StorageBackend):
    """Stores documents as individual UTF-8 files.

    Reading a file that is not valid UTF-8 raises ``UnicodeDecodeError``
    and an unreadable file raises ``OSError``; both propagate.

    Parameters
    ----------
    storage_dir:
        Directory holding the files.  Created on first save if absent.
    extension:
        Suffix appended to each document ID, e.g. ``".md"`` or
        ``".session.md"``.  Only files ending in it are listed.
    """

    def __init__(self, storage_dir: str | Path, extension: str = ".md") -> None:
        super().__init__(extension)
        self._storage_dir = Path(storage_dir)

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _path_for(self, document_id: str) -> Path:
        return self._storage_dir / self.file_name(document_id)

    # ------------------------------------------------------------------
    # File primitives
    # ------------------------------------------------------------------

    def _has_file(self, name: str) -> bool:
        return (self._storage_dir / name).is_file()

    def _read_file(self, name: str) -> str | None:
        path = self._storage_dir / name
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def _write_file(self, name: str, text: str) -> None:
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        (self._storage_dir / name).write_text(text, encoding="utf-8")

    def _remove_file(self, name: str) -> bool:
        path = self._storage_dir / name
        if not path.is_file():
            return False
        path.unlink()
        return True

    def _file_names(self) -> Iterator[str]:
        if not self._storage_dir.is_dir():
            return
        for path in self._storage_dir.glob(f"*{self.extension}"):
            if path.is_file():
                yield path.name

    def _describe(self, name: str) -> str:
        return str(self._storage_dir / name)

    def __repr__(self) -> str:
        return (
            f"FilesystemBackend(storage_dir={str(self._storage_dir)!r}, "
            f"extension={self.extension!r})"
        )
