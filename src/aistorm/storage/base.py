"""Raw document storage: named markdown files behind a small interface.

A backend maps a document ID to one file named ``<document_id><extension>``
(``alice.md``, ``debate.session.md``).  The ID rules, the file naming and
the not-found errors live here; concrete backends only move file text.
Backends know nothing about the document format; parsing happens in the
storage provider.

Classes
-------
- StorageBackend  — ID space and file naming over small file primitives
"""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Iterable


class StorageBackend(ABC):
    """Store markdown text as files named after document IDs.

    Subclasses implement the ``_has_file``, ``_read_file``, ``_write_file``,
    ``_remove_file`` and ``_file_names`` primitives over file names.
    Document IDs are reduced to their final path component, so an ID can
    never address a file outside the backend.

    Parameters
    ----------
    extension:
        Suffix appended to each document ID, e.g. ``".md"`` or
        ``".session.md"``.  Only files ending in it belong to the backend.

    Raises
    ------
    ValueError
        If ``extension`` is empty.
    """

    def __init__(self, extension: str = ".md") -> None:
        if not extension:
            raise ValueError("extension must not be empty")
        self._extension = extension

    @property
    def extension(self) -> str:
        return self._extension

    # ------------------------------------------------------------------
    # ID space
    # ------------------------------------------------------------------

    def file_name(self, document_id: str) -> str:
        """Return the file name that stores ``document_id``.

        Raises
        ------
        ValueError
            If nothing is left of the ID once directories are removed.
        """
        name = os.path.basename(document_id)
        if not name:
            raise ValueError(f"Invalid document id {document_id!r}")
        return f"{name}{self._extension}"

    def document_id(self, file_name: str) -> str | None:
        """Return the document ID for ``file_name``, or None if it is not ours."""
        if file_name.endswith(self._extension) and len(file_name) > len(self._extension):
            return file_name[: -len(self._extension)]
        return None

    # ------------------------------------------------------------------
    # File primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def _has_file(self, name: str) -> bool:
        """Return True if file ``name`` exists."""

    @abstractmethod
    def _read_file(self, name: str) -> str | None:
        """Return the text of file ``name``, or None when it does not exist."""

    @abstractmethod
    def _write_file(self, name: str, text: str) -> None:
        """Create or replace file ``name``."""

    @abstractmethod
    def _remove_file(self, name: str) -> bool:
        """Remove file ``name``; return False when it did not exist."""

    @abstractmethod
    def _file_names(self) -> Iterable[str]:
        """Yield the names of all stored files, including foreign ones."""

    def _describe(self, name: str) -> str:
        return name

    # ------------------------------------------------------------------
    # Document operations
    # ------------------------------------------------------------------

    def save(self, document_id: str, payload: str) -> None:
        """Persist ``payload`` under ``document_id``, overwriting any previous text."""
        self._write_file(self.file_name(document_id), payload)

    def load(self, document_id: str) -> str:
        """Return the text stored under ``document_id``.

        Raises
        ------
        KeyError
            If no file exists for ``document_id``.
        """
        name = self.file_name(document_id)
        text = self._read_file(name)
        if text is None:
            raise KeyError(f"Document {document_id!r} not found at {self._describe(name)}")
        return text

    def list(self) -> list[str]:
        """Return the IDs of all documents, sorted."""
        ids = (self.document_id(name) for name in self._file_names())
        return sorted(document_id for document_id in ids if document_id is not None)

    def delete(self, document_id: str) -> None:
        """Remove the file for ``document_id``.

        Raises
        ------
        KeyError
            If no file exists for ``document_id``.
        """
        name = self.file_name(document_id)
        if not self._remove_file(name):
            raise KeyError(f"Document {document_id!r} not found at {self._describe(name)}")

    def exists(self, document_id: str) -> bool:
        return self._has_file(self.file_name(document_id))

    def __contains__(self, document_id: object) -> bool:
        return isinstance(document_id, str) and self.exists(document_id)
