"""Storage subpackage.

Raw text backends implement ``StorageBackend``; the markdown provider in
``aistorm.storage.markdown`` turns their text into domain objects.

Public surface
--------------
- StorageBackend        — abstract raw text backend
- FilesystemBackend     — one file per document
- InMemoryBackend       — would-be files in a dict (tests, CLI dry runs)
- StorageProvider       — abstract agent/session provider
- AgentNotFoundError, SessionNotFoundError
"""
from __future__ import annotations

from aistorm.storage.base import StorageBackend
from aistorm.storage.filesystem import FilesystemBackend
from aistorm.storage.memory import InMemoryBackend
from aistorm.storage.provider import (
    AgentNotFoundError,
    SessionNotFoundError,
    StorageProvider,
)

__all__ = [
    "AgentNotFoundError",
    "FilesystemBackend",
    "InMemoryBackend",
    "SessionNotFoundError",
    "StorageBackend",
    "StorageProvider",
]
