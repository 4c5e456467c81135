"""aistorm — Markdown persistence for multi-agent AI sessions.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import aistorm
>>> aistorm.__version__
'0.1.0'
"""
from __future__ import annotations

# Domain models
from aistorm.models.domain import Agent, Session, SessionPremise, StormMessage

# Prompt helpers
from aistorm.prompt.tools import remove_agent_name_prefix_from_message

# Configuration
from aistorm.config import StorageOptions, load_storage_options

# Storage backends and providers
from aistorm.storage.base import StorageBackend
from aistorm.storage.filesystem import FilesystemBackend
from aistorm.storage.memory import InMemoryBackend
from aistorm.storage.provider import AgentNotFoundError, SessionNotFoundError, StorageProvider

# Markdown documents
from aistorm.storage.markdown.errors import (
    EmptyDocumentError,
    InvalidTimestampError,
    MalformedDocumentError,
    MarkdownDocumentError,
    MissingRequiredFieldError,
)
from aistorm.storage.markdown.format import SegmentType
from aistorm.storage.markdown.segment import MarkdownSegment
from aistorm.storage.markdown.serializer import MarkdownSerializer
from aistorm.storage.markdown.parser import parse_segments
from aistorm.storage.markdown.document import (
    dump_agent_document,
    dump_session_document,
    load_agent_document,
    load_session_document,
)
from aistorm.storage.markdown.provider import MarkdownStorageProvider

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Domain
    "Agent",
    "Session",
    "SessionPremise",
    "StormMessage",
    "remove_agent_name_prefix_from_message",
    # Configuration
    "StorageOptions",
    "load_storage_options",
    # Storage
    "AgentNotFoundError",
    "FilesystemBackend",
    "InMemoryBackend",
    "SessionNotFoundError",
    "StorageBackend",
    "StorageProvider",
    # Markdown
    "EmptyDocumentError",
    "InvalidTimestampError",
    "MalformedDocumentError",
    "MarkdownDocumentError",
    "MarkdownSegment",
    "MarkdownSerializer",
    "MarkdownStorageProvider",
    "MissingRequiredFieldError",
    "SegmentType",
    "dump_agent_document",
    "dump_session_document",
    "load_agent_document",
    "load_session_document",
    "parse_segments",
]
