"""Markdown document subpackage.

Public surface
--------------
- SegmentType              — session / premise / agent / message
- MarkdownSegment          — immutable typed block with converters
- MarkdownSerializer       — segments <-> document text
- parse_segments           — single-pass document parser
- load/dump_session_document, load/dump_agent_document — text-level helpers
- MarkdownStorageProvider  — StorageProvider over raw text backends
- MarkdownDocumentError and subclasses
"""
from __future__ import annotations

from aistorm.storage.markdown.document import (
    agent_from_segments,
    dump_agent_document,
    dump_session_document,
    load_agent_document,
    load_session_document,
    session_from_segments,
    session_to_segments,
)
from aistorm.storage.markdown.errors import (
    EmptyDocumentError,
    InvalidTimestampError,
    MalformedDocumentError,
    MarkdownDocumentError,
    MissingRequiredFieldError,
)
from aistorm.storage.markdown.format import SegmentType
from aistorm.storage.markdown.parser import parse_segments
from aistorm.storage.markdown.provider import MarkdownStorageProvider
from aistorm.storage.markdown.segment import MarkdownSegment
from aistorm.storage.markdown.serializer import MarkdownSerializer

__all__ = [
    "EmptyDocumentError",
    "InvalidTimestampError",
    "MalformedDocumentError",
    "MarkdownDocumentError",
    "MarkdownSegment",
    "MarkdownSerializer",
    "MarkdownStorageProvider",
    "MissingRequiredFieldError",
    "SegmentType",
    "agent_from_segments",
    "dump_agent_document",
    "dump_session_document",
    "load_agent_document",
    "load_session_document",
    "parse_segments",
    "session_from_segments",
    "session_to_segments",
]
