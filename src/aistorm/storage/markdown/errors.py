"""Errors raised while parsing or converting markdown documents.

Every error carries enough context (block index, segment type, field name)
to locate the problem without re-parsing.  All of them derive from
``MarkdownDocumentError`` so a caller can handle any document failure with
a single ``except`` clause.
"""
from __future__ import annotations


class MarkdownDocumentError(ValueError):
    """Base class for document parse and conversion failures."""


def _location(block_index: int | None, line_number: int | None = None) -> str:
    parts: list[str] = []
    if block_index is not None:
        parts.append(f"block {block_index}")
    if line_number is not None:
        parts.append(f"line {line_number}")
    return f" ({', '.join(parts)})" if parts else ""


class MalformedDocumentError(MarkdownDocumentError):
    """Raised when the document structure cannot be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        block_index: int | None = None,
        line_number: int | None = None,
    ) -> None:
        self.block_index = block_index
        self.line_number = line_number
        super().__init__(f"{message}{_location(block_index, line_number)}")


class MissingRequiredFieldError(MarkdownDocumentError):
    """Raised when a converter's mandatory metadata key is absent."""

    def __init__(
        self,
        field: str,
        *,
        segment_type: str | None = None,
        block_index: int | None = None,
    ) -> None:
        self.field = field
        self.segment_type = segment_type
        self.block_index = block_index
        owner = f" on {segment_type!r} segment" if segment_type else ""
        super().__init__(
            f"Missing required field {field!r}{owner}{_location(block_index)}"
        )


class InvalidTimestampError(MarkdownDocumentError):
    """Raised when a required timestamp is absent or cannot be parsed.

    ``value`` is None when the key was missing altogether.
    """

    def __init__(
        self,
        key: str,
        value: str | None = None,
        *,
        block_index: int | None = None,
    ) -> None:
        self.key = key
        self.value = value
        self.block_index = block_index
        if value is None:
            detail = f"Missing timestamp {key!r}"
        else:
            detail = (
                f"Invalid timestamp {key!r}: {value!r} is not an ISO-8601 "
                "time with an explicit UTC offset"
            )
        super().__init__(f"{detail}{_location(block_index)}")


class EmptyDocumentError(MarkdownDocumentError):
    """Raised when a document holds no segments but at least one is required."""

    def __init__(self) -> None:
        super().__init__("Document is empty or in an unrecognized format")
