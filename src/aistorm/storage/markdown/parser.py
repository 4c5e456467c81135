"""Markdown segment parser.

Splits a document into ``MarkdownSegment`` values in a single forward pass
over its lines:

  - a line starting with the marker prefix opens a new block and names its
    type; unknown types fail immediately
  - lines after the marker up to the first blank line are the metadata
    header and must all be ``key: value``
  - everything else up to the next marker is the body

Apart from a leading byte order mark nothing is skipped or repaired.
Errors name the block index and the line number of the offending line.
"""
from __future__ import annotations

import logging

from aistorm.storage.markdown.errors import EmptyDocumentError, MalformedDocumentError
from aistorm.storage.markdown.format import (
    BYTE_ORDER_MARK,
    MARKER_LIKE,
    MARKER_PREFIX,
    METADATA_LINE,
    SegmentType,
)
from aistorm.storage.markdown.segment import MarkdownSegment

logger = logging.getLogger(__name__)


class _Block:
    """Accumulates the lines of one segment while the parser walks the text."""

    def __init__(self, segment_type: SegmentType, block_index: int) -> None:
        self.segment_type = segment_type
        self.block_index = block_index
        self.metadata: dict[str, str] = {}
        self.body_lines: list[str] = []
        self.in_header = True

    @classmethod
    def open(cls, line: str, line_number: int, block_index: int) -> _Block:
        token = line[len(MARKER_PREFIX):].strip()
        if not token:
            raise MalformedDocumentError(
                "Segment marker has no type token",
                block_index=block_index,
                line_number=line_number,
            )
        try:
            segment_type = SegmentType(token)
        except ValueError:
            raise MalformedDocumentError(
                f"Unknown segment type {token!r}",
                block_index=block_index,
                line_number=line_number,
            ) from None
        return cls(segment_type, block_index)

    def feed(self, line: str, line_number: int) -> None:
        if self.in_header:
            if not line.strip():
                self.in_header = False
                return
            match = METADATA_LINE.match(line)
            if match is None:
                raise MalformedDocumentError(
                    f"Invalid metadata line {line!r}, expected 'key: value' "
                    "followed by a blank line before the body",
                    block_index=self.block_index,
                    line_number=line_number,
                )
            key, value = match.group(1), match.group(2) or ""
            if key in self.metadata:
                raise MalformedDocumentError(
                    f"Duplicate metadata key {key!r}",
                    block_index=self.block_index,
                    line_number=line_number,
                )
            self.metadata[key] = value
            return

        escaped = MARKER_LIKE.match(line)
        if escaped and escaped.group(1):
            line = line[1:]
        self.body_lines.append(line)

    def build(self) -> MarkdownSegment:
        return MarkdownSegment(
            self.segment_type,
            self.metadata,
            "\n".join(self.body_lines),
            block_index=self.block_index,
        )


def parse_segments(text: str, throw_on_none: bool = False) -> list[MarkdownSegment]:
    """Parse ``text`` into an ordered list of segments.

    Parameters
    ----------
    text:
        Full document text.
    throw_on_none:
        When True an empty result raises ``EmptyDocumentError``; otherwise
        an empty list is returned.

    Returns
    -------
    list[MarkdownSegment]
        Segments in source order.

    Raises
    ------
    MalformedDocumentError
        On content before the first marker, an unknown or missing type
        token, a malformed or duplicate metadata line.
    EmptyDocumentError
        If no segment was found and ``throw_on_none`` is True.
    """
    if text.startswith(BYTE_ORDER_MARK):
        text = text[len(BYTE_ORDER_MARK):]
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    segments: list[MarkdownSegment] = []
    current: _Block | None = None

    for line_number, line in enumerate(lines, start=1):
        if line.startswith(MARKER_PREFIX):
            if current is not None:
                segments.append(current.build())
            current = _Block.open(line, line_number, len(segments))
            continue

        if current is None:
            if line.strip():
                raise MalformedDocumentError(
                    "Content found before the first segment marker",
                    line_number=line_number,
                )
            continue

        current.feed(line, line_number)

    if current is not None:
        segments.append(current.build())

    if not segments and throw_on_none:
        raise EmptyDocumentError()

    logger.debug("Parsed %d segment(s) from %d line(s)", len(segments), len(lines))
    return segments
