"""Markdown segment serialization.

Renders segments into the document format described in
``aistorm.storage.markdown.format`` and reads them back through the
parser.  Output is deterministic: metadata keeps its stored order and
nothing time- or environment-dependent is written.

Classes
-------
- MarkdownSerializer  — segment list <-> document text
"""
from __future__ import annotations

from collections.abc import Iterable

from aistorm.storage.markdown.format import ESCAPE_CHAR, MARKER_LIKE, MARKER_PREFIX
from aistorm.storage.markdown.parser import parse_segments
from aistorm.storage.markdown.segment import MarkdownSegment


class MarkdownSerializer:
    """Serialize and deserialize ``MarkdownSegment`` sequences.

    Each segment renders as its marker line, its metadata lines, a blank
    line and its body.  Segments are separated by one blank line and the
    document ends with a single newline.
    """

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def serialize_segment(self, segment: MarkdownSegment) -> str:
        """Render one segment, terminated by a newline.

        Parameters
        ----------
        segment:
            The segment to render.

        Returns
        -------
        str
            Marker, metadata and body text.
        """
        lines = [f"{MARKER_PREFIX}{segment.segment_type.value}"]
        lines.extend(
            f"{key}: {value}" if value else f"{key}:"
            for key, value in segment.metadata.items()
        )
        if segment.body:
            lines.append("")
            lines.extend(self._escape(line) for line in segment.body.split("\n"))
        return "\n".join(lines) + "\n"

    def serialize_document(self, segments: Iterable[MarkdownSegment]) -> str:
        """Render ``segments`` in the given order as one document.

        Parameters
        ----------
        segments:
            Segments to render.

        Returns
        -------
        str
            The document text.  Empty when ``segments`` is empty.
        """
        return "\n".join(self.serialize_segment(segment) for segment in segments)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def deserialize_document(
        self, text: str, *, throw_on_none: bool = False
    ) -> list[MarkdownSegment]:
        """Parse document text back into segments.

        Parameters
        ----------
        text:
            Document text, typically produced by ``serialize_document`` or
            edited by hand.
        throw_on_none:
            Raise ``EmptyDocumentError`` when no segment is found.

        Returns
        -------
        list[MarkdownSegment]
            Segments in source order.
        """
        return parse_segments(text, throw_on_none=throw_on_none)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _escape(line: str) -> str:
        if MARKER_LIKE.match(line):
            return ESCAPE_CHAR + line
        return line
