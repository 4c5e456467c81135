"""Markdown segment model and domain converters.

A ``MarkdownSegment`` is one typed block of a markdown document: the type
token from its marker line, an ordered metadata mapping, and a free-text
body.  Segments are immutable values built fresh on every parse and on
every save.

Converters map segments to and from the domain models.  Each direction is
a pure function that either succeeds or raises one of the errors in
``aistorm.storage.markdown.errors``; nothing is defaulted or repaired.

Classes
-------
- MarkdownSegment  — frozen segment value with converter methods

Functions
---------
- normalize_body    — canonical body text (line endings, edge blank lines)
- format_timestamp  — render an aware datetime as ``...Z``
- parse_timestamp   — parse an offset-bearing ISO-8601 string into UTC
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING

from aistorm.models.domain import Agent, Session, SessionPremise, StormMessage
from aistorm.prompt.tools import remove_agent_name_prefix_from_message, strip_blank_edge_lines
from aistorm.storage.markdown.errors import (
    InvalidTimestampError,
    MalformedDocumentError,
    MissingRequiredFieldError,
)
from aistorm.storage.markdown.format import (
    KEY_CREATED,
    KEY_MODEL,
    KEY_NAME,
    KEY_SENDER,
    KEY_TIMESTAMP,
    KEY_TITLE,
    METADATA_KEY,
    TIMESTAMP_FORMAT,
    UTC_SUFFIX,
    SegmentType,
)

if TYPE_CHECKING:
    from aistorm.storage.markdown.serializer import MarkdownSerializer


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def normalize_body(text: str) -> str:
    """Return ``text`` with ``\\n`` line endings and no blank edge lines.

    Interior blank lines and indentation are kept as written.
    """
    return strip_blank_edge_lines(text.replace("\r\n", "\n").replace("\r", "\n"))


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as ``YYYY-MM-DDTHH:MM:SS[.ffffff]Z``.

    Raises
    ------
    ValueError
        If ``value`` is naive.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"Cannot format naive datetime {value!r}")
    utc = value.astimezone(timezone.utc)
    text = utc.strftime(TIMESTAMP_FORMAT)
    if utc.microsecond:
        text += f".{utc.microsecond:06d}"
    return text + UTC_SUFFIX


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string with an explicit offset into a UTC datetime.

    Raises
    ------
    ValueError
        If the string is not ISO-8601 or carries no offset.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise ValueError(f"Timestamp {value!r} has no UTC offset")
    return parsed.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Segment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MarkdownSegment:
    """One typed block of a markdown document.

    Attributes
    ----------
    segment_type:
        Which converter applies.  Plain strings are coerced to
        ``SegmentType``.
    metadata:
        Ordered, read-only ``key -> value`` mapping.  Values are single
        lines; surrounding whitespace is stripped.
    body:
        Free text, normalised with ``normalize_body``.
    block_index:
        Position in the source document when produced by the parser.
        Used only for error context and excluded from equality.
    """

    segment_type: SegmentType
    metadata: Mapping[str, str] = field(default_factory=dict)
    body: str = ""
    block_index: int | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        try:
            segment_type = SegmentType(self.segment_type)
        except ValueError:
            raise MalformedDocumentError(
                f"Unknown segment type {self.segment_type!r}",
                block_index=self.block_index,
            ) from None

        ordered: dict[str, str] = {}
        for key, value in _pairs(self.metadata):
            if not isinstance(key, str) or not METADATA_KEY.match(key):
                raise MalformedDocumentError(
                    f"Invalid metadata key {key!r}", block_index=self.block_index
                )
            if not isinstance(value, str):
                raise MalformedDocumentError(
                    f"Metadata value for {key!r} must be a string, got {type(value).__name__}",
                    block_index=self.block_index,
                )
            if "\n" in value or "\r" in value:
                raise MalformedDocumentError(
                    f"Metadata value for {key!r} must be a single line",
                    block_index=self.block_index,
                )
            if key in ordered:
                raise MalformedDocumentError(
                    f"Duplicate metadata key {key!r}", block_index=self.block_index
                )
            ordered[key] = value.strip()

        object.__setattr__(self, "segment_type", segment_type)
        object.__setattr__(self, "metadata", MappingProxyType(ordered))
        object.__setattr__(self, "body", normalize_body(self.body))

    def __hash__(self) -> int:
        return hash((self.segment_type, frozenset(self.metadata.items()), self.body))

    # ------------------------------------------------------------------
    # Metadata access
    # ------------------------------------------------------------------

    def get_segment_type(self) -> str:
        """Return the type token as a plain string."""
        return self.segment_type.value

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the metadata value for ``key`` or ``default``."""
        return self.metadata.get(key, default)

    def get_required(self, key: str) -> str:
        """Return the non-empty metadata value for ``key``.

        Raises
        ------
        MissingRequiredFieldError
            If ``key`` is absent or its value is empty.
        """
        value = self.metadata.get(key)
        if not value:
            raise MissingRequiredFieldError(
                key,
                segment_type=self.segment_type.value,
                block_index=self.block_index,
            )
        return value

    def get_required_timestamp_utc(self, key: str) -> datetime:
        """Parse the metadata value at ``key`` into an aware UTC datetime.

        Raises
        ------
        InvalidTimestampError
            If ``key`` is absent or its value is not an ISO-8601 timestamp
            with an explicit offset.  There is no fallback value.
        """
        value = self.metadata.get(key)
        if value is None:
            raise InvalidTimestampError(key, block_index=self.block_index)
        try:
            return parse_timestamp(value)
        except ValueError:
            raise InvalidTimestampError(
                key, value, block_index=self.block_index
            ) from None

    # ------------------------------------------------------------------
    # Domain conversion: segment -> model
    # ------------------------------------------------------------------

    def _expect(self, expected: SegmentType) -> None:
        if self.segment_type is not expected:
            raise MalformedDocumentError(
                f"Expected a {expected.value!r} segment, got {self.segment_type.value!r}",
                block_index=self.block_index,
            )

    def to_agent(self) -> Agent:
        """Convert an agent segment into an ``Agent``."""
        self._expect(SegmentType.AGENT)
        return Agent(
            name=self.get_required(KEY_NAME),
            model=self.get_required(KEY_MODEL),
            system_prompt=self.body,
        )

    def to_premise(self, session_id: str) -> SessionPremise:
        """Convert a premise segment, attaching the caller's ``session_id``."""
        self._expect(SegmentType.PREMISE)
        return SessionPremise(
            session_id=session_id,
            title=self.get_required(KEY_TITLE),
            description=self.body,
        )

    def to_storm_message(self) -> StormMessage:
        """Convert a message segment into a ``StormMessage``.

        The body is cleaned of any leading self-signature by the sender.
        """
        self._expect(SegmentType.MESSAGE)
        sender = self.get_required(KEY_SENDER)
        timestamp = self.get_required_timestamp_utc(KEY_TIMESTAMP)
        return StormMessage(
            agent_name=sender,
            content=remove_agent_name_prefix_from_message(self.body, sender),
            timestamp=timestamp,
        )

    # ------------------------------------------------------------------
    # Domain conversion: model -> segment
    # ------------------------------------------------------------------

    @classmethod
    def from_agent(cls, agent: Agent) -> MarkdownSegment:
        return cls(
            SegmentType.AGENT,
            {KEY_NAME: agent.name, KEY_MODEL: agent.model},
            agent.system_prompt,
        )

    @classmethod
    def from_premise(cls, premise: SessionPremise) -> MarkdownSegment:
        return cls(SegmentType.PREMISE, {KEY_TITLE: premise.title}, premise.description)

    @classmethod
    def from_message(cls, message: StormMessage) -> MarkdownSegment:
        return cls(
            SegmentType.MESSAGE,
            {
                KEY_SENDER: message.agent_name,
                KEY_TIMESTAMP: format_timestamp(message.timestamp),
            },
            message.content,
        )

    @classmethod
    def from_session_metadata(cls, session: Session) -> MarkdownSegment:
        return cls(SegmentType.SESSION, {KEY_CREATED: format_timestamp(session.created)})

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def to_markdown(self, serializer: MarkdownSerializer | None = None) -> str:
        """Render this segment as a standalone document."""
        from aistorm.storage.markdown.serializer import MarkdownSerializer

        return (serializer or MarkdownSerializer()).serialize_document([self])

    @classmethod
    def parse_segments(
        cls,
        text: str,
        serializer: MarkdownSerializer | None = None,
        *,
        throw_on_none: bool = False,
    ) -> list[MarkdownSegment]:
        """Parse ``text`` into segments.  See ``parser.parse_segments``."""
        from aistorm.storage.markdown.serializer import MarkdownSerializer

        return (serializer or MarkdownSerializer()).deserialize_document(
            text, throw_on_none=throw_on_none
        )


def _pairs(metadata: Mapping[str, str] | Iterable[tuple[str, str]]) -> Iterable[tuple[str, str]]:
    if isinstance(metadata, Mapping):
        return metadata.items()
    return metadata
