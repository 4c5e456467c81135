"""Whole-document composition for session and agent-template files.

A session document is one ``session`` segment, one ``premise`` segment,
the agents in participation order and the messages in conversation order,
exactly in that sequence.  An agent-template document is a single
``agent`` segment.

These functions work on text and segments only; reading and writing files
is left to the storage provider.
"""
from __future__ import annotations

from collections.abc import Sequence

from aistorm.models.domain import Agent, Session
from aistorm.storage.markdown.errors import MalformedDocumentError
from aistorm.storage.markdown.format import KEY_CREATED, SegmentType
from aistorm.storage.markdown.segment import MarkdownSegment
from aistorm.storage.markdown.serializer import MarkdownSerializer

_SESSION_ORDER: dict[SegmentType, int] = {
    SegmentType.SESSION: 0,
    SegmentType.PREMISE: 1,
    SegmentType.AGENT: 2,
    SegmentType.MESSAGE: 3,
}


def _single(segments: Sequence[MarkdownSegment], segment_type: SegmentType) -> MarkdownSegment:
    matches = [s for s in segments if s.segment_type is segment_type]
    if len(matches) != 1:
        raise MalformedDocumentError(
            f"Expected exactly one {segment_type.value!r} segment, found {len(matches)}"
        )
    return matches[0]


def _check_order(segments: Sequence[MarkdownSegment]) -> None:
    previous: MarkdownSegment | None = None
    for index, segment in enumerate(segments):
        if previous is not None and (
            _SESSION_ORDER[segment.segment_type] < _SESSION_ORDER[previous.segment_type]
        ):
            raise MalformedDocumentError(
                f"{segment.segment_type.value!r} segment cannot follow "
                f"{previous.segment_type.value!r} segment",
                block_index=segment.block_index if segment.block_index is not None else index,
            )
        previous = segment


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def session_from_segments(session_id: str, segments: Sequence[MarkdownSegment]) -> Session:
    """Rebuild a ``Session`` from parsed segments.

    Parameters
    ----------
    session_id:
        Identifier the document was stored under.  Injected into the
        session and its premise.
    segments:
        Segments in document order.

    Returns
    -------
    Session
        The reconstructed session with agents and messages in source order.

    Raises
    ------
    MalformedDocumentError
        If the segments are out of canonical order or the session/premise
        segment is missing or repeated.
    InvalidTimestampError
        If ``created`` or a message ``timestamp`` is missing or unparsable.
    MissingRequiredFieldError
        If an agent, premise or message segment lacks a mandatory key.
    """
    _check_order(segments)
    created = _single(segments, SegmentType.SESSION).get_required_timestamp_utc(KEY_CREATED)
    premise = _single(segments, SegmentType.PREMISE).to_premise(session_id)
    agents = [s.to_agent() for s in segments if s.segment_type is SegmentType.AGENT]
    messages = [
        s.to_storm_message() for s in segments if s.segment_type is SegmentType.MESSAGE
    ]
    return Session(
        session_id=session_id,
        created=created,
        premise=premise,
        agents=agents,
        messages=messages,
    )


def session_to_segments(session: Session) -> list[MarkdownSegment]:
    """Return the segments for ``session`` in canonical document order."""
    segments = [
        MarkdownSegment.from_session_metadata(session),
        MarkdownSegment.from_premise(session.premise),
    ]
    segments.extend(MarkdownSegment.from_agent(agent) for agent in session.agents)
    segments.extend(MarkdownSegment.from_message(message) for message in session.messages)
    return segments


def load_session_document(
    session_id: str, text: str, serializer: MarkdownSerializer | None = None
) -> Session:
    """Parse session document ``text`` stored under ``session_id``."""
    segments = MarkdownSegment.parse_segments(text, serializer, throw_on_none=True)
    return session_from_segments(session_id, segments)


def dump_session_document(
    session: Session, serializer: MarkdownSerializer | None = None
) -> str:
    """Render ``session`` as session document text."""
    return (serializer or MarkdownSerializer()).serialize_document(session_to_segments(session))


# ---------------------------------------------------------------------------
# Agent templates
# ---------------------------------------------------------------------------


def agent_from_segments(segments: Sequence[MarkdownSegment]) -> Agent:
    """Convert the single segment of an agent-template document.

    Raises
    ------
    MalformedDocumentError
        Unless ``segments`` is exactly one ``agent`` segment.
    """
    if len(segments) != 1 or segments[0].segment_type is not SegmentType.AGENT:
        found = ", ".join(s.segment_type.value for s in segments) or "nothing"
        raise MalformedDocumentError(
            f"Agent template must contain exactly one 'agent' segment, found {found}"
        )
    return segments[0].to_agent()


def load_agent_document(text: str, serializer: MarkdownSerializer | None = None) -> Agent:
    """Parse agent-template document ``text``."""
    return agent_from_segments(
        MarkdownSegment.parse_segments(text, serializer, throw_on_none=True)
    )


def dump_agent_document(agent: Agent, serializer: MarkdownSerializer | None = None) -> str:
    """Render ``agent`` as agent-template document text."""
    return MarkdownSegment.from_agent(agent).to_markdown(serializer)
