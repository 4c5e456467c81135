"""Unit tests for aistorm.storage.markdown.serializer.

Tests cover the exact rendered text, determinism, marker escaping and the
parse-after-serialize round trip.
"""
from __future__ import annotations

import pytest

from aistorm.storage.markdown.format import SegmentType
from aistorm.storage.markdown.segment import MarkdownSegment
from aistorm.storage.markdown.serializer import MarkdownSerializer


@pytest.fixture()
def serializer() -> MarkdownSerializer:
    return MarkdownSerializer()


def _sample_segments() -> list[MarkdownSegment]:
    return [
        MarkdownSegment(SegmentType.SESSION, {"created": "2024-01-01T00:00:00Z"}),
        MarkdownSegment(SegmentType.PREMISE, {"title": "Debate topic"}, "Is X better than Y?"),
        MarkdownSegment(
            SegmentType.AGENT,
            {"name": "Alice", "model": "m1"},
            "You are Alice.\n\nArgue for X.",
        ),
        MarkdownSegment(
            SegmentType.MESSAGE,
            {"sender": "Alice", "timestamp": "2024-01-01T00:01:00Z"},
            "I think X is better.",
        ),
    ]


# ---------------------------------------------------------------------------
# Single segment rendering
# ---------------------------------------------------------------------------


class TestSerializeSegment:
    def test_marker_only(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.SESSION)
        assert serializer.serialize_segment(segment) == "## @session\n"

    def test_metadata_without_body(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.SESSION, {"created": "2024-01-01T00:00:00Z"})
        assert serializer.serialize_segment(segment) == (
            "## @session\ncreated: 2024-01-01T00:00:00Z\n"
        )

    def test_metadata_and_body(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.AGENT, {"name": "A", "model": "m"}, "Prompt")
        assert serializer.serialize_segment(segment) == (
            "## @agent\nname: A\nmodel: m\n\nPrompt\n"
        )

    def test_body_without_metadata(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.PREMISE, {}, "Body")
        assert serializer.serialize_segment(segment) == "## @premise\n\nBody\n"

    def test_metadata_order_is_not_sorted(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.AGENT, {"model": "m", "name": "A"})
        assert serializer.serialize_segment(segment) == "## @agent\nmodel: m\nname: A\n"

    def test_empty_value_has_no_trailing_space(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.PREMISE, {"title": ""})
        assert serializer.serialize_segment(segment) == "## @premise\ntitle:\n"

    def test_marker_like_body_line_escaped(self, serializer: MarkdownSerializer) -> None:
        segment = MarkdownSegment(SegmentType.MESSAGE, {}, "## @agent\n\\## @x")
        assert serializer.serialize_segment(segment) == (
            "## @message\n\n\\## @agent\n\\\\## @x\n"
        )

    def test_to_markdown_matches_serializer(self, serializer: MarkdownSerializer) -> None:
        segment = _sample_segments()[2]
        assert segment.to_markdown() == serializer.serialize_segment(segment)


# ---------------------------------------------------------------------------
# Document rendering
# ---------------------------------------------------------------------------


class TestSerializeDocument:
    def test_empty_document(self, serializer: MarkdownSerializer) -> None:
        assert serializer.serialize_document([]) == ""

    def test_full_document_text(self, serializer: MarkdownSerializer) -> None:
        expected = (
            "## @session\n"
            "created: 2024-01-01T00:00:00Z\n"
            "\n"
            "## @premise\n"
            "title: Debate topic\n"
            "\n"
            "Is X better than Y?\n"
            "\n"
            "## @agent\n"
            "name: Alice\n"
            "model: m1\n"
            "\n"
            "You are Alice.\n"
            "\n"
            "Argue for X.\n"
            "\n"
            "## @message\n"
            "sender: Alice\n"
            "timestamp: 2024-01-01T00:01:00Z\n"
            "\n"
            "I think X is better.\n"
        )
        assert serializer.serialize_document(_sample_segments()) == expected

    def test_deterministic(self, serializer: MarkdownSerializer) -> None:
        first = serializer.serialize_document(_sample_segments())
        second = MarkdownSerializer().serialize_document(_sample_segments())
        assert first == second

    def test_ends_with_single_newline(self, serializer: MarkdownSerializer) -> None:
        text = serializer.serialize_document(_sample_segments())
        assert text.endswith("\n")
        assert not text.endswith("\n\n")


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_parse_after_serialize_equals_input(self, serializer: MarkdownSerializer) -> None:
        segments = _sample_segments()
        text = serializer.serialize_document(segments)
        assert serializer.deserialize_document(text) == segments

    def test_round_trip_tricky_bodies(self, serializer: MarkdownSerializer) -> None:
        segments = [
            MarkdownSegment(SegmentType.MESSAGE, {}, "key: value looking line"),
            MarkdownSegment(SegmentType.MESSAGE, {"sender": "A"}, "## @session\n\n\n## heading"),
            MarkdownSegment(SegmentType.MESSAGE, {"sender": ""}, "    indented\n\ttabbed"),
            MarkdownSegment(SegmentType.AGENT, {"name": "A", "model": "m"}, ""),
            MarkdownSegment(SegmentType.MESSAGE, {}, "\\\\## @deep"),
        ]
        text = serializer.serialize_document(segments)
        assert serializer.deserialize_document(text) == segments

    def test_serialize_after_parse_is_stable(self, serializer: MarkdownSerializer) -> None:
        text = serializer.serialize_document(_sample_segments())
        again = serializer.serialize_document(serializer.deserialize_document(text))
        assert again == text

    def test_hand_edited_whitespace_normalises(self, serializer: MarkdownSerializer) -> None:
        text = "\n## @premise\ntitle:   Topic  \n\n\n\nBody\n\n\n\n"
        segments = serializer.deserialize_document(text)
        assert serializer.serialize_document(segments) == "## @premise\ntitle: Topic\n\nBody\n"

    def test_parse_segments_classmethod(self, serializer: MarkdownSerializer) -> None:
        text = serializer.serialize_document(_sample_segments())
        assert MarkdownSegment.parse_segments(text, serializer) == _sample_segments()
