"""
AIStorm markdown document format
================================

Layout:
    ## @session                  <- Marker line: prefix + type token
    created: <iso-8601>          <- Metadata, one ``key: value`` per line
                                 <- Blank line ends the metadata header
    ## @premise
    title: <topic>

    <description>                <- Body, verbatim up to the next marker
    ## @agent
    name: <agent name>
    model: <model id>

    <system prompt>
    ## @message
    sender: <agent name>
    timestamp: <iso-8601>

    <message text>

Design Decisions:
    - ``## @`` renders as a level-two heading, so the file stays readable
      in any markdown viewer, while the ``@`` keeps it from colliding with
      ordinary headings inside prompts and messages
    - Metadata keys are written in the order they were stored; no sorting
    - Body lines that would read as a marker are escaped with a backslash
    - Timestamps are written in UTC with a ``Z`` suffix.  On read any
      ISO-8601 form ``datetime.fromisoformat`` accepts (Python 3.11+) is
      allowed as long as it carries an offset: ``Z``, ``+02:00``, any
      fraction length such as ``.5``, or a space instead of ``T``
    - A leading UTF-8 byte order mark is ignored
"""

from __future__ import annotations

import re
from enum import Enum


class SegmentType(str, Enum):
    """Type token carried on every marker line."""

    SESSION = "session"
    PREMISE = "premise"
    AGENT = "agent"
    MESSAGE = "message"


MARKER_PREFIX = "## @"

# A body line matching this (after optional backslashes) needs escaping.
MARKER_LIKE = re.compile(r"^(\\*)## @")
ESCAPE_CHAR = "\\"

METADATA_KEY = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
METADATA_LINE = re.compile(r"^([A-Za-z][A-Za-z0-9_-]*):(?:[ \t]+(.*))?$")

# Metadata keys per segment type
KEY_CREATED = "created"
KEY_TITLE = "title"
KEY_NAME = "name"
KEY_MODEL = "model"
KEY_SENDER = "sender"
KEY_TIMESTAMP = "timestamp"

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
UTC_SUFFIX = "Z"

BYTE_ORDER_MARK = "\ufeff"

# File naming used by the storage provider
AGENT_EXTENSION = ".md"
SESSION_EXTENSION = ".session.md"
