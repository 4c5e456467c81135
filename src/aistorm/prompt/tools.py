"""Text helpers shared by prompt construction and message storage.

Models frequently sign their own replies ("Alice: I think...") because the
transcript they are shown is formatted that way.  The cleaner below removes
such prefixes so stored messages hold only what was said.
"""
from __future__ import annotations

import re

# [Anyone]: ...  /  **Anyone**: ...  /  **Anyone:** ...
_GENERIC_PREFIXES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\[[^\]\n]+\][ \t]*:"),
    re.compile(r"^\*\*[^*\n]+?\*\*[ \t]*:"),
    re.compile(r"^\*\*[^*\n]+?:\*\*"),
)

_NAMED_TEMPLATES: tuple[str, ...] = (
    r"^\[{name}\][ \t]*:",
    r"^\*\*{name}\*\*[ \t]*:",
    r"^\*\*{name}:\*\*",
    r"^{name}[ \t]*:",
)


def strip_blank_edge_lines(text: str) -> str:
    """Drop leading and trailing lines that hold only whitespace.

    Indentation of the first kept line and interior blank lines survive.
    """
    lines = text.split("\n")
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def _prefix_patterns(agent_name: str | None) -> tuple[re.Pattern[str], ...]:
    if not agent_name or not agent_name.strip():
        return _GENERIC_PREFIXES
    name = re.escape(agent_name.strip())
    return tuple(
        re.compile(template.format(name=name), re.IGNORECASE)
        for template in _NAMED_TEMPLATES
    )


def remove_agent_name_prefix_from_message(
    message: str, agent_name: str | None = None
) -> str:
    """Strip leading speaker prefixes from ``message``.

    With ``agent_name`` only that agent's own signature is removed, in any
    of the forms ``Name:``, ``[Name]:``, ``**Name**:`` or ``**Name:**``
    (case-insensitive).  Openings such as ``**Note**:`` or a reference
    link ``[1]: https://...`` are kept.

    Without ``agent_name`` the sender is unknown, so any bracketed or bold
    speaker prefix is removed; a plain ``Word:`` opening is kept.

    Line endings become ``\\n``.  Only blank edge lines and the spaces
    after a removed prefix are trimmed, so indentation of the first line
    is preserved.  Applying the
    function twice gives the same result as applying it once.

    Parameters
    ----------
    message:
        Raw message text.
    agent_name:
        Name of the sending agent, if known.

    Returns
    -------
    str
        The cleaned message.
    """
    patterns = _prefix_patterns(agent_name)
    cleaned = strip_blank_edge_lines(message.replace("\r\n", "\n").replace("\r", "\n"))
    while True:
        for pattern in patterns:
            match = pattern.match(cleaned)
            if match:
                remainder = cleaned[match.end():].lstrip(" \t")
                cleaned = strip_blank_edge_lines(remainder)
                break
        else:
            return cleaned
