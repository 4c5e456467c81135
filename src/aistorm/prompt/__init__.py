"""Prompt text helpers."""
from __future__ import annotations

from aistorm.prompt.tools import remove_agent_name_prefix_from_message, strip_blank_edge_lines

__all__ = ["remove_agent_name_prefix_from_message", "strip_blank_edge_lines"]
