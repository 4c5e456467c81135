"""Domain model subpackage.

Public surface
--------------
- Agent           — participant with model identifier and prompt
- SessionPremise  — topic and description of a session
- StormMessage    — one conversation message
- Session         — full session snapshot
"""
from __future__ import annotations

from aistorm.models.domain import Agent, Session, SessionPremise, StormMessage

__all__ = [
    "Agent",
    "Session",
    "SessionPremise",
    "StormMessage",
]
