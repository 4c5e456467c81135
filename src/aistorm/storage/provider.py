"""Storage provider interface.

A storage provider loads and saves domain objects by identifier.  It is
the seam between session orchestration and any concrete document format.

Classes
-------
- StorageProvider       — abstract provider
- AgentNotFoundError    — no template stored under the requested ID
- SessionNotFoundError  — no session stored under the requested ID
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from aistorm.models.domain import Agent, Session


class AgentNotFoundError(KeyError):
    """Raised when a requested agent template does not exist."""

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent template {agent_id!r} not found.")


class SessionNotFoundError(KeyError):
    """Raised when a requested session does not exist."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id!r} not found.")


class StorageProvider(ABC):
    """Load and save agents and sessions by identifier."""

    @abstractmethod
    def load_agent(self, agent_id: str) -> Agent:
        """Return the agent template stored under ``agent_id``.

        Raises
        ------
        AgentNotFoundError
            If nothing is stored under ``agent_id``.
        """

    @abstractmethod
    def save_agent(self, agent_id: str, agent: Agent) -> None:
        """Persist ``agent`` as the template ``agent_id``."""

    @abstractmethod
    def load_session(self, session_id: str) -> Session:
        """Return the session stored under ``session_id``.

        Raises
        ------
        SessionNotFoundError
            If nothing is stored under ``session_id``.
        """

    @abstractmethod
    def save_session(self, session_id: str, session: Session) -> None:
        """Persist ``session`` under ``session_id``."""

    @abstractmethod
    def list_agents(self) -> list[str]:
        """Return stored agent template IDs."""

    @abstractmethod
    def list_sessions(self) -> list[str]:
        """Return stored session IDs."""
