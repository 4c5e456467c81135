"""Markdown-backed storage provider.

Glues raw text backends to the markdown document core: text is read from
a backend, parsed, and converted, or the reverse on save.  Agent templates
and sessions live in separate backends (``AgentTemplates/<id>.md`` and
``Sessions/<id>.session.md`` on disk).

Classes
-------
- MarkdownStorageProvider  — StorageProvider over two StorageBackends
"""
from __future__ import annotations

import logging
from pathlib import Path

from aistorm.config import StorageOptions
from aistorm.models.domain import Agent, Session
from aistorm.storage.base import StorageBackend
from aistorm.storage.filesystem import FilesystemBackend
from aistorm.storage.markdown.document import (
    dump_agent_document,
    dump_session_document,
    load_agent_document,
    load_session_document,
)
from aistorm.storage.markdown.errors import MarkdownDocumentError
from aistorm.storage.markdown.format import AGENT_EXTENSION, SESSION_EXTENSION
from aistorm.storage.markdown.serializer import MarkdownSerializer
from aistorm.storage.provider import (
    AgentNotFoundError,
    SessionNotFoundError,
    StorageProvider,
)

logger = logging.getLogger(__name__)


class MarkdownStorageProvider(StorageProvider):
    """Load and save agents and sessions as markdown documents.

    Single-document loads fail fast with the document error.  The bulk
    loaders ``load_all_agents`` and ``load_all_sessions`` log and skip
    documents that cannot be read or parsed.

    Parameters
    ----------
    agent_backend:
        Backend holding agent-template documents.
    session_backend:
        Backend holding session documents.
    serializer:
        Optional serializer instance.  Defaults to ``MarkdownSerializer()``.
    """

    def __init__(
        self,
        agent_backend: StorageBackend,
        session_backend: StorageBackend,
        serializer: MarkdownSerializer | None = None,
    ) -> None:
        self._agents = agent_backend
        self._sessions = session_backend
        self._serializer = serializer or MarkdownSerializer()

    @classmethod
    def from_options(
        cls,
        options: StorageOptions,
        serializer: MarkdownSerializer | None = None,
    ) -> MarkdownStorageProvider:
        """Build a provider over filesystem backends rooted at ``options.base_path``."""
        base = Path(options.base_path).expanduser().resolve()
        provider = cls(
            FilesystemBackend(base / options.agent_templates_dir, AGENT_EXTENSION),
            FilesystemBackend(base / options.sessions_dir, SESSION_EXTENSION),
            serializer,
        )
        logger.info("MarkdownStorageProvider initialized with base path: %s", base)
        return provider

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def load_agent(self, agent_id: str) -> Agent:
        if not self._agents.exists(agent_id):
            raise AgentNotFoundError(agent_id)
        content = self._agents.load(agent_id)
        return load_agent_document(content, self._serializer)

    def save_agent(self, agent_id: str, agent: Agent) -> None:
        self._agents.save(agent_id, dump_agent_document(agent, self._serializer))
        logger.debug("Saved agent template %r", agent_id)

    def list_agents(self) -> list[str]:
        return sorted(self._agents.list())

    def delete_agent(self, agent_id: str) -> None:
        if not self._agents.exists(agent_id):
            raise AgentNotFoundError(agent_id)
        self._agents.delete(agent_id)

    def load_all_agents(self) -> dict[str, Agent]:
        """Return every readable agent template keyed by ID.

        Templates that cannot be read or parsed are logged and
        skipped.
        """
        agents: dict[str, Agent] = {}
        for agent_id in self.list_agents():
            try:
                agents[agent_id] = self.load_agent(agent_id)
            except (MarkdownDocumentError, KeyError, UnicodeDecodeError, OSError) as exc:
                logger.warning("Skipping agent template %r: %s", agent_id, exc)
        return agents

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def load_session(self, session_id: str) -> Session:
        logger.info("Loading session %r", session_id)
        if not self._sessions.exists(session_id):
            raise SessionNotFoundError(session_id)
        content = self._sessions.load(session_id)
        return load_session_document(session_id, content, self._serializer)

    def save_session(self, session_id: str, session: Session) -> None:
        self._sessions.save(session_id, dump_session_document(session, self._serializer))
        logger.debug(
            "Saved session %r with %d agent(s) and %d message(s)",
            session_id,
            len(session.agents),
            len(session.messages),
        )

    def list_sessions(self) -> list[str]:
        return sorted(self._sessions.list())

    def delete_session(self, session_id: str) -> None:
        if not self._sessions.exists(session_id):
            raise SessionNotFoundError(session_id)
        self._sessions.delete(session_id)

    def load_all_sessions(self) -> dict[str, Session]:
        """Return every readable session keyed by ID.

        Sessions that cannot be read or parsed are logged and
        skipped.
        """
        sessions: dict[str, Session] = {}
        for session_id in self.list_sessions():
            try:
                sessions[session_id] = self.load_session(session_id)
            except (MarkdownDocumentError, KeyError, UnicodeDecodeError, OSError) as exc:
                logger.warning("Skipping session %r: %s", session_id, exc)
        return sessions

    def __repr__(self) -> str:
        return f"MarkdownStorageProvider(agents={self._agents!r}, sessions={self._sessions!r})"
