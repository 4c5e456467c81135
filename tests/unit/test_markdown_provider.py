"""Unit tests for aistorm.storage.markdown.provider.MarkdownStorageProvider.

Most tests run over InMemoryBackend instances; the filesystem layout is
checked separately with tmp_path.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from aistorm.config import StorageOptions
from aistorm.models.domain import Agent, Session, SessionPremise
from aistorm.storage.markdown.errors import MalformedDocumentError
from aistorm.storage.markdown.provider import MarkdownStorageProvider
from aistorm.storage.memory import InMemoryBackend
from aistorm.storage.provider import AgentNotFoundError, SessionNotFoundError

UTC = timezone.utc


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def agent_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def session_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def provider(
    agent_backend: InMemoryBackend, session_backend: InMemoryBackend
) -> MarkdownStorageProvider:
    return MarkdownStorageProvider(agent_backend, session_backend)


def _make_session(session_id: str = "debate") -> Session:
    session = Session(
        session_id=session_id,
        created=datetime(2024, 1, 1, tzinfo=UTC),
        premise=SessionPremise(session_id=session_id, title="Debate topic", description="Is X better than Y?"),
        agents=[Agent(name="Alice", model="m1"), Agent(name="Bob", model="m2")],
    )
    session.add_message("Alice", "X.", timestamp=datetime(2024, 1, 1, 0, 1, tzinfo=UTC))
    return session


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


class TestProviderAgents:
    def test_save_writes_markdown(
        self, provider: MarkdownStorageProvider, agent_backend: InMemoryBackend
    ) -> None:
        provider.save_agent("alice", Agent(name="Alice", model="m1", system_prompt="Hi"))
        assert agent_backend.load("alice") == "## @agent\nname: Alice\nmodel: m1\n\nHi\n"

    def test_save_then_load(self, provider: MarkdownStorageProvider) -> None:
        agent = Agent(name="Alice", model="m1", system_prompt="One\n\nTwo")
        provider.save_agent("alice", agent)
        assert provider.load_agent("alice") == agent

    def test_load_missing_raises(self, provider: MarkdownStorageProvider) -> None:
        with pytest.raises(AgentNotFoundError) as info:
            provider.load_agent("ghost")
        assert info.value.agent_id == "ghost"

    def test_load_malformed_fails_fast(
        self, provider: MarkdownStorageProvider, agent_backend: InMemoryBackend
    ) -> None:
        agent_backend.save("bad", "## @premise\ntitle: nope\n")
        with pytest.raises(MalformedDocumentError):
            provider.load_agent("bad")

    def test_list_sorted(self, provider: MarkdownStorageProvider) -> None:
        provider.save_agent("zed", Agent(name="Z", model="m"))
        provider.save_agent("amy", Agent(name="A", model="m"))
        assert provider.list_agents() == ["amy", "zed"]

    def test_delete(self, provider: MarkdownStorageProvider) -> None:
        provider.save_agent("amy", Agent(name="A", model="m"))
        provider.delete_agent("amy")
        assert provider.list_agents() == []
        with pytest.raises(AgentNotFoundError):
            provider.delete_agent("amy")

    def test_load_all_skips_broken(
        self,
        provider: MarkdownStorageProvider,
        agent_backend: InMemoryBackend,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        provider.save_agent("good", Agent(name="G", model="m"))
        agent_backend.save("broken", "## @agent\nname: NoModel\n")
        with caplog.at_level(logging.WARNING, logger="aistorm.storage.markdown.provider"):
            agents = provider.load_all_agents()
        assert list(agents) == ["good"]
        assert "broken" in caplog.text


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestProviderSessions:
    def test_save_then_load(self, provider: MarkdownStorageProvider) -> None:
        session = _make_session()
        provider.save_session("debate", session)
        assert provider.load_session("debate") == session

    def test_load_injects_requested_id(self, provider: MarkdownStorageProvider) -> None:
        provider.save_session("copy", _make_session("debate"))
        loaded = provider.load_session("copy")
        assert loaded.session_id == "copy"
        assert loaded.premise.session_id == "copy"

    def test_load_missing_raises(self, provider: MarkdownStorageProvider) -> None:
        with pytest.raises(SessionNotFoundError, match="ghost"):
            provider.load_session("ghost")

    def test_not_found_is_key_error(self, provider: MarkdownStorageProvider) -> None:
        with pytest.raises(KeyError):
            provider.load_session("ghost")

    def test_hand_edit_survives_reload(
        self, provider: MarkdownStorageProvider, session_backend: InMemoryBackend
    ) -> None:
        provider.save_session("debate", _make_session())
        edited = session_backend.load("debate").replace("title: Debate topic", "title: Revised topic")
        session_backend.save("debate", edited)
        assert provider.load_session("debate").premise.title == "Revised topic"

    def test_delete(self, provider: MarkdownStorageProvider) -> None:
        provider.save_session("debate", _make_session())
        provider.delete_session("debate")
        with pytest.raises(SessionNotFoundError):
            provider.delete_session("debate")

    def test_load_all_skips_broken(
        self,
        provider: MarkdownStorageProvider,
        session_backend: InMemoryBackend,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        provider.save_session("ok", _make_session("ok"))
        session_backend.save("no-created", "## @session\n\n## @premise\ntitle: T\n")
        with caplog.at_level(logging.WARNING, logger="aistorm.storage.markdown.provider"):
            sessions = provider.load_all_sessions()
        assert list(sessions) == ["ok"]
        assert "no-created" in caplog.text


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------


class TestProviderFromOptions:
    def test_directory_layout(self, tmp_path: Path) -> None:
        provider = MarkdownStorageProvider.from_options(StorageOptions(base_path=str(tmp_path)))
        provider.save_agent("alice", Agent(name="Alice", model="m1"))
        provider.save_session("debate", _make_session())
        assert (tmp_path / "AgentTemplates" / "alice.md").is_file()
        assert (tmp_path / "Sessions" / "debate.session.md").is_file()

    def test_round_trip_on_disk(self, tmp_path: Path) -> None:
        provider = MarkdownStorageProvider.from_options(StorageOptions(base_path=str(tmp_path)))
        session = _make_session()
        provider.save_session("debate", session)
        assert provider.list_sessions() == ["debate"]
        assert provider.load_session("debate") == session

    def test_custom_directory_names(self, tmp_path: Path) -> None:
        options = StorageOptions(
            base_path=str(tmp_path), agent_templates_dir="agents", sessions_dir="runs"
        )
        provider = MarkdownStorageProvider.from_options(options)
        provider.save_agent("a", Agent(name="A", model="m"))
        assert (tmp_path / "agents" / "a.md").is_file()

    def test_load_all_sessions_skips_undecodable_file(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        provider = MarkdownStorageProvider.from_options(StorageOptions(base_path=str(tmp_path)))
        provider.save_session("good", _make_session("good"))
        (tmp_path / "Sessions" / "binary.session.md").write_bytes(b"\xff\xfe\x00junk")
        with caplog.at_level(logging.WARNING, logger="aistorm.storage.markdown.provider"):
            sessions = provider.load_all_sessions()
        assert list(sessions) == ["good"]
        assert "binary" in caplog.text

    def test_load_all_agents_skips_undecodable_file(self, tmp_path: Path) -> None:
        provider = MarkdownStorageProvider.from_options(StorageOptions(base_path=str(tmp_path)))
        provider.save_agent("alice", Agent(name="Alice", model="m1"))
        (tmp_path / "AgentTemplates" / "latin1.md").write_bytes("name: Zoë".encode("latin-1"))
        assert list(provider.load_all_agents()) == ["alice"]

    def test_load_all_sessions_skips_unreadable_file(self) -> None:
        class _Unreadable(InMemoryBackend):
            def _read_file(self, name: str) -> str | None:
                if name.startswith("locked"):
                    raise PermissionError(13, "Permission denied", name)
                return super()._read_file(name)

        sessions = _Unreadable(extension=".session.md")
        provider = MarkdownStorageProvider(InMemoryBackend(), sessions)
        provider.save_session("good", _make_session("good"))
        sessions.save("locked", "whatever")
        assert list(provider.load_all_sessions()) == ["good"]

    def test_byte_order_mark_file_loads(self, tmp_path: Path) -> None:
        provider = MarkdownStorageProvider.from_options(StorageOptions(base_path=str(tmp_path)))
        session = _make_session("bom")
        provider.save_session("bom", session)
        path = tmp_path / "Sessions" / "bom.session.md"
        path.write_text("\ufeff" + path.read_text(encoding="utf-8"), encoding="utf-8")
        assert provider.load_session("bom") == session
