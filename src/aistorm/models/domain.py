"""Storm domain models.

All types are Pydantic BaseModel subclasses to enable runtime validation
and plain field access from the storage layer.

Classes
-------
- Agent           — a participant with a model identifier and system prompt
- SessionPremise  — the topic and description that frame a session
- StormMessage    — one message spoken by an agent
- Session         — top-level conversation snapshot
"""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from aistorm.prompt.tools import remove_agent_name_prefix_from_message


def _require_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("timestamp must be timezone-aware")
    return value.astimezone(timezone.utc)


class Agent(BaseModel):
    """A session participant.

    Parameters
    ----------
    name:
        Display name; also the sender name on the agent's messages.
    model:
        Identifier of the AI model that speaks for this agent.
    system_prompt:
        Prompt template handed to the model.  May span many paragraphs.
    """

    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    system_prompt: str = ""

    model_config = {"frozen": False}


class SessionPremise(BaseModel):
    """The topic of a session.

    Parameters
    ----------
    session_id:
        Owning session.  Supplied by the caller on load, never stored in
        the premise block of a document.
    title:
        Short topic line.
    description:
        Longer free-text framing of the topic.
    """

    session_id: str
    title: str = Field(min_length=1)
    description: str = ""

    model_config = {"frozen": False}


class StormMessage(BaseModel):
    """A single message in the conversation.

    Parameters
    ----------
    agent_name:
        Name of the agent (or human) that sent the message.
    content:
        Message text with any self-signed name prefix removed.
    timestamp:
        When the message was produced.  Always stored in UTC.
    """

    agent_name: str = Field(min_length=1)
    content: str
    timestamp: datetime

    model_config = {"frozen": False}

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return _require_utc(value)


class Session(BaseModel):
    """Complete snapshot of a storm session.

    Parameters
    ----------
    session_id:
        Identifier the session is stored under.
    created:
        Session creation timestamp (UTC).
    premise:
        The framing topic.
    agents:
        Participants in participation order.
    messages:
        Conversation in chronological order.
    """

    session_id: str
    created: datetime
    premise: SessionPremise
    agents: list[Agent] = Field(default_factory=list)
    messages: list[StormMessage] = Field(default_factory=list)

    model_config = {"frozen": False}

    @field_validator("created")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return _require_utc(value)

    def agent_names(self) -> list[str]:
        """Return agent names in participation order."""
        return [agent.name for agent in self.agents]

    def add_message(
        self,
        agent_name: str,
        content: str,
        *,
        timestamp: datetime | None = None,
    ) -> StormMessage:
        """Append a message and return it.

        The content is passed through the name-prefix cleaner so that an
        agent signing its own reply does not leak into the transcript.

        Parameters
        ----------
        agent_name:
            Sender name.
        content:
            Raw message text.
        timestamp:
            Send time.  Defaults to now (UTC).

        Returns
        -------
        StormMessage
            The newly appended message.
        """
        message = StormMessage(
            agent_name=agent_name,
            content=remove_agent_name_prefix_from_message(content, agent_name),
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self.messages.append(message)
        return message
