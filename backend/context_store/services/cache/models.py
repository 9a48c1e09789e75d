"""Pydantic models for cached conversation state and vector results."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContextMessage(BaseModel):
    """One turn of a conversation."""

    role: Literal["system", "user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class ContextMetadata(BaseModel):
    """Session metadata stored alongside the transcript."""

    model_config = ConfigDict(extra="allow")

    topic_id: str | None = None
    last_interaction: datetime = Field(default_factory=utcnow)
    start_time: datetime | None = None
    last_update: datetime | None = None
    message_count: int = Field(default=0, ge=0)
    active_commands: list[str] = Field(default_factory=list)
    relevant_documents: list[str] = Field(default_factory=list)


class ConversationContext(BaseModel):
    """Recent history and metadata for one (user, conversation) pair."""

    user_id: str = Field(..., min_length=1)
    conversation_id: str = Field(..., min_length=1)
    messages: list[ContextMessage] = Field(default_factory=list)
    metadata: ContextMetadata = Field(default_factory=ContextMetadata)


class VectorMatch(BaseModel):
    """A similarity search hit."""

    key: str
    score: float
    metadata: dict[str, Any] | None = None
