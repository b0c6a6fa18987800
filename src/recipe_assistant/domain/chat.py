"""Domain models for chat conversations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

MessageRole = Literal["user", "assistant", "system"]

DEFAULT_SESSION_TITLE = "New Recipe Chat"


@dataclass(frozen=True)
class ChatMessage:
    """One turn in a conversation."""

    user_id: str
    session_id: str
    role: MessageRole
    content: str
    message_type: str = "general"
    timestamp: datetime | None = None
    metadata: dict[str, object] = field(default_factory=dict)
    id: str | None = None


@dataclass(frozen=True)
class ChatSession:
    """Grouping of chat messages with rolling summary metadata."""

    user_id: str
    session_id: str
    title: str
    created_at: datetime
    updated_at: datetime
    message_count: int = 0
    summary: str | None = None
    last_summarized_at: datetime | None = None
    id: str | None = None
