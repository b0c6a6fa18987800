"""Supabase-backed chat message and session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from recipe_assistant.database import SupabaseHandle
from recipe_assistant.domain.chat import ChatMessage, ChatSession
from recipe_assistant.services.conversations import ChatRepository

_MESSAGE_COLUMNS = (
    "id, user_id, session_id, role, content, message_type, metadata, sent_at"
)
_SESSION_COLUMNS = (
    "id, user_id, session_id, title, created_at, updated_at, message_count, "
    "summary, last_summarized_at"
)

# Postgres function: update chat_sessions set message_count = message_count + 1,
# updated_at = now() where user_id = p_user_id and session_id = p_session_id.
_INCREMENT_FUNCTION = "increment_chat_message_count"


@dataclass
class SupabaseChatRepository(ChatRepository):
    """Supabase implementation for chat persistence."""

    client: SupabaseHandle

    def insert_message(self, message: ChatMessage) -> ChatMessage:
        """Insert a message row and return it with its id."""
        response = (
            self.client.table("chat_messages")
            .insert(
                {
                    "user_id": message.user_id,
                    "session_id": message.session_id,
                    "role": message.role,
                    "content": message.content,
                    "message_type": message.message_type,
                    "metadata": message.metadata,
                    "sent_at": (message.timestamp or datetime.now(tz=UTC)).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to insert chat message")
        return _parse_message(response.data[0])

    def list_messages_since(
        self, user_id: str, session_id: str, since: datetime
    ) -> list[ChatMessage]:
        """Return messages sent at or after ``since``, oldest first."""
        response = (
            self.client.table("chat_messages")
            .select(_MESSAGE_COLUMNS)
            .eq("user_id", user_id)
            .eq("session_id", session_id)
            .gte("sent_at", since.isoformat())
            .order("sent_at", desc=False)
            .execute()
        )
        return [_parse_message(row) for row in response.data or []]

    def list_messages_before(
        self, user_id: str, session_id: str, before: datetime, limit: int
    ) -> list[ChatMessage]:
        """Return messages sent before ``before``, newest first."""
        response = (
            self.client.table("chat_messages")
            .select(_MESSAGE_COLUMNS)
            .eq("user_id", user_id)
            .eq("session_id", session_id)
            .lt("sent_at", before.isoformat())
            .order("sent_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_message(row) for row in response.data or []]

    def get_session(self, user_id: str, session_id: str) -> ChatSession | None:
        """Return the session row, if present."""
        response = (
            self.client.table("chat_sessions")
            .select(_SESSION_COLUMNS)
            .eq("user_id", user_id)
            .eq("session_id", session_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_session(response.data[0])
        return None

    def create_session(self, user_id: str, session_id: str, title: str) -> ChatSession:
        """Insert a new session row with a zero message count."""
        now = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("chat_sessions")
            .insert(
                {
                    "user_id": user_id,
                    "session_id": session_id,
                    "title": title,
                    "created_at": now,
                    "updated_at": now,
                    "message_count": 0,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create chat session")
        return _parse_session(response.data[0])

    def touch_session(self, user_id: str, session_id: str) -> None:
        """Refresh the session's updated_at timestamp."""
        self.client.table("chat_sessions").update(
            {"updated_at": datetime.now(tz=UTC).isoformat()}
        ).eq("user_id", user_id).eq("session_id", session_id).execute()

    def increment_message_count(self, user_id: str, session_id: str) -> None:
        """Add one to the session's message count in a single statement."""
        self.client.rpc(
            _INCREMENT_FUNCTION, {"p_user_id": user_id, "p_session_id": session_id}
        ).execute()

    def update_summary(
        self, user_id: str, session_id: str, summary: str, summarized_at: datetime
    ) -> None:
        """Store the summary and its timestamp."""
        self.client.table("chat_sessions").update(
            {
                "summary": summary,
                "last_summarized_at": summarized_at.isoformat(),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("user_id", user_id).eq("session_id", session_id).execute()

    def list_sessions(self, user_id: str, limit: int) -> list[ChatSession]:
        """Return the user's sessions, most recently updated first."""
        response = (
            self.client.table("chat_sessions")
            .select(_SESSION_COLUMNS)
            .eq("user_id", user_id)
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_session(row) for row in response.data or []]


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_message(row: dict[str, object]) -> ChatMessage:
    metadata = row.get("metadata")
    return ChatMessage(
        id=str(row["id"]) if row.get("id") is not None else None,
        user_id=str(row["user_id"]),
        session_id=str(row["session_id"]),
        role=row["role"],  # type: ignore[arg-type]
        content=str(row.get("content") or ""),
        message_type=str(row.get("message_type") or "general"),
        metadata=metadata if isinstance(metadata, dict) else {},
        timestamp=_parse_timestamp(row.get("sent_at")),
    )


def _parse_session(row: dict[str, object]) -> ChatSession:
    created_at = _parse_timestamp(row.get("created_at")) or datetime.now(tz=UTC)
    summary = row.get("summary")
    return ChatSession(
        id=str(row["id"]) if row.get("id") is not None else None,
        user_id=str(row["user_id"]),
        session_id=str(row["session_id"]),
        title=str(row.get("title") or ""),
        created_at=created_at,
        updated_at=_parse_timestamp(row.get("updated_at")) or created_at,
        message_count=int(row.get("message_count") or 0),
        summary=str(summary) if summary else None,
        last_summarized_at=_parse_timestamp(row.get("last_summarized_at")),
    )
