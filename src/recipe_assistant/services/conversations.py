"""Conversation store: chat messages and session metadata."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

from recipe_assistant.domain.chat import DEFAULT_SESSION_TITLE, ChatMessage, ChatSession
from recipe_assistant.services.summaries import ContextSummarizer

SUMMARY_WINDOW_HOURS = 24
SUMMARY_MESSAGE_THRESHOLD = 5

_logger = logging.getLogger(__name__)


class ConversationStoreError(RuntimeError):
    """Raised when a conversation write fails."""


class ChatRepository(Protocol):
    """Persistence interface for chat messages and sessions."""

    def insert_message(self, message: ChatMessage) -> ChatMessage:
        """Persist a message and return it with its id."""

    def list_messages_since(
        self, user_id: str, session_id: str, since: datetime
    ) -> list[ChatMessage]:
        """Return messages at or after ``since``, oldest first."""

    def list_messages_before(
        self, user_id: str, session_id: str, before: datetime, limit: int
    ) -> list[ChatMessage]:
        """Return up to ``limit`` messages strictly before ``before``, newest first."""

    def get_session(self, user_id: str, session_id: str) -> ChatSession | None:
        """Return a chat session, if present."""

    def create_session(self, user_id: str, session_id: str, title: str) -> ChatSession:
        """Create a chat session with a zero message count."""

    def touch_session(self, user_id: str, session_id: str) -> None:
        """Refresh the session's updated timestamp."""

    def increment_message_count(self, user_id: str, session_id: str) -> None:
        """Add one to the session's message count."""

    def update_summary(
        self, user_id: str, session_id: str, summary: str, summarized_at: datetime
    ) -> None:
        """Store a summary and the time it was produced."""

    def list_sessions(self, user_id: str, limit: int) -> list[ChatSession]:
        """Return the user's sessions, most recently updated first."""


@dataclass
class ConversationService:
    """Application service for chat history and rolling summaries."""

    repository: ChatRepository
    summarizer: ContextSummarizer

    def save_message(self, message: ChatMessage) -> ChatMessage:
        """Persist a message with a server-assigned timestamp."""
        stamped = replace(message, timestamp=datetime.now(tz=UTC))
        try:
            saved = self.repository.insert_message(stamped)
        except Exception as exc:
            _logger.exception(
                "Failed to save message", extra={"session_id": message.session_id}
            )
            raise ConversationStoreError("Failed to save message to database") from exc
        try:
            self.repository.increment_message_count(
                message.user_id, message.session_id
            )
        except Exception:
            _logger.exception(
                "Failed to update session message count",
                extra={"session_id": message.session_id},
            )
        return saved

    def get_recent_messages(
        self, user_id: str, session_id: str, hours_back: float = 2
    ) -> list[ChatMessage]:
        """Return messages from the trailing window, oldest first."""
        since = datetime.now(tz=UTC) - timedelta(hours=hours_back)
        try:
            return self.repository.list_messages_since(user_id, session_id, since)
        except Exception:
            _logger.exception("Failed to fetch recent messages")
            return []

    def get_older_messages(
        self, user_id: str, session_id: str, before: datetime, limit: int = 50
    ) -> list[ChatMessage]:
        """Return up to ``limit`` messages before ``before``, oldest first."""
        try:
            newest_first = self.repository.list_messages_before(
                user_id, session_id, before, limit
            )
        except Exception:
            _logger.exception("Failed to fetch older messages")
            return []
        return list(reversed(newest_first))

    def create_or_update_session(
        self, user_id: str, session_id: str, title: str | None = None
    ) -> ChatSession:
        """Create the session on first use, otherwise refresh its timestamp."""
        try:
            existing = self.repository.get_session(user_id, session_id)
            if existing is not None:
                self.repository.touch_session(user_id, session_id)
                return existing
            return self.repository.create_session(
                user_id, session_id, title or DEFAULT_SESSION_TITLE
            )
        except Exception as exc:
            _logger.exception("Failed to create or update session")
            raise ConversationStoreError(
                "Failed to create or update session"
            ) from exc

    def should_summarize_session(self, user_id: str, session_id: str) -> bool:
        """Return True when enough unsummarised messages have piled up."""
        try:
            session = self.repository.get_session(user_id, session_id)
            if session is None:
                return False
            since = datetime.now(tz=UTC) - timedelta(hours=SUMMARY_WINDOW_HOURS)
            recent = self.repository.list_messages_since(user_id, session_id, since)
        except Exception:
            _logger.exception("Failed to check whether session needs a summary")
            return False
        unsummarized = _messages_after(recent, session.last_summarized_at)
        return len(unsummarized) > SUMMARY_MESSAGE_THRESHOLD

    async def summarize_context(self, messages: Sequence[ChatMessage]) -> str:
        """Summarise a transcript; never raises."""
        return await self.summarizer.summarize(messages)

    def save_context_summary(self, user_id: str, session_id: str, summary: str) -> None:
        """Store the summary and mark the session as summarised now."""
        try:
            self.repository.update_summary(
                user_id, session_id, summary, summarized_at=datetime.now(tz=UTC)
            )
        except Exception as exc:
            _logger.exception("Failed to save context summary")
            raise ConversationStoreError("Failed to save context summary") from exc

    def get_session_summary(self, user_id: str, session_id: str) -> str | None:
        """Return the session summary, if one exists."""
        try:
            session = self.repository.get_session(user_id, session_id)
        except Exception:
            _logger.exception("Failed to fetch session summary")
            return None
        if session is None:
            return None
        return session.summary or None

    def get_user_sessions(self, user_id: str, limit: int = 10) -> list[ChatSession]:
        """Return the user's most recently updated sessions."""
        try:
            return self.repository.list_sessions(user_id, limit)
        except Exception:
            _logger.exception("Failed to fetch user sessions")
            return []

    async def refresh_summary_if_needed(self, user_id: str, session_id: str) -> bool:
        """Summarise the last day of messages when the threshold is crossed."""
        if not self.should_summarize_session(user_id, session_id):
            return False
        messages = self.get_recent_messages(
            user_id, session_id, hours_back=SUMMARY_WINDOW_HOURS
        )
        summary = await self.summarize_context(messages)
        try:
            self.save_context_summary(user_id, session_id, summary)
        except ConversationStoreError:
            return False
        return True


def _messages_after(
    messages: Sequence[ChatMessage], cutoff: datetime | None
) -> list[ChatMessage]:
    if cutoff is None:
        return list(messages)
    return [m for m in messages if m.timestamp is not None and m.timestamp > cutoff]
