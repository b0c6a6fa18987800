"""Conversation summarisation used to bound prompt size."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from recipe_assistant.domain.chat import ChatMessage
from recipe_assistant.services.intents import RECIPE_QUERY, RECIPE_REQUEST
from recipe_assistant.services.language_model import TextGenerationClient
from recipe_assistant.services.prompts import build_summary_prompt

_logger = logging.getLogger(__name__)


@dataclass
class ContextSummarizer:
    """Compress a transcript into a short summary via the language model."""

    client: TextGenerationClient
    model: str

    async def summarize(self, messages: Sequence[ChatMessage]) -> str:
        """Return a summary of the messages; never raises."""
        if not messages:
            return "No conversation history"
        try:
            summary = await self.client.generate(
                model=self.model,
                messages=[
                    {"role": "user", "content": build_summary_prompt(messages)}
                ],
            )
        except Exception:
            _logger.exception("Context summarisation failed, using fallback")
            return fallback_summary(messages)
        summary = summary.strip()
        return summary or (
            f"Session with {len(messages)} messages about cooking and recipes"
        )


def fallback_summary(messages: Sequence[ChatMessage]) -> str:
    """Build a deterministic summary from message types."""
    recipe_requests = sum(1 for m in messages if m.message_type == RECIPE_REQUEST)
    queries = sum(1 for m in messages if m.message_type == RECIPE_QUERY)
    last_timestamp = messages[-1].timestamp if messages else None
    last_activity = last_timestamp.isoformat() if last_timestamp else "unknown"
    return (
        f"Session summary: {recipe_requests} recipe requests, "
        f"{queries} follow-up queries. Last activity: {last_activity}"
    )
