"""Tests for conversation summarisation."""

import asyncio
from datetime import UTC, datetime

from recipe_assistant.domain.chat import ChatMessage
from recipe_assistant.services.summaries import ContextSummarizer, fallback_summary
from tests.conftest import FakeTextClient


def _messages() -> list[ChatMessage]:
    stamp = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    return [
        ChatMessage("u", "s", "user", "Give me a recipe", "recipe_request", stamp),
        ChatMessage("u", "s", "assistant", "Try risotto", "recipe_request", stamp),
        ChatMessage("u", "s", "user", "How long to cook it?", "recipe_query", stamp),
    ]


def test_summarize_empty_history() -> None:
    summarizer = ContextSummarizer(client=FakeTextClient(), model="m")

    assert asyncio.run(summarizer.summarize([])) == "No conversation history"


def test_summarize_sends_transcript_to_model() -> None:
    client = FakeTextClient(replies=["Risotto planning."])
    summarizer = ContextSummarizer(client=client, model="m")

    summary = asyncio.run(summarizer.summarize(_messages()))

    assert summary == "Risotto planning."
    prompt = client.calls[0]["messages"][0]["content"]  # type: ignore[index]
    assert "user: Give me a recipe" in prompt
    assert "assistant: Try risotto" in prompt


def test_summarize_empty_reply_uses_message_count() -> None:
    summarizer = ContextSummarizer(client=FakeTextClient(replies=["   "]), model="m")

    summary = asyncio.run(summarizer.summarize(_messages()))

    assert summary == "Session with 3 messages about cooking and recipes"


def test_summarize_model_error_uses_fallback() -> None:
    client = FakeTextClient(error=RuntimeError("boom"))
    summarizer = ContextSummarizer(client=client, model="m")

    summary = asyncio.run(summarizer.summarize(_messages()))

    assert summary == (
        "Session summary: 2 recipe requests, 1 follow-up queries. "
        "Last activity: 2024-05-01T12:30:00+00:00"
    )


def test_fallback_summary_without_timestamp() -> None:
    message = ChatMessage("u", "s", "user", "hello")

    assert fallback_summary([message]).endswith("Last activity: unknown")
