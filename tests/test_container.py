"""Tests for container wiring."""

import asyncio

from recipe_assistant.containers import build_container
from recipe_assistant.database import LazySupabaseClient


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.chat_service.tool_router is container.tool_router
    assert container.workflow.model == settings.openai_model
    supabase_client = container.recipe_service.repository.client  # type: ignore[attr-defined]
    assert isinstance(supabase_client, LazySupabaseClient)
    assert supabase_client.url == settings.supabase_url
    asyncio.run(container.close_resources())
