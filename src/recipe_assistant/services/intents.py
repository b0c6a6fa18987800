"""Heuristics for routing free-text chat messages."""

from collections.abc import Sequence

from recipe_assistant.domain.chat import ChatMessage

RECIPE_REQUEST = "recipe_request"
RECIPE_QUERY = "recipe_query"
GENERAL = "general"

OLDER_CONTEXT_MARKERS = ("yesterday", "earlier", "before", "previous")


def needs_older_context(message: str) -> bool:
    """Return True when the message refers back past the recent window."""
    lowered = message.lower()
    return any(marker in lowered for marker in OLDER_CONTEXT_MARKERS)


def is_recipe_request(message: str, request_type: str | None) -> bool:
    """Return True for a request for new recipes."""
    return request_type == RECIPE_REQUEST or "recipe" in message.lower()


def is_recipe_query(
    message: str,
    request_type: str | None,
    recent_messages: Sequence[ChatMessage],
    current_recipes: Sequence[object] | None,
) -> bool:
    """Return True for a follow-up question about existing recipes."""
    return (
        request_type == RECIPE_QUERY
        or any(m.message_type == RECIPE_REQUEST for m in recent_messages)
        or "recipe" in message.lower()
        or bool(current_recipes)
    )


def classify_request(
    message: str,
    request_type: str | None = None,
    recent_messages: Sequence[ChatMessage] = (),
    current_recipes: Sequence[object] | None = None,
) -> str:
    """Classify a chat message as a recipe request, recipe query or general."""
    if is_recipe_request(message, request_type):
        return RECIPE_REQUEST
    if is_recipe_query(message, request_type, recent_messages, current_recipes):
        return RECIPE_QUERY
    return GENERAL
