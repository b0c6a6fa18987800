"""Domain models for data-access tool calls."""

from dataclasses import asdict, dataclass, field
from enum import StrEnum


class ToolName(StrEnum):
    """Closed set of tools the assistant may call."""

    GET_CHAT_HISTORY = "get_chat_history"
    GET_USER_RECIPES = "get_user_recipes"
    SEARCH_RECIPES = "search_recipes"
    GET_RECIPE_DETAILS = "get_recipe_details"
    GET_USER_PREFERENCES = "get_user_preferences"
    GET_RECENT_INGREDIENTS = "get_recent_ingredients"
    GET_COOKING_HISTORY = "get_cooking_history"
    SEARCH_CONVERSATIONS = "search_conversations"


@dataclass(frozen=True)
class ToolCall:
    """Structured request for auxiliary data."""

    tool: str
    parameters: dict[str, object] = field(default_factory=dict)
    description: str = ""


@dataclass(frozen=True)
class ToolResponse:
    """Uniform result envelope for a tool call."""

    success: bool
    data: object
    message: str

    def to_dict(self) -> dict[str, object]:
        """Return the envelope as a plain dict."""
        return asdict(self)


@dataclass(frozen=True)
class ToolSpec:
    """Catalog entry describing a tool and its parameters."""

    description: str
    parameters: dict[str, str]
