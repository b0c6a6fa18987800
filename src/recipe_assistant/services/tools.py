"""Dispatch of model-requested tool calls to the data stores."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import assert_never

from pydantic.alias_generators import to_snake

from recipe_assistant.domain.recipes import Recipe, SourceIngredient
from recipe_assistant.domain.tools import ToolCall, ToolName, ToolResponse, ToolSpec
from recipe_assistant.services.conversations import ConversationService
from recipe_assistant.services.preferences import PreferenceService
from recipe_assistant.services.recipes import RecipeService

CONVERSATION_SEARCH_POOL = 50

TOOL_CATALOG: dict[ToolName, ToolSpec] = {
    ToolName.GET_CHAT_HISTORY: ToolSpec(
        description="Retrieve chat history from a specific session",
        parameters={
            "session_id": "string (required)",
            "days_back": "number (optional, default: 7)",
            "limit": "number (optional, default: 50)",
        },
    ),
    ToolName.GET_USER_RECIPES: ToolSpec(
        description="Get user's saved recipes with optional filtering",
        parameters={
            "limit": "number (optional, default: 20)",
            "category": "string (optional: 'basic' or 'advanced')",
            "difficulty": (
                "string (optional: 'Beginner', 'Intermediate', 'Professional')"
            ),
        },
    ),
    ToolName.SEARCH_RECIPES: ToolSpec(
        description=(
            "Search through user's recipes by name, description, or ingredients"
        ),
        parameters={
            "query": "string (required)",
            "limit": "number (optional, default: 10)",
        },
    ),
    ToolName.GET_RECIPE_DETAILS: ToolSpec(
        description="Get detailed information about a specific recipe",
        parameters={
            "recipe_name": "string (required)",
            "session_id": "string (optional)",
        },
    ),
    ToolName.GET_USER_PREFERENCES: ToolSpec(
        description=(
            "Retrieve user's dietary preferences, allergies, and cooking preferences"
        ),
        parameters={},
    ),
    ToolName.GET_RECENT_INGREDIENTS: ToolSpec(
        description="Get recently used ingredients from user's cooking sessions",
        parameters={"limit": "number (optional, default: 10)"},
    ),
    ToolName.GET_COOKING_HISTORY: ToolSpec(
        description="Get user's cooking history and recipe generation sessions",
        parameters={
            "days_back": "number (optional, default: 30)",
            "limit": "number (optional, default: 20)",
        },
    ),
    ToolName.SEARCH_CONVERSATIONS: ToolSpec(
        description="Search through user's conversation history",
        parameters={
            "query": "string (required)",
            "days_back": "number (optional, default: 30)",
            "limit": "number (optional, default: 10)",
        },
    ),
}

_logger = logging.getLogger(__name__)


class ToolParameterError(ValueError):
    """Raised when a required tool parameter is missing."""


@dataclass
class ToolRouter:
    """Route tool calls to handlers and wrap results in a uniform envelope."""

    conversation_service: ConversationService
    recipe_service: RecipeService
    preference_service: PreferenceService

    def execute(self, user_id: str, tool_call: ToolCall) -> ToolResponse:
        """Run one tool call; failures are reported in the envelope."""
        try:
            name = ToolName(tool_call.tool)
        except ValueError:
            return ToolResponse(
                success=False, data=None, message=f"Unknown tool: {tool_call.tool}"
            )
        # Parameters arrive as camelCase from clients and snake_case from the model.
        params = {
            to_snake(key): value for key, value in (tool_call.parameters or {}).items()
        }
        try:
            return self._dispatch(name, user_id, params)
        except ToolParameterError as exc:
            return ToolResponse(success=False, data=None, message=str(exc))
        except Exception:
            _logger.exception("Tool execution failed", extra={"tool": name.value})
            return ToolResponse(
                success=False,
                data=None,
                message=f"Failed to execute tool: {name.value}",
            )

    @staticmethod
    def available_tools() -> dict[str, dict[str, object]]:
        """Return the static tool catalog keyed by tool name."""
        return {
            name.value: {
                "description": spec.description,
                "parameters": dict(spec.parameters),
            }
            for name, spec in TOOL_CATALOG.items()
        }

    def _dispatch(
        self, name: ToolName, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        match name:
            case ToolName.GET_CHAT_HISTORY:
                return self._get_chat_history(user_id, params)
            case ToolName.GET_USER_RECIPES:
                return self._get_user_recipes(user_id, params)
            case ToolName.SEARCH_RECIPES:
                return self._search_recipes(user_id, params)
            case ToolName.GET_RECIPE_DETAILS:
                return self._get_recipe_details(user_id, params)
            case ToolName.GET_USER_PREFERENCES:
                return self._get_user_preferences(user_id)
            case ToolName.GET_RECENT_INGREDIENTS:
                return self._get_recent_ingredients(user_id, params)
            case ToolName.GET_COOKING_HISTORY:
                return self._get_cooking_history(user_id, params)
            case ToolName.SEARCH_CONVERSATIONS:
                return self._search_conversations(user_id, params)
            case _:
                assert_never(name)

    def _get_chat_history(
        self, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        session_id = _required_str(params, "session_id")
        days_back = _int_param(params, "days_back", 7)
        limit = _int_param(params, "limit", 50)
        before = datetime.now(tz=UTC) - timedelta(days=days_back)
        messages = self.conversation_service.get_older_messages(
            user_id, session_id, before, limit
        )
        return ToolResponse(
            success=True,
            data=[
                {
                    "role": m.role,
                    "content": m.content,
                    "timestamp": _isoformat(m.timestamp),
                    "message_type": m.message_type,
                }
                for m in messages
            ],
            message=f"Retrieved {len(messages)} messages from the last {days_back} days",
        )

    def _get_user_recipes(
        self, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        limit = _int_param(params, "limit", 20)
        category = params.get("category")
        difficulty = params.get("difficulty")
        recipes = self.recipe_service.get_user_recipes(user_id, limit)
        if category:
            recipes = [r for r in recipes if r.category == category]
        if difficulty:
            recipes = [r for r in recipes if r.difficulty == difficulty]
        return ToolResponse(
            success=True,
            data=[
                {
                    "name": r.name,
                    "description": r.description,
                    "difficulty": r.difficulty,
                    "cooking_time": r.cooking_time,
                    "category": r.category,
                    "created_at": _isoformat(r.created_at),
                }
                for r in recipes
            ],
            message=f"Retrieved {len(recipes)} recipes",
        )

    def _search_recipes(self, user_id: str, params: dict[str, object]) -> ToolResponse:
        query = _required_str(params, "query", label="Search query")
        limit = _int_param(params, "limit", 10)
        recipes = self.recipe_service.search_recipes(user_id, query, limit)
        return ToolResponse(
            success=True,
            data=[
                {
                    "name": r.name,
                    "description": r.description,
                    "ingredients": [i.model_dump() for i in r.ingredients],
                    "difficulty": r.difficulty,
                    "cooking_time": r.cooking_time,
                }
                for r in recipes
            ],
            message=f'Found {len(recipes)} recipes matching "{query}"',
        )

    def _get_recipe_details(
        self, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        recipe_name = _required_str(params, "recipe_name", label="Recipe name")
        session_id = params.get("session_id")
        if session_id:
            session = self.recipe_service.get_recipe_session(user_id, str(session_id))
            if session is not None:
                recipe = _find_by_name(session.all_recipes(), recipe_name)
                if recipe is not None:
                    return _recipe_details(recipe)

        candidates = self.recipe_service.search_recipes(user_id, recipe_name, 5)
        recipe = _find_by_name(candidates, recipe_name)
        if recipe is not None:
            return _recipe_details(recipe)
        return ToolResponse(
            success=False, data=None, message=f'Recipe "{recipe_name}" not found'
        )

    def _get_user_preferences(self, user_id: str) -> ToolResponse:
        preferences = self.preference_service.get_preferences(user_id)
        if preferences is None:
            data: dict[str, object] = {
                "dietary_restrictions": [],
                "allergies": [],
                "liked_ingredients": [],
                "disliked_ingredients": [],
                "cooking_skill_level": "beginner",
                "preferred_cuisines": [],
            }
        else:
            data = {
                "dietary_restrictions": list(preferences.dietary_restrictions),
                "allergies": list(preferences.allergies),
                "liked_ingredients": list(preferences.liked_ingredients),
                "disliked_ingredients": list(preferences.disliked_ingredients),
                "cooking_skill_level": preferences.cooking_skill_level or "beginner",
                "preferred_cuisines": list(preferences.preferred_cuisines),
            }
        return ToolResponse(
            success=True, data=data, message="Retrieved user preferences"
        )

    def _get_recent_ingredients(
        self, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        limit = _int_param(params, "limit", 10)
        sessions = self.recipe_service.get_user_recipe_sessions(user_id, limit)
        unique = dedupe_ingredients(
            ingredient
            for session in sessions
            for ingredient in session.source_ingredients
        )
        return ToolResponse(
            success=True,
            data=[ingredient.model_dump() for ingredient in unique[:limit]],
            message=f"Retrieved {len(unique)} recent ingredients",
        )

    def _get_cooking_history(
        self, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        days_back = _int_param(params, "days_back", 30)
        limit = _int_param(params, "limit", 20)
        cutoff = datetime.now(tz=UTC) - timedelta(days=days_back)
        sessions = self.recipe_service.get_user_recipe_sessions(user_id, limit)
        recent = [s for s in sessions if s.created_at >= cutoff]
        return ToolResponse(
            success=True,
            data=[
                {
                    "session_id": s.session_id,
                    "created_at": _isoformat(s.created_at),
                    "ingredients_used": [i.name for i in s.source_ingredients],
                    "recipes_generated": [r.name for r in s.all_recipes()],
                }
                for s in recent
            ],
            message=f"Retrieved cooking history for the last {days_back} days",
        )

    def _search_conversations(
        self, user_id: str, params: dict[str, object]
    ) -> ToolResponse:
        query = _required_str(params, "query", label="Search query")
        days_back = _int_param(params, "days_back", 30)
        limit = _int_param(params, "limit", 10)
        cutoff = datetime.now(tz=UTC) - timedelta(days=days_back)
        needle = query.lower()
        sessions = self.conversation_service.get_user_sessions(
            user_id, CONVERSATION_SEARCH_POOL
        )
        matching = [
            s
            for s in sessions
            if s.created_at >= cutoff
            and (
                needle in s.title.lower()
                or (s.summary is not None and needle in s.summary.lower())
            )
        ]
        return ToolResponse(
            success=True,
            data=[
                {
                    "session_id": s.session_id,
                    "title": s.title,
                    "summary": s.summary,
                    "created_at": _isoformat(s.created_at),
                    "message_count": s.message_count,
                }
                for s in matching[:limit]
            ],
            message=f'Found {len(matching)} conversations matching "{query}"',
        )


def dedupe_ingredients(
    ingredients: Iterable[SourceIngredient],
) -> list[SourceIngredient]:
    """Drop repeated ingredient names (case-insensitive), keeping the first seen."""
    seen: set[str] = set()
    unique: list[SourceIngredient] = []
    for ingredient in ingredients:
        key = ingredient.name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(ingredient)
    return unique


def _find_by_name(recipes: list[Recipe], name: str) -> Recipe | None:
    needle = name.lower()
    return next((r for r in recipes if needle in r.name.lower()), None)


def _recipe_details(recipe: Recipe) -> ToolResponse:
    return ToolResponse(
        success=True,
        data=recipe.model_dump(mode="json"),
        message=f"Retrieved details for recipe: {recipe.name}",
    )


def _required_str(
    params: dict[str, object], key: str, *, label: str | None = None
) -> str:
    value = params.get(key)
    if value is None or not str(value).strip():
        raise ToolParameterError(f"{label or key} is required")
    return str(value)


def _int_param(params: dict[str, object], key: str, default: int) -> int:
    value = params.get(key)
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
