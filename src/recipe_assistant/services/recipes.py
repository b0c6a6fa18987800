"""Recipe store: generation sessions and individual recipes."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from recipe_assistant.domain.recipes import (
    Recipe,
    RecipeCategory,
    RecipeSession,
    SourceIngredient,
)

_logger = logging.getLogger(__name__)


class RecipeStoreError(RuntimeError):
    """Raised when a recipe store operation fails."""


class RecipeRepository(Protocol):
    """Persistence interface for recipes and recipe sessions."""

    def insert_recipe_session(self, session: RecipeSession) -> str:
        """Persist a recipe session and return its storage id."""

    def insert_recipes(self, session_id: str, recipes: list[Recipe]) -> None:
        """Persist individual recipes for independent querying."""

    def list_recipes(self, user_id: str, limit: int) -> list[Recipe]:
        """Return the user's recipes, newest first."""

    def get_recipe_session(self, user_id: str, session_id: str) -> RecipeSession | None:
        """Return a recipe session by its session id."""

    def list_recipe_sessions(self, user_id: str, limit: int) -> list[RecipeSession]:
        """Return the user's recipe sessions, newest first."""

    def search_recipes(self, user_id: str, query: str, limit: int) -> list[Recipe]:
        """Return recipes whose name, description or ingredients match."""


@dataclass
class RecipeService:
    """Application service for storing and querying generated recipes."""

    repository: RecipeRepository

    def store_recipe_session(
        self,
        user_id: str,
        session_id: str,
        source_ingredients: Sequence[SourceIngredient],
        basic_recipes: Sequence[Recipe],
        advanced_recipes: Sequence[Recipe],
    ) -> str:
        """Tag and persist one generation event and its recipes."""
        now = datetime.now(tz=UTC)
        sources = list(source_ingredients)
        basic = _tag_recipes(basic_recipes, user_id, "basic", sources, now)
        advanced = _tag_recipes(advanced_recipes, user_id, "advanced", sources, now)
        session = RecipeSession(
            user_id=user_id,
            session_id=session_id,
            source_ingredients=sources,
            basic_recipes=basic,
            advanced_recipes=advanced,
            created_at=now,
        )
        try:
            stored_id = self.repository.insert_recipe_session(session)
            if basic or advanced:
                self.repository.insert_recipes(session_id, [*basic, *advanced])
        except Exception as exc:
            _logger.exception(
                "Failed to store recipe session", extra={"session_id": session_id}
            )
            raise RecipeStoreError("Failed to store recipe session") from exc
        return stored_id

    def get_user_recipes(self, user_id: str, limit: int = 20) -> list[Recipe]:
        """Return the user's latest recipes."""
        try:
            return self.repository.list_recipes(user_id, limit)
        except Exception as exc:
            _logger.exception("Failed to fetch user recipes")
            raise RecipeStoreError("Failed to fetch user recipes") from exc

    def get_recipe_session(self, user_id: str, session_id: str) -> RecipeSession | None:
        """Return one recipe session."""
        try:
            return self.repository.get_recipe_session(user_id, session_id)
        except Exception as exc:
            _logger.exception("Failed to fetch recipe session")
            raise RecipeStoreError("Failed to fetch recipe session") from exc

    def get_user_recipe_sessions(
        self, user_id: str, limit: int = 10
    ) -> list[RecipeSession]:
        """Return the user's latest recipe sessions."""
        try:
            return self.repository.list_recipe_sessions(user_id, limit)
        except Exception as exc:
            _logger.exception("Failed to fetch user recipe sessions")
            raise RecipeStoreError("Failed to fetch user recipe sessions") from exc

    def search_recipes(self, user_id: str, query: str, limit: int = 10) -> list[Recipe]:
        """Case-insensitive substring search over the user's recipes."""
        try:
            return self.repository.search_recipes(user_id, query, limit)
        except Exception as exc:
            _logger.exception("Failed to search recipes")
            raise RecipeStoreError("Failed to search recipes") from exc


def _tag_recipes(
    recipes: Sequence[Recipe],
    user_id: str,
    category: RecipeCategory,
    source_ingredients: list[SourceIngredient],
    now: datetime,
) -> list[Recipe]:
    return [
        recipe.model_copy(
            update={
                "user_id": user_id,
                "category": category,
                "source_ingredients": source_ingredients,
                "created_at": now,
                "updated_at": now,
            }
        )
        for recipe in recipes
    ]
