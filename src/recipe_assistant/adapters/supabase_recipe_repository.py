"""Supabase-backed recipe and recipe session repository."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime

from recipe_assistant.database import SupabaseHandle
from recipe_assistant.domain.recipes import Recipe, RecipeSession, SourceIngredient
from recipe_assistant.services.recipes import RecipeRepository

_SESSION_COLUMNS = (
    "id, user_id, session_id, source_ingredients, basic_recipes, "
    "advanced_recipes, created_at"
)
_RECIPE_COLUMNS = "id, recipe_json, created_at"
# Characters with meaning inside a PostgREST or() filter or an ilike pattern.
_FILTER_SPECIAL = re.compile(r"[,()%*\\]")


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipe persistence."""

    client: SupabaseHandle

    def insert_recipe_session(self, session: RecipeSession) -> str:
        """Insert a recipe session row and return its id."""
        response = (
            self.client.table("recipe_sessions")
            .insert(
                {
                    "user_id": session.user_id,
                    "session_id": session.session_id,
                    "source_ingredients": _dump_all(session.source_ingredients),
                    "basic_recipes": _dump_all(session.basic_recipes),
                    "advanced_recipes": _dump_all(session.advanced_recipes),
                    "created_at": session.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe session")
        return str(response.data[0]["id"])

    def insert_recipes(self, session_id: str, recipes: list[Recipe]) -> None:
        """Insert one searchable row per recipe."""
        rows = [
            {
                "user_id": recipe.user_id,
                "session_id": session_id,
                "name": recipe.name,
                "description": recipe.description,
                "category": recipe.category,
                "difficulty": recipe.difficulty,
                "ingredient_names": ", ".join(i.item for i in recipe.ingredients),
                "recipe_json": recipe.model_dump(mode="json", exclude={"id"}),
                "created_at": (recipe.created_at or datetime.now(tz=UTC)).isoformat(),
            }
            for recipe in recipes
        ]
        response = self.client.table("recipes").insert(rows).execute()
        if not response.data:
            raise RuntimeError("Failed to insert recipes")

    def list_recipes(self, user_id: str, limit: int) -> list[Recipe]:
        """Return the user's recipes, newest first."""
        response = (
            self.client.table("recipes")
            .select(_RECIPE_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def get_recipe_session(self, user_id: str, session_id: str) -> RecipeSession | None:
        """Return the recipe session row, if present."""
        response = (
            self.client.table("recipe_sessions")
            .select(_SESSION_COLUMNS)
            .eq("user_id", user_id)
            .eq("session_id", session_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_session(response.data[0])
        return None

    def list_recipe_sessions(self, user_id: str, limit: int) -> list[RecipeSession]:
        """Return the user's recipe sessions, newest first."""
        response = (
            self.client.table("recipe_sessions")
            .select(_SESSION_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_session(row) for row in response.data or []]

    def search_recipes(self, user_id: str, query: str, limit: int) -> list[Recipe]:
        """Case-insensitive match on name, description or ingredient names."""
        term = _FILTER_SPECIAL.sub(" ", query).strip()
        if not term:
            return []
        pattern = f"%{term}%"
        response = (
            self.client.table("recipes")
            .select(_RECIPE_COLUMNS)
            .eq("user_id", user_id)
            .or_(
                f"name.ilike.{pattern},description.ilike.{pattern},"
                f"ingredient_names.ilike.{pattern}"
            )
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]


def _dump_all(models: list[Recipe] | list[SourceIngredient]) -> list[dict[str, object]]:
    return [model.model_dump(mode="json") for model in models]


def _parse_recipe(row: dict[str, object]) -> Recipe:
    recipe = Recipe.model_validate(row.get("recipe_json") or {})
    return recipe.model_copy(update={"id": str(row["id"])})


def _parse_session(row: dict[str, object]) -> RecipeSession:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.now(tz=UTC)
    )
    return RecipeSession(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        session_id=str(row["session_id"]),
        source_ingredients=row.get("source_ingredients") or [],
        basic_recipes=row.get("basic_recipes") or [],
        advanced_recipes=row.get("advanced_recipes") or [],
        created_at=created_at,
    )
