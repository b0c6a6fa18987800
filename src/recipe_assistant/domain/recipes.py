"""Domain models for generated recipes."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RecipeCategory = Literal["basic", "advanced"]


class SourceIngredient(BaseModel):
    """Ingredient detected in a photo or supplied by the user."""

    name: str
    quantity: str = ""
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class RecipeIngredient(BaseModel):
    """Ingredient line of a recipe."""

    item: str
    amount: str = ""
    available: bool = True
    substitute: str | None = None


class Recipe(BaseModel):
    """A single generated dish."""

    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    cooking_time: str = ""
    difficulty: Literal["Beginner", "Intermediate", "Professional"] = "Beginner"
    servings: int = 2
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    nutrition_highlights: list[str] = Field(default_factory=list)
    id: str | None = None
    user_id: str | None = None
    category: RecipeCategory | None = None
    source_ingredients: list[SourceIngredient] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecipeSession(BaseModel):
    """One ingredients-to-recipes generation event."""

    user_id: str
    session_id: str
    source_ingredients: list[SourceIngredient] = Field(default_factory=list)
    basic_recipes: list[Recipe] = Field(default_factory=list)
    advanced_recipes: list[Recipe] = Field(default_factory=list)
    created_at: datetime
    id: str | None = None

    def all_recipes(self) -> list[Recipe]:
        """Return basic recipes followed by advanced ones."""
        return [*self.basic_recipes, *self.advanced_recipes]


class GeneratedRecipes(BaseModel):
    """Recipes returned by a generation request."""

    basic_recipes: list[Recipe] = Field(default_factory=list)
    advanced_recipes: list[Recipe] = Field(default_factory=list)
    session_id: str | None = None
