"""Domain models for user cooking preferences."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MealPreferences(BaseModel):
    """Favourite dishes per meal of the day."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    breakfast: list[str] = Field(default_factory=list)
    lunch: list[str] = Field(default_factory=list)
    dinner: list[str] = Field(default_factory=list)
    snacks: list[str] = Field(default_factory=list)


class UserPreferences(BaseModel):
    """Per-user cooking profile used to personalise prompts."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    dietary_restrictions: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    liked_ingredients: list[str] = Field(default_factory=list)
    disliked_ingredients: list[str] = Field(default_factory=list)
    preferred_cuisines: list[str] = Field(default_factory=list)
    cooking_skill_level: Literal["beginner", "intermediate", "advanced"] = (
        "intermediate"
    )
    available_equipment: list[str] = Field(default_factory=list)
    max_cooking_time: int = Field(default=60, ge=0)
    serving_size: int = Field(default=2, ge=1)
    spice_level: Literal["mild", "medium", "hot"] = "medium"
    meal_preferences: MealPreferences = Field(default_factory=MealPreferences)
