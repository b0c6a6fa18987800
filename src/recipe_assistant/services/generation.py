"""Recipe generation from a list of ingredients."""

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from pydantic import ValidationError

from recipe_assistant.domain.recipes import (
    GeneratedRecipes,
    Recipe,
    RecipeIngredient,
    SourceIngredient,
)
from recipe_assistant.services.language_model import TextGenerationClient
from recipe_assistant.services.llm_json import extract_json_object
from recipe_assistant.services.preferences import PreferenceService
from recipe_assistant.services.prompts import build_recipe_generation_prompt
from recipe_assistant.services.recipes import RecipeService, RecipeStoreError

_logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class RecipeGenerationService:
    """Turns detected ingredients into basic and advanced recipes."""

    client: TextGenerationClient
    model: str
    recipe_service: RecipeService
    preference_service: PreferenceService
    clock: Callable[[], datetime] = _local_now

    async def generate(
        self, user_id: str, ingredients: Sequence[SourceIngredient]
    ) -> GeneratedRecipes:
        """Generate, store and return recipes for the given ingredients."""
        ingredients = list(ingredients)
        try:
            preferences = self.preference_service.get_preferences(user_id)
        except Exception:
            _logger.exception("Failed to load preferences for generation")
            preferences = None
        prompt = build_recipe_generation_prompt(
            ingredients,
            self.clock(),
            self.preference_service.format_for_prompt(preferences),
        )
        result = await self._request_recipes(prompt)
        if result is None:
            result = fallback_recipes(ingredients)

        session_id = str(uuid.uuid4())
        try:
            self.recipe_service.store_recipe_session(
                user_id,
                session_id,
                ingredients,
                result.basic_recipes,
                result.advanced_recipes,
            )
        except RecipeStoreError:
            _logger.warning(
                "Returning recipes without storing them",
                extra={"session_id": session_id},
            )
            return result
        return result.model_copy(update={"session_id": session_id})

    async def _request_recipes(self, prompt: str) -> GeneratedRecipes | None:
        try:
            reply = await self.client.generate(
                model=self.model, messages=[{"role": "user", "content": prompt}]
            )
        except Exception:
            _logger.exception("Recipe generation call failed")
            return None
        parsed = extract_json_object(reply)
        if parsed is None:
            return None
        try:
            result = GeneratedRecipes.model_validate(parsed)
        except ValidationError as exc:
            _logger.warning("Generated recipes failed validation: %s", exc)
            return None
        if not result.basic_recipes and not result.advanced_recipes:
            return None
        return result.model_copy(update={"session_id": None})


def fallback_recipes(ingredients: Sequence[SourceIngredient]) -> GeneratedRecipes:
    """Return the single stir fry offered when generation fails."""
    stir_fry = Recipe(
        name="Simple Stir Fry",
        description="Quick and easy stir fry with available ingredients",
        cooking_time="15 minutes",
        difficulty="Beginner",
        servings=2,
        ingredients=[
            RecipeIngredient(item=i.name, amount=i.quantity, available=True)
            for i in ingredients
        ],
        equipment=["Pan", "Stove"],
        steps=[
            "Heat oil in a pan over medium-high heat",
            "Add harder vegetables first and cook for 3-4 minutes",
            "Add softer ingredients and cook for 2-3 minutes more",
            "Season with salt and pepper and serve hot",
        ],
        tips=["Keep ingredients moving in the pan for even cooking"],
        nutrition_highlights=["Fresh vegetables provide vitamins and fiber"],
    )
    return GeneratedRecipes(basic_recipes=[stir_fry], advanced_recipes=[])
