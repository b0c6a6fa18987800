"""Ingredient detection from a photo, streamed as progress events."""

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import datetime

from pydantic import ValidationError

from recipe_assistant.domain.progress import ProgressEvent
from recipe_assistant.domain.recipes import SourceIngredient
from recipe_assistant.services.language_model import TextGenerationClient, to_data_url
from recipe_assistant.services.llm_json import extract_json_object
from recipe_assistant.services.prompts import build_detection_prompt

DETECTION_ERROR = "Failed to process image"

_logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def fallback_ingredients() -> list[SourceIngredient]:
    """Placeholder returned when the model reply cannot be parsed."""
    return [
        SourceIngredient(name="mixed ingredients", quantity="various amounts", confidence=0.5)
    ]


def parse_ingredients(reply: str) -> list[SourceIngredient]:
    """Parse the model reply, falling back to the placeholder ingredient."""
    parsed = extract_json_object(reply)
    raw = parsed.get("ingredients") if parsed is not None else None
    if not isinstance(raw, list):
        return fallback_ingredients()
    ingredients: list[SourceIngredient] = []
    for item in raw:
        try:
            ingredients.append(SourceIngredient.model_validate(item))
        except ValidationError:
            _logger.warning("Skipping malformed detected ingredient: %r", item)
    return ingredients or fallback_ingredients()


@dataclass
class IngredientDetectionService:
    """Sends a photo to the vision model and reports progress."""

    client: TextGenerationClient
    model: str
    clock: Callable[[], datetime] = _local_now

    async def stream(
        self, image_bytes: bytes, content_type: str | None = None
    ) -> AsyncIterator[ProgressEvent]:
        """Yield progress events ending with the detected ingredients."""
        yield ProgressEvent(step="Processing image...", progress=10)
        data_url = to_data_url(image_bytes, _image_mime_type(content_type))
        yield ProgressEvent(step="Analyzing image with AI...", progress=30)
        try:
            reply = await self.client.generate(
                model=self.model,
                messages=[{"role": "user", "content": build_detection_prompt(self.clock())}],
                image_data_url=data_url,
            )
        except Exception:
            _logger.exception("Ingredient detection call failed")
            yield ProgressEvent(
                step="Error", progress=100, done=True, error=DETECTION_ERROR
            )
            return
        yield ProgressEvent(step="Processing AI response...", progress=60)
        ingredients = parse_ingredients(reply)
        yield ProgressEvent(step="Finalizing ingredients...", progress=80)
        yield ProgressEvent(step="Almost done...", progress=95)
        yield ProgressEvent(
            step="Complete",
            progress=100,
            done=True,
            payload={"ingredients": [i.model_dump() for i in ingredients]},
        )


def _image_mime_type(content_type: str | None) -> str | None:
    if content_type and content_type.startswith("image/"):
        return content_type
    return None
