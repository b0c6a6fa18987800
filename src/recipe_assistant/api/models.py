"""Pydantic models for API request bodies."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recipe_assistant.domain.recipes import SourceIngredient


class ApiRequest(BaseModel):
    """Base request model accepting snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkflowRequest(ApiRequest):
    """Body of a streaming workflow request."""

    message: str | None = None
    session_id: str | None = None
    ingredients: list[SourceIngredient] = Field(default_factory=list)


class ChatRequest(ApiRequest):
    """Body of a chat request."""

    message: str | None = None
    session_id: str | None = None
    request_type: str | None = None
    current_recipes: list[dict[str, object]] | None = None
    current_ingredients: list[dict[str, object]] | None = None


class ToolRequest(ApiRequest):
    """Body of a direct tool invocation."""

    tool: str | None = None
    parameters: dict[str, object] = Field(default_factory=dict)
    description: str = ""


class GenerateRecipesRequest(ApiRequest):
    """Body of a recipe generation request."""

    ingredients: list[SourceIngredient] | None = None


class FeedbackRequest(ApiRequest):
    """Body of a recipe feedback submission."""

    recipe_id: str | None = None
    feedback: str | None = None
    reason: str | None = None


class UserSyncRequest(ApiRequest):
    """Profile fields mirrored from the identity provider."""

    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
