"""FastAPI application factory."""

import json
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile, status
from sse_starlette.sse import EventSourceResponse

from recipe_assistant.api.auth import require_user_id
from recipe_assistant.api.models import (
    ChatRequest,
    FeedbackRequest,
    GenerateRecipesRequest,
    ToolRequest,
    UserSyncRequest,
    WorkflowRequest,
)
from recipe_assistant.app_logging import configure_logging
from recipe_assistant.containers import AppContainer
from recipe_assistant.domain.preferences import UserPreferences
from recipe_assistant.domain.progress import ProgressEvent
from recipe_assistant.domain.tools import ToolCall
from recipe_assistant.services.conversations import ConversationStoreError
from recipe_assistant.services.tools import ToolRouter


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/workflow")
    async def workflow(
        body: WorkflowRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> EventSourceResponse:
        """Run the assistant workflow and stream its progress."""
        if not body.message:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "No message provided")
        state_container: AppContainer = request.app.state.container
        events = state_container.workflow.stream(
            user_id,
            body.session_id or str(uuid.uuid4()),
            body.message,
            body.ingredients,
        )
        return EventSourceResponse(_sse_payloads(events))

    @app.post("/api/chat")
    async def chat(
        body: ChatRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, str]:
        """Answer a chat message."""
        if not body.message:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "No message provided")
        state_container: AppContainer = request.app.state.container
        try:
            reply = await state_container.chat_service.handle_message(
                user_id,
                body.session_id or str(uuid.uuid4()),
                body.message,
                request_type=body.request_type,
                current_recipes=body.current_recipes,
                current_ingredients=body.current_ingredients,
            )
        except ConversationStoreError as exc:
            logger.exception("Chat request failed")
            raise HTTPException(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process chat message"
            ) from exc
        return asdict(reply)

    @app.get("/api/tools")
    async def list_tools(
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Return the tool catalog."""
        return {
            "tools": ToolRouter.available_tools(),
            "message": "Available tools retrieved successfully",
        }

    @app.post("/api/tools")
    async def execute_tool(
        body: ToolRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Execute one tool call for the caller."""
        if not body.tool:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Tool name is required")
        state_container: AppContainer = request.app.state.container
        result = state_container.tool_router.execute(
            user_id,
            ToolCall(
                tool=body.tool,
                parameters=body.parameters,
                description=body.description,
            ),
        )
        return result.to_dict()

    @app.get("/api/preferences")
    async def get_preferences(
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Return the caller's saved preferences, or the defaults."""
        state_container: AppContainer = request.app.state.container
        service = state_container.preference_service
        try:
            preferences = service.get_preferences_or_default(user_id)
        except Exception as exc:
            logger.exception("Failed to fetch preferences")
            raise HTTPException(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch preferences"
            ) from exc
        return {"preferences": preferences.model_dump(mode="json")}

    @app.post("/api/preferences")
    async def save_preferences(
        preferences: UserPreferences,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, bool]:
        """Replace the caller's preferences."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.preference_service.save_preferences(user_id, preferences)
        except Exception as exc:
            logger.exception("Failed to save preferences")
            raise HTTPException(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save preferences"
            ) from exc
        return {"success": True}

    @app.post("/api/generate-recipes")
    async def generate_recipes(
        body: GenerateRecipesRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Generate recipes for the supplied ingredients."""
        if not body.ingredients:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "No ingredients provided")
        state_container: AppContainer = request.app.state.container
        result = await state_container.generation_service.generate(
            user_id, body.ingredients
        )
        return result.model_dump(mode="json", exclude_none=True)

    @app.post("/api/detect-ingredients")
    async def detect_ingredients(
        request: Request,
        image: UploadFile | None = File(default=None),
        user_id: str = Depends(require_user_id),
    ) -> EventSourceResponse:
        """Detect ingredients in an uploaded photo and stream progress."""
        if image is None:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "No image provided")
        image_bytes = await image.read()
        if not image_bytes:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "No image provided")
        state_container: AppContainer = request.app.state.container
        events = state_container.detection_service.stream(
            image_bytes, image.content_type
        )
        return EventSourceResponse(_sse_payloads(events))

    @app.post("/api/feedback")
    async def feedback(
        body: FeedbackRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, bool]:
        """Record feedback on a recipe."""
        if not body.recipe_id or not body.feedback:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Missing required fields")
        state_container: AppContainer = request.app.state.container
        try:
            state_container.feedback_service.record_feedback(
                user_id, body.recipe_id, body.feedback, body.reason
            )
        except Exception as exc:
            logger.exception("Failed to save feedback")
            raise HTTPException(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save feedback"
            ) from exc
        return {"success": True}

    @app.post("/api/users/sync")
    async def sync_user(
        body: UserSyncRequest,
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Create or update the caller's mirrored profile."""
        state_container: AppContainer = request.app.state.container
        try:
            profile = state_container.user_service.sync_user(
                user_id,
                body.email,
                first_name=body.first_name,
                last_name=body.last_name,
                image_url=body.image_url,
            )
        except Exception as exc:
            logger.exception("Failed to sync user")
            raise HTTPException(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to sync user"
            ) from exc
        return {"success": True, "user": asdict(profile)}

    @app.get("/api/users/sync")
    async def get_user(
        request: Request,
        user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Return the caller's mirrored profile."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.user_service.get_user(user_id)
        if profile is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")
        return {"user": asdict(profile)}

    return app


async def _sse_payloads(
    events: AsyncIterator[ProgressEvent],
) -> AsyncIterator[dict[str, str]]:
    async for event in events:
        yield {"data": json.dumps(event.to_payload())}
