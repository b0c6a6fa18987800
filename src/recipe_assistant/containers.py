"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from recipe_assistant.adapters.openai_text_client import OpenAITextClient
from recipe_assistant.adapters.supabase_auth_client import SupabaseAuthClient
from recipe_assistant.adapters.supabase_chat_repository import SupabaseChatRepository
from recipe_assistant.adapters.supabase_feedback_repository import (
    SupabaseFeedbackRepository,
)
from recipe_assistant.adapters.supabase_preference_repository import (
    SupabasePreferenceRepository,
)
from recipe_assistant.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from recipe_assistant.adapters.supabase_user_repository import SupabaseUserRepository
from recipe_assistant.api.auth import AuthClient
from recipe_assistant.config import Settings
from recipe_assistant.database import LazySupabaseClient
from recipe_assistant.services.chat import ChatService
from recipe_assistant.services.conversations import ConversationService
from recipe_assistant.services.detection import IngredientDetectionService
from recipe_assistant.services.feedback import FeedbackService
from recipe_assistant.services.generation import RecipeGenerationService
from recipe_assistant.services.preferences import PreferenceService
from recipe_assistant.services.recipes import RecipeService
from recipe_assistant.services.summaries import ContextSummarizer
from recipe_assistant.services.tools import ToolRouter
from recipe_assistant.services.users import UserService
from recipe_assistant.services.workflow import RecipeWorkflow


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_client: AuthClient
    conversation_service: ConversationService
    recipe_service: RecipeService
    preference_service: PreferenceService
    tool_router: ToolRouter
    workflow: RecipeWorkflow
    chat_service: ChatService
    generation_service: RecipeGenerationService
    detection_service: IngredientDetectionService
    user_service: UserService
    feedback_service: FeedbackService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = LazySupabaseClient(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    openai_client = OpenAITextClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    model = resolved_settings.openai_model

    conversation_service = ConversationService(
        repository=SupabaseChatRepository(supabase_client),
        summarizer=ContextSummarizer(client=openai_client, model=model),
    )
    recipe_service = RecipeService(SupabaseRecipeRepository(supabase_client))
    preference_service = PreferenceService(
        SupabasePreferenceRepository(supabase_client)
    )
    tool_router = ToolRouter(
        conversation_service=conversation_service,
        recipe_service=recipe_service,
        preference_service=preference_service,
    )
    workflow = RecipeWorkflow(
        conversation_service=conversation_service,
        preference_service=preference_service,
        client=openai_client,
        model=model,
    )
    chat_service = ChatService(
        conversation_service=conversation_service,
        recipe_service=recipe_service,
        tool_router=tool_router,
        client=openai_client,
        model=model,
    )
    generation_service = RecipeGenerationService(
        client=openai_client,
        model=model,
        recipe_service=recipe_service,
        preference_service=preference_service,
    )
    detection_service = IngredientDetectionService(client=openai_client, model=model)

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_client=SupabaseAuthClient(supabase_client),
        conversation_service=conversation_service,
        recipe_service=recipe_service,
        preference_service=preference_service,
        tool_router=tool_router,
        workflow=workflow,
        chat_service=chat_service,
        generation_service=generation_service,
        detection_service=detection_service,
        user_service=UserService(SupabaseUserRepository(supabase_client)),
        feedback_service=FeedbackService(SupabaseFeedbackRepository(supabase_client)),
        close_resources=close_resources,
    )
