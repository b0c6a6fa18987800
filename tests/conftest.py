"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from recipe_assistant.config import Settings
from recipe_assistant.containers import AppContainer
from recipe_assistant.domain.chat import ChatMessage, ChatSession
from recipe_assistant.domain.preferences import UserPreferences
from recipe_assistant.domain.recipes import Recipe, RecipeSession
from recipe_assistant.domain.users import RecipeFeedback, UserProfile
from recipe_assistant.services.chat import ChatService
from recipe_assistant.services.conversations import ChatRepository, ConversationService
from recipe_assistant.services.detection import IngredientDetectionService
from recipe_assistant.services.feedback import FeedbackRepository, FeedbackService
from recipe_assistant.services.generation import RecipeGenerationService
from recipe_assistant.services.language_model import ModelMessage, TextGenerationClient
from recipe_assistant.services.preferences import PreferenceRepository, PreferenceService
from recipe_assistant.services.recipes import RecipeRepository, RecipeService
from recipe_assistant.services.summaries import ContextSummarizer
from recipe_assistant.services.tools import ToolRouter
from recipe_assistant.services.users import UserRepository, UserService
from recipe_assistant.services.workflow import RecipeWorkflow

USER_ID = "user-1"
SESSION_ID = "session-1"
VALID_TOKEN = "valid-token"


@dataclass
class InMemoryChatRepository(ChatRepository):
    """In-memory chat repository for tests."""

    messages: list[ChatMessage] = field(default_factory=list)
    sessions: dict[tuple[str, str], ChatSession] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise RuntimeError(f"{operation} failed")

    def insert_message(self, message: ChatMessage) -> ChatMessage:
        self._check("insert_message")
        saved = replace(message, id=str(uuid4()))
        self.messages.append(saved)
        return saved

    def list_messages_since(
        self, user_id: str, session_id: str, since: datetime
    ) -> list[ChatMessage]:
        self._check("list_messages")
        matching = [
            m
            for m in self._session_messages(user_id, session_id)
            if m.timestamp is not None and m.timestamp >= since
        ]
        return sorted(matching, key=lambda m: m.timestamp)  # type: ignore[arg-type, return-value]

    def list_messages_before(
        self, user_id: str, session_id: str, before: datetime, limit: int
    ) -> list[ChatMessage]:
        self._check("list_messages")
        matching = [
            m
            for m in self._session_messages(user_id, session_id)
            if m.timestamp is not None and m.timestamp < before
        ]
        return sorted(matching, key=lambda m: m.timestamp, reverse=True)[:limit]  # type: ignore[arg-type, return-value]

    def get_session(self, user_id: str, session_id: str) -> ChatSession | None:
        self._check("get_session")
        return self.sessions.get((user_id, session_id))

    def create_session(self, user_id: str, session_id: str, title: str) -> ChatSession:
        self._check("create_session")
        now = datetime.now(tz=UTC)
        session = ChatSession(
            id=str(uuid4()),
            user_id=user_id,
            session_id=session_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self.sessions[(user_id, session_id)] = session
        return session

    def touch_session(self, user_id: str, session_id: str) -> None:
        session = self.sessions[(user_id, session_id)]
        self.sessions[(user_id, session_id)] = replace(
            session, updated_at=datetime.now(tz=UTC)
        )

    def increment_message_count(self, user_id: str, session_id: str) -> None:
        self._check("increment_message_count")
        session = self.sessions.get((user_id, session_id))
        if session is None:
            return
        self.sessions[(user_id, session_id)] = replace(
            session, message_count=session.message_count + 1
        )

    def update_summary(
        self, user_id: str, session_id: str, summary: str, summarized_at: datetime
    ) -> None:
        self._check("update_summary")
        session = self.sessions[(user_id, session_id)]
        self.sessions[(user_id, session_id)] = replace(
            session, summary=summary, last_summarized_at=summarized_at
        )

    def list_sessions(self, user_id: str, limit: int) -> list[ChatSession]:
        self._check("list_sessions")
        sessions = [s for s in self.sessions.values() if s.user_id == user_id]
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)[:limit]

    def _session_messages(self, user_id: str, session_id: str) -> list[ChatMessage]:
        return [
            m
            for m in self.messages
            if m.user_id == user_id and m.session_id == session_id
        ]


def recipe_matches(recipe: Recipe, query: str) -> bool:
    """Case-insensitive substring match on name, description or ingredients."""
    needle = query.lower()
    return (
        needle in recipe.name.lower()
        or needle in recipe.description.lower()
        or any(needle in i.item.lower() for i in recipe.ingredients)
    )


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    sessions: list[RecipeSession] = field(default_factory=list)
    recipes: list[Recipe] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)

    def insert_recipe_session(self, session: RecipeSession) -> str:
        if "insert_recipe_session" in self.failing:
            raise RuntimeError("insert failed")
        stored = session.model_copy(update={"id": str(uuid4())})
        self.sessions.append(stored)
        return str(stored.id)

    def insert_recipes(self, session_id: str, recipes: list[Recipe]) -> None:
        self.recipes.extend(
            recipe.model_copy(update={"id": str(uuid4())}) for recipe in recipes
        )

    def list_recipes(self, user_id: str, limit: int) -> list[Recipe]:
        if "list_recipes" in self.failing:
            raise RuntimeError("list failed")
        return self._newest_first(user_id)[:limit]

    def get_recipe_session(self, user_id: str, session_id: str) -> RecipeSession | None:
        return next(
            (
                s
                for s in self.sessions
                if s.user_id == user_id and s.session_id == session_id
            ),
            None,
        )

    def list_recipe_sessions(self, user_id: str, limit: int) -> list[RecipeSession]:
        sessions = [s for s in self.sessions if s.user_id == user_id]
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)[:limit]

    def search_recipes(self, user_id: str, query: str, limit: int) -> list[Recipe]:
        return [r for r in self._newest_first(user_id) if recipe_matches(r, query)][
            :limit
        ]

    def _newest_first(self, user_id: str) -> list[Recipe]:
        recipes = [r for r in self.recipes if r.user_id == user_id]
        return list(reversed(recipes))


@dataclass
class InMemoryPreferenceRepository(PreferenceRepository):
    """In-memory preference repository for tests."""

    preferences: dict[str, UserPreferences] = field(default_factory=dict)

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        return self.preferences.get(user_id)

    def upsert_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        self.preferences[user_id] = preferences


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user profile repository for tests."""

    users: dict[str, UserProfile] = field(default_factory=dict)
    updates: int = 0

    def get_user(self, user_id: str) -> UserProfile | None:
        return self.users.get(user_id)

    def create_user(self, profile: UserProfile) -> UserProfile:
        created = replace(profile, created_at=datetime.now(tz=UTC))
        self.users[profile.user_id] = created
        return created

    def update_user(self, profile: UserProfile) -> UserProfile:
        self.updates += 1
        existing = self.users[profile.user_id]
        updated = replace(
            profile, created_at=existing.created_at, updated_at=datetime.now(tz=UTC)
        )
        self.users[profile.user_id] = updated
        return updated


@dataclass
class InMemoryFeedbackRepository(FeedbackRepository):
    """In-memory feedback repository for tests."""

    entries: list[RecipeFeedback] = field(default_factory=list)

    def create_feedback(self, feedback: RecipeFeedback) -> None:
        self.entries.append(feedback)


@dataclass
class FakeTextClient(TextGenerationClient):
    """Fake language model returning queued replies."""

    replies: list[str] = field(default_factory=list)
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(
        self,
        *,
        model: str,
        messages: list[ModelMessage],
        image_data_url: str | None = None,
    ) -> str:
        self.calls.append(
            {"model": model, "messages": messages, "image_data_url": image_data_url}
        )
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@dataclass
class FakeAuthClient:
    """Fake auth client mapping tokens to user ids."""

    tokens: dict[str, str] = field(default_factory=lambda: {VALID_TOKEN: USER_ID})

    def get_user_id(self, token: str) -> str | None:
        return self.tokens.get(token)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def chat_repository() -> InMemoryChatRepository:
    return InMemoryChatRepository()


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def preference_repository() -> InMemoryPreferenceRepository:
    return InMemoryPreferenceRepository()


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def conversation_service(
    chat_repository: InMemoryChatRepository, text_client: FakeTextClient
) -> ConversationService:
    return ConversationService(
        repository=chat_repository,
        summarizer=ContextSummarizer(client=text_client, model="test-model"),
    )


@pytest.fixture
def recipe_service(recipe_repository: InMemoryRecipeRepository) -> RecipeService:
    return RecipeService(recipe_repository)


@pytest.fixture
def preference_service(
    preference_repository: InMemoryPreferenceRepository,
) -> PreferenceService:
    return PreferenceService(preference_repository)


@pytest.fixture
def tool_router(
    conversation_service: ConversationService,
    recipe_service: RecipeService,
    preference_service: PreferenceService,
) -> ToolRouter:
    return ToolRouter(
        conversation_service=conversation_service,
        recipe_service=recipe_service,
        preference_service=preference_service,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    text_client: FakeTextClient,
    conversation_service: ConversationService,
    recipe_service: RecipeService,
    preference_service: PreferenceService,
    tool_router: ToolRouter,
) -> AppContainer:
    model = settings.openai_model

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_client=FakeAuthClient(),
        conversation_service=conversation_service,
        recipe_service=recipe_service,
        preference_service=preference_service,
        tool_router=tool_router,
        workflow=RecipeWorkflow(
            conversation_service=conversation_service,
            preference_service=preference_service,
            client=text_client,
            model=model,
        ),
        chat_service=ChatService(
            conversation_service=conversation_service,
            recipe_service=recipe_service,
            tool_router=tool_router,
            client=text_client,
            model=model,
        ),
        generation_service=RecipeGenerationService(
            client=text_client,
            model=model,
            recipe_service=recipe_service,
            preference_service=preference_service,
        ),
        detection_service=IngredientDetectionService(client=text_client, model=model),
        user_service=UserService(InMemoryUserRepository()),
        feedback_service=FeedbackService(InMemoryFeedbackRepository()),
        close_resources=close_resources,
    )
