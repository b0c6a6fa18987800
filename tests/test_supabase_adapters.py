"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

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
from recipe_assistant.domain.chat import ChatMessage
from recipe_assistant.domain.preferences import UserPreferences
from recipe_assistant.domain.recipes import (
    Recipe,
    RecipeIngredient,
    RecipeSession,
    SourceIngredient,
)
from recipe_assistant.domain.users import RecipeFeedback, UserProfile


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "upsert": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    upsert_options: dict[str, object] = field(default_factory=dict)
    ordering: list[tuple[str, bool]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def upsert(self, payload, **kwargs) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.upsert_options = kwargs
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def or_(self, filters: str) -> "FakeTable":
        self.last_filters.append(("or", filters))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"{column}>=", value))
        return self

    def lt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"{column}<", value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.ordering.append((column, desc))
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    rpc_calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]

    def rpc(self, fn: str, params: dict[str, object]) -> FakeTable:
        self.rpc_calls.append((fn, params))
        return FakeTable(name=fn)


def _message_row(content: str, sent_at: datetime) -> dict[str, object]:
    return {
        "id": "m-1",
        "user_id": "u",
        "session_id": "s",
        "role": "assistant",
        "content": content,
        "message_type": "general",
        "metadata": {"tool_used": "search_recipes"},
        "sent_at": sent_at.isoformat(),
    }


def test_chat_repository_insert_and_list_messages() -> None:
    client = FakeSupabaseClient()
    table = client.table("chat_messages")
    sent_at = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    table.queue("insert", [_message_row("Hello", sent_at)])
    table.queue("select", [_message_row("Hello", sent_at)])

    repository = SupabaseChatRepository(client)
    saved = repository.insert_message(
        ChatMessage("u", "s", "assistant", "Hello", timestamp=sent_at)
    )
    listed = repository.list_messages_since("u", "s", sent_at - timedelta(hours=2))

    assert saved.id == "m-1"
    assert saved.timestamp == sent_at
    assert table.last_payload["sent_at"] == sent_at.isoformat()  # type: ignore[index]
    assert listed[0].metadata == {"tool_used": "search_recipes"}
    assert ("sent_at", False) in table.ordering


def test_chat_repository_list_before_orders_newest_first() -> None:
    client = FakeSupabaseClient()
    table = client.table("chat_messages")
    before = datetime(2024, 5, 1, tzinfo=UTC)

    SupabaseChatRepository(client).list_messages_before("u", "s", before, 20)

    assert ("sent_at<", before.isoformat()) in table.last_filters
    assert table.ordering == [("sent_at", True)]


def test_chat_repository_sessions() -> None:
    client = FakeSupabaseClient()
    table = client.table("chat_sessions")
    now = datetime.now(tz=UTC).isoformat()
    row = {
        "id": "row-1",
        "user_id": "u",
        "session_id": "s",
        "title": "New Recipe Chat",
        "created_at": now,
        "updated_at": now,
        "message_count": 4,
        "summary": None,
        "last_summarized_at": None,
    }
    table.queue("insert", [row])
    table.queue("select", [row])

    repository = SupabaseChatRepository(client)
    created = repository.create_session("u", "s", "New Recipe Chat")
    fetched = repository.get_session("u", "s")
    repository.increment_message_count("u", "s")

    assert created.message_count == 4
    assert fetched is not None
    assert fetched.summary is None
    assert client.rpc_calls == [
        ("increment_chat_message_count", {"p_user_id": "u", "p_session_id": "s"})
    ]
    assert table.last_filters == [("user_id", "u"), ("session_id", "s")]


def test_chat_repository_update_summary() -> None:
    client = FakeSupabaseClient()
    summarized_at = datetime(2024, 5, 1, tzinfo=UTC)

    SupabaseChatRepository(client).update_summary("u", "s", "Pasta talk", summarized_at)

    payload = client.table("chat_sessions").last_payload
    assert payload["summary"] == "Pasta talk"  # type: ignore[index]
    assert payload["last_summarized_at"] == summarized_at.isoformat()  # type: ignore[index]


def test_recipe_repository_store_and_search() -> None:
    client = FakeSupabaseClient()
    sessions_table = client.table("recipe_sessions")
    recipes_table = client.table("recipes")
    sessions_table.queue("insert", [{"id": "rs-1"}])
    recipes_table.queue("insert", [{"id": "r-1"}])
    recipe = Recipe(
        name="Garlic Noodles",
        user_id="u",
        category="basic",
        ingredients=[RecipeIngredient(item="garlic"), RecipeIngredient(item="noodles")],
    )
    recipes_table.queue(
        "select", [{"id": "r-1", "recipe_json": recipe.model_dump(mode="json")}]
    )
    session = RecipeSession(
        user_id="u",
        session_id="gen-1",
        source_ingredients=[SourceIngredient(name="garlic")],
        basic_recipes=[recipe],
        created_at=datetime.now(tz=UTC),
    )

    repository = SupabaseRecipeRepository(client)
    stored_id = repository.insert_recipe_session(session)
    repository.insert_recipes("gen-1", [recipe])
    inserted_rows = recipes_table.last_payload
    found = repository.search_recipes("u", "noodle, (drop)", 10)

    assert stored_id == "rs-1"
    assert inserted_rows[0]["ingredient_names"] == "garlic, noodles"  # type: ignore[index]
    assert inserted_rows[0]["session_id"] == "gen-1"  # type: ignore[index]
    assert found[0].id == "r-1"
    assert found[0].name == "Garlic Noodles"
    or_filter = dict(recipes_table.last_filters)["or"]
    assert "(" not in or_filter
    assert "name.ilike.%noodle" in or_filter


def test_recipe_repository_blank_search_skips_query() -> None:
    client = FakeSupabaseClient()

    assert SupabaseRecipeRepository(client).search_recipes("u", " ,() ", 5) == []
    assert client.table("recipes").last_filters == []


def test_recipe_repository_parses_session_rows() -> None:
    client = FakeSupabaseClient()
    client.table("recipe_sessions").queue(
        "select",
        [
            {
                "id": "rs-1",
                "user_id": "u",
                "session_id": "gen-1",
                "source_ingredients": [{"name": "egg", "quantity": "2"}],
                "basic_recipes": [{"name": "Omelette"}],
                "advanced_recipes": [],
                "created_at": "2024-05-01T08:00:00+00:00",
            }
        ],
    )

    session = SupabaseRecipeRepository(client).get_recipe_session("u", "gen-1")

    assert session is not None
    assert session.source_ingredients[0].quantity == "2"
    assert [r.name for r in session.all_recipes()] == ["Omelette"]


def test_preference_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    table = client.table("user_preferences")
    preferences = UserPreferences(allergies=["nuts"], spice_level="mild")

    repository = SupabasePreferenceRepository(client)
    repository.upsert_preferences("u", preferences)
    table.queue("select", [{"preferences_json": table.last_payload["preferences_json"]}])  # type: ignore[index]

    assert table.upsert_options == {"on_conflict": "user_id"}
    assert repository.get_preferences("u") == preferences
    assert repository.get_preferences("missing") is None


def test_user_repository_create_and_update() -> None:
    client = FakeSupabaseClient()
    table = client.table("users")
    row = {
        "user_id": "u",
        "email": "cook@example.com",
        "first_name": "Ada",
        "last_name": None,
        "image_url": None,
        "created_at": "2024-05-01T08:00:00+00:00",
        "updated_at": "2024-05-01T08:00:00+00:00",
    }
    table.queue("insert", [row])
    table.queue("update", [row])

    repository = SupabaseUserRepository(client)
    profile = UserProfile(user_id="u", email="cook@example.com", first_name="Ada")
    created = repository.create_user(profile)
    updated = repository.update_user(profile)

    assert created.created_at == datetime(2024, 5, 1, 8, 0, tzinfo=UTC)
    assert updated.first_name == "Ada"
    assert ("user_id", "u") in table.last_filters


def test_feedback_repository_inserts_row() -> None:
    client = FakeSupabaseClient()

    SupabaseFeedbackRepository(client).create_feedback(
        RecipeFeedback("u", "r-1", "liked", None)
    )

    payload = client.table("recipe_feedback").last_payload
    assert payload["recipe_id"] == "r-1"  # type: ignore[index]
    assert payload["feedback"] == "liked"  # type: ignore[index]


@dataclass
class FakeAuthApi:
    users: dict[str, str]

    def get_user(self, token: str) -> SimpleNamespace:
        if token not in self.users:
            raise ValueError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.users[token]))


def test_auth_client_resolves_user_id() -> None:
    client = SimpleNamespace(auth=FakeAuthApi({"good": "user-42"}))

    auth_client = SupabaseAuthClient(client)  # type: ignore[arg-type]

    assert auth_client.get_user_id("good") == "user-42"
    assert auth_client.get_user_id("bad") is None
