"""Supabase-backed user preference repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from recipe_assistant.database import SupabaseHandle
from recipe_assistant.domain.preferences import UserPreferences
from recipe_assistant.services.preferences import PreferenceRepository


@dataclass
class SupabasePreferenceRepository(PreferenceRepository):
    """Supabase implementation for preference persistence."""

    client: SupabaseHandle

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return the stored preferences for a user, if any."""
        response = (
            self.client.table("user_preferences")
            .select("preferences_json")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return UserPreferences.model_validate(
                response.data[0].get("preferences_json") or {}
            )
        return None

    def upsert_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Insert or replace the user's preferences row."""
        self.client.table("user_preferences").upsert(
            {
                "user_id": user_id,
                "preferences_json": preferences.model_dump(mode="json"),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
