"""User preference service."""

from dataclasses import dataclass
from typing import Protocol

from recipe_assistant.domain.preferences import UserPreferences


class PreferenceRepository(Protocol):
    """Persistence interface for user preferences."""

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return the stored preferences for a user, if any."""

    def upsert_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Create or replace the stored preferences for a user."""


@dataclass
class PreferenceService:
    """Service for reading and writing cooking preferences."""

    repository: PreferenceRepository

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return stored preferences or None when the user never saved any."""
        return self.repository.get_preferences(user_id)

    def get_preferences_or_default(self, user_id: str) -> UserPreferences:
        """Return stored preferences, falling back to defaults."""
        return self.repository.get_preferences(user_id) or UserPreferences()

    def save_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Persist a user's preferences."""
        self.repository.upsert_preferences(user_id, preferences)

    def format_for_prompt(self, preferences: UserPreferences | None) -> str:
        """Render preferences as a text block for model prompts."""
        if preferences is None:
            return ""
        return format_preferences(preferences)


def format_preferences(preferences: UserPreferences) -> str:
    """Format preferences as human-readable lines, skipping empty fields."""
    lines = ["User preferences:"]
    list_fields = [
        ("Dietary restrictions", preferences.dietary_restrictions),
        ("Allergies", preferences.allergies),
        ("Liked ingredients", preferences.liked_ingredients),
        ("Disliked ingredients", preferences.disliked_ingredients),
        ("Preferred cuisines", preferences.preferred_cuisines),
    ]
    for label, values in list_fields:
        if values:
            lines.append(f"- {label}: {', '.join(values)}")
    lines.append(f"- Cooking skill level: {preferences.cooking_skill_level}")
    if preferences.available_equipment:
        lines.append(
            f"- Available equipment: {', '.join(preferences.available_equipment)}"
        )
    if preferences.max_cooking_time:
        lines.append(f"- Max cooking time: {preferences.max_cooking_time} minutes")
    lines.append(f"- Spice level: {preferences.spice_level}")
    return "\n".join(lines)
