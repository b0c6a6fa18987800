"""Supabase-backed user profile repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from recipe_assistant.database import SupabaseHandle
from recipe_assistant.domain.users import UserProfile
from recipe_assistant.services.users import UserRepository

_COLUMNS = "user_id, email, first_name, last_name, image_url, created_at, updated_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user profile persistence."""

    client: SupabaseHandle

    def get_user(self, user_id: str) -> UserProfile | None:
        """Return the profile row for a user id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def create_user(self, profile: UserProfile) -> UserProfile:
        """Create a profile row and return it."""
        now = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("users")
            .insert({**_profile_fields(profile), "created_at": now, "updated_at": now})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def update_user(self, profile: UserProfile) -> UserProfile:
        """Overwrite the profile fields and return the updated row."""
        response = (
            self.client.table("users")
            .update(
                {
                    **_profile_fields(profile),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("user_id", profile.user_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update user in Supabase")
        return _parse_user(response.data[0])


def _profile_fields(profile: UserProfile) -> dict[str, object]:
    return {
        "user_id": profile.user_id,
        "email": profile.email,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "image_url": profile.image_url,
    }


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_user(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        user_id=str(row["user_id"]),
        email=row.get("email"),  # type: ignore[arg-type]
        first_name=row.get("first_name"),  # type: ignore[arg-type]
        last_name=row.get("last_name"),  # type: ignore[arg-type]
        image_url=row.get("image_url"),  # type: ignore[arg-type]
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )
