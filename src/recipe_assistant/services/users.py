"""User profile mirroring."""

from dataclasses import dataclass
from typing import Protocol

from recipe_assistant.domain.users import UserProfile


class UserRepository(Protocol):
    """Persistence interface for mirrored user profiles."""

    def get_user(self, user_id: str) -> UserProfile | None:
        """Return the mirrored profile for a user, if present."""

    def create_user(self, profile: UserProfile) -> UserProfile:
        """Create and return a new profile row."""

    def update_user(self, profile: UserProfile) -> UserProfile:
        """Overwrite the mutable profile fields and return the row."""


@dataclass
class UserService:
    """Application service for keeping the profile mirror current."""

    repository: UserRepository

    def sync_user(  # noqa: PLR0913
        self,
        user_id: str,
        email: str | None,
        first_name: str | None = None,
        last_name: str | None = None,
        image_url: str | None = None,
    ) -> UserProfile:
        """Create the profile on first sight, otherwise update it."""
        profile = UserProfile(
            user_id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            image_url=image_url,
        )
        if self.repository.get_user(user_id) is not None:
            return self.repository.update_user(profile)
        return self.repository.create_user(profile)

    def get_user(self, user_id: str) -> UserProfile | None:
        """Return the mirrored profile, if any."""
        return self.repository.get_user(user_id)
