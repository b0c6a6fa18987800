"""Domain models for user profiles."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserProfile:
    """Profile mirrored from the identity provider."""

    user_id: str
    email: str | None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RecipeFeedback:
    """A user's reaction to a generated recipe."""

    user_id: str
    recipe_id: str
    feedback: str
    reason: str | None = None
