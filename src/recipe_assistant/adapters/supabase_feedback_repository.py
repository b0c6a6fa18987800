"""Supabase repository for recipe feedback."""

from dataclasses import dataclass
from datetime import UTC, datetime

from recipe_assistant.database import SupabaseHandle
from recipe_assistant.domain.users import RecipeFeedback
from recipe_assistant.services.feedback import FeedbackRepository


@dataclass
class SupabaseFeedbackRepository(FeedbackRepository):
    """Supabase-backed feedback repository."""

    client: SupabaseHandle

    def create_feedback(self, feedback: RecipeFeedback) -> None:
        """Create a feedback row."""
        self.client.table("recipe_feedback").insert(
            {
                "user_id": feedback.user_id,
                "recipe_id": feedback.recipe_id,
                "feedback": feedback.feedback,
                "reason": feedback.reason,
                "created_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()
