"""Recipe feedback recording."""

import logging
from dataclasses import dataclass
from typing import Protocol

from recipe_assistant.domain.users import RecipeFeedback

_logger = logging.getLogger(__name__)


class FeedbackRepository(Protocol):
    """Persistence interface for recipe feedback."""

    def create_feedback(self, feedback: RecipeFeedback) -> None:
        """Create a feedback row."""


@dataclass
class FeedbackService:
    """Service for recording how users rated generated recipes."""

    repository: FeedbackRepository

    def record_feedback(
        self, user_id: str, recipe_id: str, feedback: str, reason: str | None = None
    ) -> RecipeFeedback:
        """Persist and log a piece of feedback."""
        entry = RecipeFeedback(
            user_id=user_id, recipe_id=recipe_id, feedback=feedback, reason=reason
        )
        self.repository.create_feedback(entry)
        _logger.info(
            "Recorded recipe feedback",
            extra={"recipe_id": recipe_id, "feedback": feedback},
        )
        return entry
