"""Bearer token verification against Supabase Auth."""

import logging
from dataclasses import dataclass

from recipe_assistant.database import SupabaseHandle

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthClient:
    """Resolves access tokens to user ids."""

    client: SupabaseHandle

    def get_user_id(self, token: str) -> str | None:
        """Return the user id for a valid token, otherwise None."""
        try:
            response = self.client.auth.get_user(token)
        except Exception:
            _logger.warning("Token verification failed", exc_info=True)
            return None
        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            return None
        return str(user.id)
