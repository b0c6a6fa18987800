"""Bearer token authentication for API routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from fastapi import Header, HTTPException, Request, status

if TYPE_CHECKING:
    from recipe_assistant.containers import AppContainer

_BEARER_PREFIX = "Bearer "


class AuthClient(Protocol):
    """Interface for resolving access tokens to user ids."""

    def get_user_id(self, token: str) -> str | None:
        """Return the user id for a valid token, otherwise None."""


async def require_user_id(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """Return the caller's user id or reject the request with 401."""
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    token = authorization[len(_BEARER_PREFIX) :].strip()
    container: AppContainer = request.app.state.container
    user_id = container.auth_client.get_user_id(token) if token else None
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id
