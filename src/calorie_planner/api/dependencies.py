"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Header, HTTPException, Request, status

from calorie_planner.services.auth import AuthenticationError

if TYPE_CHECKING:
    from calorie_planner.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the app."""
    return request.app.state.container


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an Authorization header value."""
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def current_user_id(
    request: Request, authorization: str | None = Header(default=None)
) -> UUID:
    """Resolve the bearer token to the signed-in user's id."""
    container = get_container(request)
    try:
        return container.identity_provider.user_id_for_token(
            bearer_token(authorization)
        )
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc
