"""Identity lookups delegated to the auth provider."""

from typing import Protocol
from uuid import UUID


class AuthenticationError(PermissionError):
    """Raised when a bearer token does not identify a user."""


class IdentityProvider(Protocol):
    """Resolves access tokens to user ids."""

    def user_id_for_token(self, token: str) -> UUID:
        """Return the user id behind a token or raise AuthenticationError."""
