"""Supabase Auth token verification."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from calorie_planner.services.auth import AuthenticationError, IdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves access tokens through Supabase Auth."""

    client: Client

    def user_id_for_token(self, token: str) -> UUID:
        """Return the user id for a valid access token."""
        if not token:
            raise AuthenticationError("Missing access token")
        try:
            response = self.client.auth.get_user(token)
        except Exception as exc:
            _logger.info("Rejected access token: %s", type(exc).__name__)
            raise AuthenticationError("Invalid access token") from exc
        user = getattr(response, "user", None)
        if user is None:
            raise AuthenticationError("Invalid access token")
        return UUID(str(user.id))
