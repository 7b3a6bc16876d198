"""Domain models for user profiles and professional clients."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

ROLE_USER = "user"
ROLE_PROFESSIONAL = "professional"


@dataclass(frozen=True)
class UserProfile:
    """Profile data stored alongside the identity provider account."""

    user_id: UUID
    display_name: str
    email: str | None = None
    age: int | None = None
    role: str = ROLE_USER
    professional_id: UUID | None = None
    paid_client_slots: int = 0

    @property
    def is_professional(self) -> bool:
        """Return True for professional accounts."""
        return self.role == ROLE_PROFESSIONAL


@dataclass(frozen=True)
class Client:
    """A client on a professional's roster."""

    id: UUID
    professional_id: UUID
    email: str
    status: str
    client_user_id: UUID | None = None
    display_name: str | None = None
    created_at: datetime | None = None
