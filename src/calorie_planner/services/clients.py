"""Professional client roster and slot accounting."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol
from uuid import UUID, uuid4

from calorie_planner.domain.profiles import Client, UserProfile
from calorie_planner.services.nutrition import PlanValidationError

_logger = logging.getLogger(__name__)

FREE_CLIENT_SLOTS = 2
STATUS_PENDING = "pending"
STATUS_ACTIVE = "active"


class ClientLimitError(PlanValidationError):
    """Raised when a professional has no free client slot left."""


class ClientRepository(Protocol):
    """Persistence interface for professional rosters."""

    def list_clients(self, professional_id: UUID) -> list[Client]:
        """Return all clients of a professional."""

    def create_client(self, client: Client) -> Client:
        """Store a new client entry."""

    def update_client(self, client: Client) -> Client:
        """Replace a client entry and return it."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return a user profile."""

    def increment_paid_slots(self, professional_id: UUID) -> int:
        """Add one paid slot and return the new count."""

    def set_professional(self, user_id: UUID, professional_id: UUID) -> UserProfile:
        """Assign the professional on a user profile."""


@dataclass
class ClientService:
    """Application service for a professional's clients."""

    repository: ClientRepository
    free_slots: int = FREE_CLIENT_SLOTS

    def list_clients(self, professional_id: UUID) -> list[Client]:
        """Return the professional's clients, oldest first."""
        clients = self.repository.list_clients(professional_id)
        return sorted(clients, key=_created_key)

    def capacity(self, professional_id: UUID) -> int:
        """Return how many clients the professional may hold."""
        profile = self._require_professional(professional_id)
        return self.free_slots + profile.paid_client_slots

    def add_client(self, professional_id: UUID, email: str, now: datetime) -> Client:
        """Add a pending client when a slot is available."""
        cleaned = email.strip().lower()
        if "@" not in cleaned:
            raise PlanValidationError("A valid client email is required")
        capacity = self.capacity(professional_id)
        clients = self.repository.list_clients(professional_id)
        if any(client.email == cleaned for client in clients):
            raise PlanValidationError("This client is already on your list")
        if len(clients) >= capacity:
            raise ClientLimitError(
                f"All {capacity} client slots are in use; buy another slot"
            )
        client = Client(
            id=uuid4(),
            professional_id=professional_id,
            email=cleaned,
            status=STATUS_PENDING,
            created_at=now,
        )
        return self.repository.create_client(client)

    def accept_invite(
        self, professional_id: UUID, user_id: UUID, now: datetime
    ) -> Client:
        """Link a user to the professional whose invite they followed.

        A pending entry with the user's email is activated; otherwise a new
        active entry takes a free slot.
        """
        if professional_id == user_id:
            raise PlanValidationError("You cannot be your own client")
        capacity = self.capacity(professional_id)
        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise PlanValidationError("Create your profile before accepting an invite")
        if profile.professional_id not in (None, professional_id):
            raise PlanValidationError("You already work with another professional")
        clients = self.repository.list_clients(professional_id)
        email = (profile.email or "").strip().lower()
        current = next(
            (client for client in clients if client.client_user_id == user_id), None
        )
        if current is None and email:
            current = next(
                (
                    client
                    for client in clients
                    if client.status == STATUS_PENDING and client.email == email
                ),
                None,
            )
        if current is None:
            if len(clients) >= capacity:
                raise ClientLimitError(
                    "This professional has no free client slot right now"
                )
            client = self.repository.create_client(
                Client(
                    id=uuid4(),
                    professional_id=professional_id,
                    email=email,
                    status=STATUS_ACTIVE,
                    client_user_id=user_id,
                    display_name=profile.display_name,
                    created_at=now,
                )
            )
        else:
            client = self.repository.update_client(
                replace(
                    current,
                    status=STATUS_ACTIVE,
                    client_user_id=user_id,
                    display_name=profile.display_name,
                )
            )
        if profile.professional_id != professional_id:
            self.repository.set_professional(user_id, professional_id)
        _logger.info("User %s joined professional %s", user_id, professional_id)
        return client

    def activate_client_slot(self, professional_id: UUID) -> int:
        """Grant one more paid client slot."""
        self._require_professional(professional_id)
        slots = self.repository.increment_paid_slots(professional_id)
        _logger.info(
            "Activated client slot for %s, paid slots now %d", professional_id, slots
        )
        return slots

    def professional_for(self, client_user_id: UUID) -> UUID | None:
        """Return the professional assigned to a client account, if any."""
        profile = self.repository.get_profile(client_user_id)
        return profile.professional_id if profile else None

    def _require_professional(self, professional_id: UUID) -> UserProfile:
        profile = self.repository.get_profile(professional_id)
        if profile is None or not profile.is_professional:
            raise PlanValidationError("Only professional accounts have clients")
        return profile


def _created_key(client: Client) -> str:
    return client.created_at.isoformat() if client.created_at else ""
