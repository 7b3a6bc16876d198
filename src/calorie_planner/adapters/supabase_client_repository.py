"""Supabase repository for professional client rosters."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client as SupabaseClient

from calorie_planner.adapters.supabase_profile_repository import (
    fetch_profile,
    parse_profile,
)
from calorie_planner.domain.profiles import Client, UserProfile
from calorie_planner.services.clients import ClientRepository


@dataclass
class SupabaseClientRepository(ClientRepository):
    """Supabase implementation for clients and paid slots."""

    client: SupabaseClient

    def list_clients(self, professional_id: UUID) -> list[Client]:
        """Return all clients of a professional."""
        response = (
            self.client.table("clients")
            .select("*")
            .eq("professional_id", str(professional_id))
            .order("created_at")
            .execute()
        )
        return [_parse_client(row) for row in response.data or []]

    def create_client(self, client: Client) -> Client:
        """Insert a client row and return it."""
        response = (
            self.client.table("clients")
            .insert(
                {
                    "id": str(client.id),
                    "professional_id": str(client.professional_id),
                    "email": client.email,
                    "status": client.status,
                    "client_user_id": (
                        str(client.client_user_id) if client.client_user_id else None
                    ),
                    "display_name": client.display_name,
                    "created_at": (
                        client.created_at.isoformat() if client.created_at else None
                    ),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create client")
        return _parse_client(response.data[0])

    def update_client(self, client: Client) -> Client:
        """Update a client's status and linked account."""
        response = (
            self.client.table("clients")
            .update(
                {
                    "status": client.status,
                    "client_user_id": (
                        str(client.client_user_id) if client.client_user_id else None
                    ),
                    "display_name": client.display_name,
                }
            )
            .eq("id", str(client.id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update client")
        return _parse_client(response.data[0])

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return a user profile."""
        return fetch_profile(self.client, user_id)

    def increment_paid_slots(self, professional_id: UUID) -> int:
        """Add one paid client slot to the professional's profile."""
        profile = fetch_profile(self.client, professional_id)
        if profile is None:
            raise RuntimeError("Professional profile not found")
        slots = profile.paid_client_slots + 1
        response = (
            self.client.table("profiles")
            .update({"paid_client_slots": slots})
            .eq("user_id", str(professional_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update client slots")
        return slots

    def set_professional(self, user_id: UUID, professional_id: UUID) -> UserProfile:
        """Store the professional on the user's profile."""
        response = (
            self.client.table("profiles")
            .update({"professional_id": str(professional_id)})
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to link professional")
        return parse_profile(response.data[0])


def _parse_client(row: dict[str, object]) -> Client:
    created_raw = row.get("created_at")
    client_user_raw = row.get("client_user_id")
    return Client(
        id=UUID(str(row["id"])),
        professional_id=UUID(str(row["professional_id"])),
        email=str(row.get("email", "")),
        status=str(row.get("status", "pending")),
        client_user_id=UUID(str(client_user_raw)) if client_user_raw else None,
        display_name=row.get("display_name"),  # type: ignore[arg-type]
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
