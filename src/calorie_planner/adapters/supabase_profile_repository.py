"""Supabase repository for profiles and standing goals."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorie_planner.domain.plans import Goals
from calorie_planner.domain.profiles import ROLE_USER, UserProfile
from calorie_planner.services.documents import goals_from_document, goals_to_document
from calorie_planner.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profiles and standing goals."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""
        return fetch_profile(self.client, user_id)

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Insert or update the profile row."""
        response = (
            self.client.table("profiles")
            .upsert(
                {
                    "user_id": str(profile.user_id),
                    "display_name": profile.display_name,
                    "email": profile.email,
                    "age": profile.age,
                    "role": profile.role,
                    "professional_id": (
                        str(profile.professional_id)
                        if profile.professional_id
                        else None
                    ),
                    "paid_client_slots": profile.paid_client_slots,
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save profile")
        return parse_profile(response.data[0])

    def get_goals(self, user_id: UUID) -> Goals | None:
        """Return the user's standing goals, if present."""
        response = (
            self.client.table("user_goals")
            .select("calories, protein, carbs, fats")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return goals_from_document(response.data[0])

    def save_goals(self, user_id: UUID, goals: Goals) -> Goals:
        """Insert or update the user's standing goals."""
        response = (
            self.client.table("user_goals")
            .upsert(
                {
                    "user_id": str(user_id),
                    **goals_to_document(goals),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save goals")
        return goals_from_document(response.data[0])


def fetch_profile(client: Client, user_id: UUID) -> UserProfile | None:
    """Load one profile row."""
    response = (
        client.table("profiles")
        .select("*")
        .eq("user_id", str(user_id))
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return parse_profile(response.data[0])


def parse_profile(row: dict[str, object]) -> UserProfile:
    """Parse a profile row into a domain model."""
    professional_raw = row.get("professional_id")
    age_raw = row.get("age")
    return UserProfile(
        user_id=UUID(str(row["user_id"])),
        display_name=str(row.get("display_name") or ""),
        email=row.get("email"),  # type: ignore[arg-type]
        age=int(age_raw) if age_raw is not None else None,  # type: ignore[call-overload]
        role=str(row.get("role") or ROLE_USER),
        professional_id=UUID(str(professional_raw)) if professional_raw else None,
        paid_client_slots=int(row.get("paid_client_slots") or 0),  # type: ignore[call-overload]
    )
