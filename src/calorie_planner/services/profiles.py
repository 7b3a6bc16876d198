"""Services for user profiles and standing goals."""

import math
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from calorie_planner.domain.plans import Goals
from calorie_planner.domain.profiles import UserProfile
from calorie_planner.services.nutrition import PlanValidationError


class ProfileRepository(Protocol):
    """Persistence interface for profiles and standing goals."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return a profile by user id."""

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Insert or replace a profile."""

    def get_goals(self, user_id: UUID) -> Goals | None:
        """Return a user's standing goals, if any."""

    def save_goals(self, user_id: UUID, goals: Goals) -> Goals:
        """Insert or replace a user's standing goals."""


@dataclass
class ProfileService:
    """Application service for profile data and standing goals."""

    repository: ProfileRepository

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if one exists."""
        return self.repository.get_profile(user_id)

    def update_profile(
        self,
        user_id: UUID,
        *,
        display_name: str,
        email: str | None = None,
        age: int | None = None,
    ) -> UserProfile:
        """Create or update the editable fields of a profile."""
        if not display_name.strip():
            raise PlanValidationError("Display name is required")
        if age is not None and age <= 0:
            raise PlanValidationError("Age must be greater than zero")
        current = self.repository.get_profile(user_id)
        if current is None:
            profile = UserProfile(
                user_id=user_id,
                display_name=display_name.strip(),
                email=email,
                age=age,
            )
        else:
            profile = replace(
                current,
                display_name=display_name.strip(),
                email=email if email is not None else current.email,
                age=age if age is not None else current.age,
            )
        return self.repository.save_profile(profile)

    def get_goals(self, user_id: UUID) -> Goals | None:
        """Return the user's standing goals."""
        return self.repository.get_goals(user_id)

    def set_goals(self, user_id: UUID, goals: Goals) -> Goals:
        """Validate and store standing goals."""
        validate_goals(goals)
        return self.repository.save_goals(user_id, goals)

    def can_view_plan(self, viewer_id: UUID, owner_id: UUID) -> bool:
        """Return True for the owner or the owner's assigned professional."""
        if viewer_id == owner_id:
            return True
        owner = self.repository.get_profile(owner_id)
        return owner is not None and owner.professional_id == viewer_id

    def are_linked(self, first_id: UUID, second_id: UUID) -> bool:
        """Return True when one user is the other's professional."""
        for client_id, professional_id in (
            (first_id, second_id),
            (second_id, first_id),
        ):
            profile = self.repository.get_profile(client_id)
            if profile is not None and profile.professional_id == professional_id:
                return True
        return False


def validate_goals(goals: Goals) -> None:
    """Reject negative or non-numeric calorie and macro targets."""
    for label, value in (
        ("calories", goals.calories),
        ("protein", goals.protein),
        ("carbs", goals.carbs),
        ("fats", goals.fats),
    ):
        if not math.isfinite(value) or value < 0:
            raise PlanValidationError(f"{label} goal must be a non-negative number")
