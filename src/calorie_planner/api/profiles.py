"""Profile, standing goals and weight endpoints."""

from __future__ import annotations

from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status

from calorie_planner.api.dependencies import current_user_id, get_container
from calorie_planner.api.models import (  # noqa: TC001
    GoalsIn,
    ProfileIn,
    WeightIn,
    goals_payload,
)
from calorie_planner.domain.profiles import UserProfile  # noqa: TC001
from calorie_planner.domain.tracking import WeightEntry  # noqa: TC001
from calorie_planner.services.nutrition import PlanValidationError

router = APIRouter(tags=["profile"])


@router.get("/profile")
def get_profile(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the signed-in user's profile."""
    profile = get_container(request).profile_service.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _profile_payload(profile)


@router.put("/profile")
def update_profile(
    payload: ProfileIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Create or update the signed-in user's profile."""
    try:
        profile = get_container(request).profile_service.update_profile(
            user_id,
            display_name=payload.display_name,
            email=payload.email,
            age=payload.age,
        )
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _profile_payload(profile)


@router.get("/goals")
def get_goals(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's standing goals, or null when none are set."""
    goals = get_container(request).profile_service.get_goals(user_id)
    return {"goals": goals_payload(goals)}


@router.put("/goals")
def set_goals(
    payload: GoalsIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Replace the user's standing goals."""
    goals = get_container(request).profile_service.set_goals(
        user_id, payload.to_goals()
    )
    return {"goals": goals_payload(goals)}


@router.get("/weight")
def weight_history(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return weekly weight entries ordered by week."""
    entries = get_container(request).weight_service.history(user_id)
    return {"entries": [_weight_payload(entry) for entry in entries]}


@router.post("/weight")
def record_weight(
    payload: WeightIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Record this week's weight."""
    container = get_container(request)
    try:
        result = container.weight_service.record(
            user_id, payload.weight_kg, container.clock()
        )
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return {"entry": _weight_payload(result.entry), "updated": result.updated}


def _profile_payload(profile: UserProfile) -> dict[str, object]:
    return {
        "user_id": str(profile.user_id),
        "display_name": profile.display_name,
        "email": profile.email,
        "age": profile.age,
        "role": profile.role,
        "professional_id": (
            str(profile.professional_id) if profile.professional_id else None
        ),
        "paid_client_slots": profile.paid_client_slots,
    }


def _weight_payload(entry: WeightEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "week_start": entry.week_start,
        "weight_kg": entry.weight_kg,
        "recorded_at": entry.recorded_at.isoformat(),
    }
