"""Calorie recommendation and meal plan generation endpoints."""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status

from calorie_planner.api.dependencies import current_user_id, get_container
from calorie_planner.api.models import MealPlanIn, day_payload  # noqa: TC001
from calorie_planner.domain.ai import CalorieRecommendationInput  # noqa: TC001
from calorie_planner.domain.plans import DailyPlan
from calorie_planner.services.nutrition import PlanValidationError

router = APIRouter(tags=["ai"])
_logger = logging.getLogger(__name__)


@router.post("/recommendations")
async def recommend(
    payload: CalorieRecommendationInput,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return recommended daily calories and macros with an explanation."""
    container = get_container(request)
    try:
        result = await container.recommendation_service.recommend(payload)
    except Exception as exc:
        _logger.exception("Recommendation failed", extra={"user_id": str(user_id)})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not get a recommendation, please try again",
        ) from exc
    return result.model_dump(by_alias=True)


@router.post("/meal-plans")
async def generate_meal_plan(
    payload: MealPlanIn,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Generate one day of meals from the user's foods and custom meals."""
    container = get_container(request)
    foods, custom_meals = await asyncio.gather(
        asyncio.to_thread(container.library_service.list_foods, user_id),
        asyncio.to_thread(container.library_service.list_custom_meals, user_id),
    )
    goals = payload.goals.to_goals()
    try:
        slots = await container.meal_plan_service.generate(goals, foods, custom_meals)
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except Exception as exc:
        _logger.exception(
            "Meal plan generation failed", extra={"user_id": str(user_id)}
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not generate a meal plan, please try again",
        ) from exc
    return day_payload(DailyPlan(slots=slots, goals=goals))
