"""Food database and custom meal endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status

from calorie_planner.api.dependencies import current_user_id, get_container
from calorie_planner.api.models import CustomMealIn, FoodIn  # noqa: TC001
from calorie_planner.services.documents import (
    custom_meal_to_document,
    food_to_document,
)
from calorie_planner.services.nutrition import (
    PlanValidationError,
    build_custom_meal,
    manual_custom_meal,
)

if TYPE_CHECKING:
    from calorie_planner.domain.nutrition import CustomMeal

router = APIRouter(tags=["library"])


@router.get("/foods")
def list_foods(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's foods, seeding starter foods on first use."""
    foods = get_container(request).library_service.list_foods(user_id)
    return {"foods": [food_to_document(food) for food in foods]}


@router.post("/foods", status_code=status.HTTP_201_CREATED)
def create_food(
    payload: FoodIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Add a food to the user's database."""
    try:
        food = get_container(request).library_service.add_food(
            user_id, payload.to_food()
        )
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return food_to_document(food)


@router.delete("/foods/{food_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_food(
    food_id: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    """Delete a food from the user's database."""
    get_container(request).library_service.delete_food(user_id, food_id)


@router.get("/custom-meals")
def list_custom_meals(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's custom meals."""
    meals = get_container(request).library_service.list_custom_meals(user_id)
    return {"custom_meals": [custom_meal_to_document(meal) for meal in meals]}


@router.post("/custom-meals", status_code=status.HTTP_201_CREATED)
def create_custom_meal(
    payload: CustomMealIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Create a custom meal from ingredients or from manual totals."""
    try:
        meal = _build_meal(payload)
        stored = get_container(request).library_service.add_custom_meal(
            user_id, meal
        )
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return custom_meal_to_document(stored)


@router.delete("/custom-meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_custom_meal(
    meal_id: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    """Delete a custom meal."""
    get_container(request).library_service.delete_custom_meal(user_id, meal_id)


def _build_meal(payload: CustomMealIn) -> CustomMeal:
    if payload.items and payload.manual is not None:
        raise PlanValidationError("Send either ingredients or manual totals")
    if payload.manual is not None:
        return manual_custom_meal(
            "",
            payload.name,
            payload.manual.to_totals(),
            payload.manual.serving_size,
            payload.manual.serving_unit,
        )
    return build_custom_meal(
        "",
        payload.name,
        [item.to_item(index) for index, item in enumerate(payload.items)],
    )
