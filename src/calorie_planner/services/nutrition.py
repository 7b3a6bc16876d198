"""Nutrition math for meal items and custom meals."""

import math
from collections.abc import Iterable

from calorie_planner.domain.nutrition import (
    ZERO_TOTALS,
    CustomMeal,
    FoodItem,
    MacroTotals,
    MealItem,
)

_TOTALS_TOLERANCE = 0.01


class PlanValidationError(ValueError):
    """Raised when user input is rejected before reaching the store."""


def consumed(item: MealItem) -> MacroTotals:
    """Return the nutrition a meal item contributes at its chosen quantity."""
    food = item.food
    if food.serving_size <= 0 or item.quantity <= 0:
        return ZERO_TOTALS
    ratio = item.quantity / food.serving_size
    return MacroTotals(
        calories=food.calories * ratio,
        protein=food.protein * ratio,
        carbs=food.carbs * ratio,
        fats=food.fats * ratio,
    )


def sum_totals(items: Iterable[MealItem]) -> MacroTotals:
    """Sum the consumed nutrition of several meal items."""
    total = ZERO_TOTALS
    for item in items:
        portion = consumed(item)
        total = MacroTotals(
            calories=total.calories + portion.calories,
            protein=total.protein + portion.protein,
            carbs=total.carbs + portion.carbs,
            fats=total.fats + portion.fats,
        )
    return total


def validate_food(food: FoodItem) -> None:
    """Reject foods with a blank name, negative macros or no serving size."""
    if not food.name.strip():
        raise PlanValidationError("Food name is required")
    for label, value in (
        ("calories", food.calories),
        ("protein", food.protein),
        ("carbs", food.carbs),
        ("fats", food.fats),
    ):
        if not math.isfinite(value) or value < 0:
            raise PlanValidationError(f"{label} must be a non-negative number")
    if not math.isfinite(food.serving_size) or food.serving_size <= 0:
        raise PlanValidationError("Serving size must be greater than zero")


def build_custom_meal(meal_id: str, name: str, items: list[MealItem]) -> CustomMeal:
    """Create an ingredient-composed custom meal with derived totals."""
    if not name.strip():
        raise PlanValidationError("Meal name is required")
    if not items:
        raise PlanValidationError("An ingredient meal needs at least one item")
    if any(not math.isfinite(item.quantity) or item.quantity <= 0 for item in items):
        raise PlanValidationError("Ingredient quantities must be greater than zero")
    totals = sum_totals(items)
    return CustomMeal(
        id=meal_id,
        name=name,
        items=tuple(items),
        total_calories=totals.calories,
        total_protein=totals.protein,
        total_carbs=totals.carbs,
        total_fats=totals.fats,
        serving_size=1.0,
        serving_unit="serving",
    )


def manual_custom_meal(  # noqa: PLR0913
    meal_id: str,
    name: str,
    totals: MacroTotals,
    serving_size: float,
    serving_unit: str,
) -> CustomMeal:
    """Create a custom meal from hand-entered totals."""
    meal = CustomMeal(
        id=meal_id,
        name=name,
        items=(),
        total_calories=totals.calories,
        total_protein=totals.protein,
        total_carbs=totals.carbs,
        total_fats=totals.fats,
        serving_size=serving_size,
        serving_unit=serving_unit,
    )
    validate_food(custom_meal_as_food(meal))
    return meal


def validate_custom_meal(meal: CustomMeal) -> None:
    """Check a custom meal's fields and that item totals are consistent."""
    validate_food(custom_meal_as_food(meal))
    if meal.is_manual:
        return
    totals = sum_totals(meal.items)
    for stored, derived in (
        (meal.total_calories, totals.calories),
        (meal.total_protein, totals.protein),
        (meal.total_carbs, totals.carbs),
        (meal.total_fats, totals.fats),
    ):
        if abs(stored - derived) > _TOTALS_TOLERANCE:
            raise PlanValidationError("Custom meal totals do not match its items")


def custom_meal_as_food(meal: CustomMeal) -> FoodItem:
    """Return a food record carrying a custom meal's per-serving totals."""
    return FoodItem(
        id=meal.id,
        name=meal.name,
        calories=meal.total_calories,
        protein=meal.total_protein,
        carbs=meal.total_carbs,
        fats=meal.total_fats,
        serving_size=meal.serving_size,
        serving_unit=meal.serving_unit,
    )
