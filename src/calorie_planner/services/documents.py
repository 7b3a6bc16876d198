"""Conversions between domain objects and JSON documents.

Stored rows may predate some fields, so readers fall back to defaults instead
of failing on a missing key.
"""

from collections.abc import Mapping
from typing import Any

from calorie_planner.domain.nutrition import CustomMeal, FoodItem, MealItem
from calorie_planner.domain.plans import DailyPlan, Goals, MealName, MealSlot

UNNAMED_FOOD = "Unnamed food"


def _number(value: object, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def food_to_document(food: FoodItem) -> dict[str, Any]:
    """Serialize a food."""
    return {
        "id": food.id,
        "name": food.name,
        "calories": food.calories,
        "protein": food.protein,
        "carbs": food.carbs,
        "fats": food.fats,
        "serving_size": food.serving_size,
        "serving_unit": food.serving_unit,
    }


def food_from_document(data: Mapping[str, Any]) -> FoodItem:
    """Read a food, filling missing fields with defaults."""
    return FoodItem(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or UNNAMED_FOOD),
        calories=_number(data.get("calories")),
        protein=_number(data.get("protein")),
        carbs=_number(data.get("carbs")),
        fats=_number(data.get("fats")),
        serving_size=_number(data.get("serving_size"), 1.0),
        serving_unit=str(data.get("serving_unit") or "unit"),
    )


def meal_item_to_document(item: MealItem) -> dict[str, Any]:
    """Serialize a meal item with its embedded food."""
    return {
        "meal_item_id": item.meal_item_id,
        "food": food_to_document(item.food),
        "quantity": item.quantity,
        "is_custom": item.is_custom,
    }


def meal_item_from_document(data: Mapping[str, Any]) -> MealItem:
    """Read a meal item; quantity defaults to one serving."""
    food = food_from_document(data.get("food") or {})
    return MealItem(
        meal_item_id=str(data.get("meal_item_id") or ""),
        food=food,
        quantity=_number(data.get("quantity"), food.serving_size),
        is_custom=bool(data.get("is_custom", False)),
    )


def custom_meal_to_document(meal: CustomMeal) -> dict[str, Any]:
    """Serialize a custom meal."""
    return {
        "id": meal.id,
        "name": meal.name,
        "items": [meal_item_to_document(item) for item in meal.items],
        "total_calories": meal.total_calories,
        "total_protein": meal.total_protein,
        "total_carbs": meal.total_carbs,
        "total_fats": meal.total_fats,
        "serving_size": meal.serving_size,
        "serving_unit": meal.serving_unit,
    }


def custom_meal_from_document(data: Mapping[str, Any]) -> CustomMeal:
    """Read a custom meal, keeping stored totals as given."""
    return CustomMeal(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or UNNAMED_FOOD),
        items=tuple(meal_item_from_document(item) for item in data.get("items") or []),
        total_calories=_number(data.get("total_calories")),
        total_protein=_number(data.get("total_protein")),
        total_carbs=_number(data.get("total_carbs")),
        total_fats=_number(data.get("total_fats")),
        serving_size=_number(data.get("serving_size"), 1.0),
        serving_unit=str(data.get("serving_unit") or "serving"),
    )


def goals_to_document(goals: Goals) -> dict[str, float]:
    """Serialize goals."""
    return {
        "calories": goals.calories,
        "protein": goals.protein,
        "carbs": goals.carbs,
        "fats": goals.fats,
    }


def goals_from_document(data: Mapping[str, Any] | None) -> Goals:
    """Read goals; missing targets are zero."""
    data = data or {}
    return Goals(
        calories=_number(data.get("calories")),
        protein=_number(data.get("protein")),
        carbs=_number(data.get("carbs")),
        fats=_number(data.get("fats")),
    )


def slots_to_document(slots: tuple[MealSlot, ...]) -> list[dict[str, Any]]:
    """Serialize meal slots in display order."""
    return [
        {
            "name": slot.name.value,
            "items": [meal_item_to_document(item) for item in slot.items],
        }
        for slot in slots
    ]


def slots_from_document(data: list[Mapping[str, Any]] | None) -> tuple[MealSlot, ...]:
    """Read meal slots; unknown names are dropped and absent slots are empty."""
    by_name: dict[MealName, MealSlot] = {}
    for raw in data or []:
        try:
            name = MealName(raw.get("name"))
        except ValueError:
            continue
        items = tuple(meal_item_from_document(item) for item in raw.get("items") or [])
        by_name[name] = MealSlot(name=name, items=items)
    return tuple(by_name.get(name, MealSlot(name=name)) for name in MealName)


def plan_to_document(plan: DailyPlan) -> dict[str, Any]:
    """Serialize a daily plan as stored: slots plus goals."""
    return {
        "slots": slots_to_document(plan.slots),
        "goals": goals_to_document(plan.goals),
    }


def plan_from_document(data: Mapping[str, Any]) -> DailyPlan:
    """Read a stored daily plan."""
    return DailyPlan(
        slots=slots_from_document(data.get("slots")),
        goals=goals_from_document(data.get("goals")),
    )
