"""Services for the user's food database and custom meals."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from calorie_planner.domain.nutrition import CustomMeal, FoodItem
from calorie_planner.services.nutrition import (
    PlanValidationError,
    validate_custom_meal,
    validate_food,
)

_logger = logging.getLogger(__name__)

STARTER_FOODS: list[dict[str, object]] = [
    {"name": "Apple", "calories": 95, "protein": 0.5, "carbs": 25, "fats": 0.3,
     "serving_size": 1, "serving_unit": "medium"},
    {"name": "Banana", "calories": 105, "protein": 1.3, "carbs": 27, "fats": 0.4,
     "serving_size": 1, "serving_unit": "medium"},
    {"name": "Chicken Breast", "calories": 165, "protein": 31, "carbs": 0,
     "fats": 3.6, "serving_size": 100, "serving_unit": "g"},
    {"name": "Brown Rice", "calories": 111, "protein": 2.6, "carbs": 23,
     "fats": 0.9, "serving_size": 100, "serving_unit": "g cooked"},
    {"name": "Whole Egg", "calories": 78, "protein": 6, "carbs": 0.6, "fats": 5,
     "serving_size": 1, "serving_unit": "large"},
    {"name": "Almonds", "calories": 579, "protein": 21, "carbs": 22, "fats": 49,
     "serving_size": 100, "serving_unit": "g"},
    {"name": "Greek Yogurt", "calories": 59, "protein": 10, "carbs": 3.6,
     "fats": 0.4, "serving_size": 100, "serving_unit": "g"},
    {"name": "Salmon", "calories": 208, "protein": 20, "carbs": 0, "fats": 13,
     "serving_size": 100, "serving_unit": "g"},
    {"name": "Broccoli", "calories": 55, "protein": 3.7, "carbs": 11, "fats": 0.6,
     "serving_size": 1, "serving_unit": "cup"},
    {"name": "Olive Oil", "calories": 884, "protein": 0, "carbs": 0, "fats": 100,
     "serving_size": 100, "serving_unit": "g"},
    {"name": "Oats", "calories": 389, "protein": 16.9, "carbs": 66.3, "fats": 6.9,
     "serving_size": 100, "serving_unit": "g"},
    {"name": "Protein Powder", "calories": 393, "protein": 80, "carbs": 8,
     "fats": 4, "serving_size": 100, "serving_unit": "g"},
]  # fmt: skip


class LibraryRepository(Protocol):
    """Persistence interface for foods and custom meals."""

    def list_foods(self, user_id: UUID) -> list[FoodItem]:
        """Return all foods for a user."""

    def create_food(self, user_id: UUID, food: FoodItem) -> FoodItem:
        """Store a food; an empty id lets the store assign one."""

    def create_foods(self, user_id: UUID, foods: list[FoodItem]) -> list[FoodItem]:
        """Store several foods with their given ids."""

    def delete_food(self, user_id: UUID, food_id: str) -> None:
        """Delete a food."""

    def list_custom_meals(self, user_id: UUID) -> list[CustomMeal]:
        """Return all custom meals for a user."""

    def create_custom_meal(self, user_id: UUID, meal: CustomMeal) -> CustomMeal:
        """Store a custom meal; an empty id lets the store assign one."""

    def delete_custom_meal(self, user_id: UUID, meal_id: str) -> None:
        """Delete a custom meal."""


@dataclass
class LibraryService:
    """Application service for the food database and custom meals."""

    repository: LibraryRepository

    def list_foods(self, user_id: UUID, *, seed: bool = True) -> list[FoodItem]:
        """Return the user's foods, seeding the starter list when empty."""
        foods = self.repository.list_foods(user_id)
        if foods or not seed:
            return foods
        _logger.info("Seeding starter foods for user %s", user_id)
        return self.repository.create_foods(user_id, starter_foods())

    def add_food(self, user_id: UUID, food: FoodItem) -> FoodItem:
        """Validate and store a new food."""
        validate_food(food)
        return self.repository.create_food(user_id, food)

    def delete_food(self, user_id: UUID, food_id: str) -> None:
        """Delete a food by id."""
        if not food_id:
            raise PlanValidationError("Food id is required")
        self.repository.delete_food(user_id, food_id)

    def list_custom_meals(self, user_id: UUID) -> list[CustomMeal]:
        """Return the user's custom meals."""
        return self.repository.list_custom_meals(user_id)

    def add_custom_meal(self, user_id: UUID, meal: CustomMeal) -> CustomMeal:
        """Validate and store a custom meal."""
        validate_custom_meal(meal)
        return self.repository.create_custom_meal(user_id, meal)

    def delete_custom_meal(self, user_id: UUID, meal_id: str) -> None:
        """Delete a custom meal by id."""
        if not meal_id:
            raise PlanValidationError("Meal id is required")
        self.repository.delete_custom_meal(user_id, meal_id)


def starter_foods() -> list[FoodItem]:
    """Return the starter food list with slug ids."""
    return [
        FoodItem(
            id=str(entry["name"]).lower().replace(" ", "-"),
            name=str(entry["name"]),
            calories=float(entry["calories"]),
            protein=float(entry["protein"]),
            carbs=float(entry["carbs"]),
            fats=float(entry["fats"]),
            serving_size=float(entry["serving_size"]),
            serving_unit=str(entry["serving_unit"]),
        )
        for entry in STARTER_FOODS
    ]
