"""Supabase implementation for foods and custom meals."""

from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from supabase import Client

from calorie_planner.domain.nutrition import CustomMeal, FoodItem
from calorie_planner.services.documents import (
    custom_meal_from_document,
    custom_meal_to_document,
    food_from_document,
    food_to_document,
)
from calorie_planner.services.library import LibraryRepository


@dataclass
class SupabaseLibraryRepository(LibraryRepository):
    """Supabase-backed repository for a user's foods and custom meals."""

    client: Client

    def list_foods(self, user_id: UUID) -> list[FoodItem]:
        """Return all foods for a user ordered by name."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [food_from_document(row) for row in response.data or []]

    def create_food(self, user_id: UUID, food: FoodItem) -> FoodItem:
        """Create a food and return it."""
        if not food.id:
            food = replace(food, id=str(uuid4()))
        response = (
            self.client.table("foods")
            .insert({"user_id": str(user_id), **food_to_document(food)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food")
        return food_from_document(response.data[0])

    def create_foods(self, user_id: UUID, foods: list[FoodItem]) -> list[FoodItem]:
        """Create several foods in one request."""
        if not foods:
            return []
        response = (
            self.client.table("foods")
            .insert(
                [{"user_id": str(user_id), **food_to_document(food)} for food in foods]
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create foods")
        return [food_from_document(row) for row in response.data]

    def delete_food(self, user_id: UUID, food_id: str) -> None:
        """Delete a food."""
        self.client.table("foods").delete().eq("user_id", str(user_id)).eq(
            "id", food_id
        ).execute()

    def list_custom_meals(self, user_id: UUID) -> list[CustomMeal]:
        """Return all custom meals for a user ordered by name."""
        response = (
            self.client.table("custom_meals")
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [custom_meal_from_document(row) for row in response.data or []]

    def create_custom_meal(self, user_id: UUID, meal: CustomMeal) -> CustomMeal:
        """Create a custom meal and return it."""
        if not meal.id:
            meal = replace(meal, id=str(uuid4()))
        response = (
            self.client.table("custom_meals")
            .insert({"user_id": str(user_id), **custom_meal_to_document(meal)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create custom meal")
        return custom_meal_from_document(response.data[0])

    def delete_custom_meal(self, user_id: UUID, meal_id: str) -> None:
        """Delete a custom meal."""
        self.client.table("custom_meals").delete().eq("user_id", str(user_id)).eq(
            "id", meal_id
        ).execute()
