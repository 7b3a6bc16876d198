"""Nutrition domain models for foods, meal items and custom meals."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MacroTotals:
    """Energy and macronutrient amounts."""

    calories: float
    protein: float
    carbs: float
    fats: float


ZERO_TOTALS = MacroTotals(calories=0.0, protein=0.0, carbs=0.0, fats=0.0)


@dataclass(frozen=True)
class FoodItem:
    """Nutrition facts for one food, normalized to a single serving."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    serving_size: float
    serving_unit: str


@dataclass(frozen=True)
class MealItem:
    """A food or custom meal placed into a meal slot with a chosen quantity."""

    meal_item_id: str
    food: FoodItem
    quantity: float
    is_custom: bool = False


@dataclass(frozen=True)
class CustomMeal:
    """User-defined composite food.

    Ingredient-composed meals carry their items and totals derived from them.
    Manually entered meals carry no items and keep the totals they were given.
    """

    id: str
    name: str
    items: tuple[MealItem, ...]
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float
    serving_size: float
    serving_unit: str

    @property
    def is_manual(self) -> bool:
        """Return True when totals were entered by hand."""
        return not self.items
