"""Request models and response payload helpers for the HTTP API."""

import datetime as dt
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from calorie_planner.domain.nutrition import FoodItem, MacroTotals, MealItem
from calorie_planner.domain.plans import DailyPlan, Goals, GoalsPatch, MealName
from calorie_planner.services.documents import (
    goals_to_document,
    plan_to_document,
)
from calorie_planner.services.plans import day_totals, slot_totals


class FoodIn(BaseModel):
    """Payload for creating a food."""

    name: str = Field(min_length=1)
    calories: float = Field(ge=0, allow_inf_nan=False)
    protein: float = Field(ge=0, allow_inf_nan=False)
    carbs: float = Field(ge=0, allow_inf_nan=False)
    fats: float = Field(ge=0, allow_inf_nan=False)
    serving_size: float = Field(gt=0, allow_inf_nan=False)
    serving_unit: str = "g"

    def to_food(self) -> FoodItem:
        """Return a food without an id."""
        return FoodItem(id="", **self.model_dump())


class IngredientIn(BaseModel):
    """An ingredient of a composed custom meal."""

    food: FoodIn
    quantity: float = Field(gt=0, allow_inf_nan=False)

    def to_item(self, index: int) -> MealItem:
        """Return a meal item for the ingredient."""
        return MealItem(
            meal_item_id=f"ingredient-{index}",
            food=self.food.to_food(),
            quantity=self.quantity,
        )


class ManualTotalsIn(BaseModel):
    """Hand-entered totals for a custom meal."""

    calories: float = Field(ge=0, allow_inf_nan=False)
    protein: float = Field(ge=0, allow_inf_nan=False)
    carbs: float = Field(ge=0, allow_inf_nan=False)
    fats: float = Field(ge=0, allow_inf_nan=False)
    serving_size: float = Field(gt=0, allow_inf_nan=False)
    serving_unit: str = "serving"

    def to_totals(self) -> MacroTotals:
        """Return the macro totals."""
        return MacroTotals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )


class CustomMealIn(BaseModel):
    """Payload for a custom meal: ingredients or manual totals."""

    name: str = Field(min_length=1)
    items: list[IngredientIn] = Field(default_factory=list)
    manual: ManualTotalsIn | None = None


class GoalsIn(BaseModel):
    """Calorie and macro targets."""

    calories: float = Field(default=0, ge=0, allow_inf_nan=False)
    protein: float = Field(default=0, ge=0, allow_inf_nan=False)
    carbs: float = Field(default=0, ge=0, allow_inf_nan=False)
    fats: float = Field(default=0, ge=0, allow_inf_nan=False)

    def to_goals(self) -> Goals:
        """Return domain goals."""
        return Goals(**self.model_dump())


class ProfileIn(BaseModel):
    """Editable profile fields."""

    display_name: str
    email: str | None = None
    age: int | None = None


class WeightIn(BaseModel):
    """A weight measurement in kilograms."""

    weight_kg: float = Field(gt=0, allow_inf_nan=False)


class ClientIn(BaseModel):
    """A client email to add to the roster."""

    email: str


class MessageIn(BaseModel):
    """A chat message body."""

    text: str


class CheckoutIn(BaseModel):
    """Payer email for a client-slot subscription."""

    payer_email: str


class MealPlanIn(BaseModel):
    """Goals a generated meal plan should meet."""

    goals: GoalsIn


class NavigateAction(BaseModel):
    action: Literal["navigate"]
    date: dt.date


class SelectAction(BaseModel):
    action: Literal["select"]
    date: dt.date


class AddFoodAction(BaseModel):
    action: Literal["add_food"]
    meal: MealName
    food_id: str
    quantity: float | None = Field(default=None, gt=0, allow_inf_nan=False)


class AddCustomMealAction(BaseModel):
    action: Literal["add_custom_meal"]
    meal: MealName
    meal_id: str
    quantity: float | None = Field(default=None, gt=0, allow_inf_nan=False)


class RemoveItemAction(BaseModel):
    action: Literal["remove_item"]
    meal: MealName
    meal_item_id: str


class SetGoalsAction(BaseModel):
    action: Literal["set_goals"]
    calories: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    protein: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    carbs: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    fats: float | None = Field(default=None, ge=0, allow_inf_nan=False)

    def to_patch(self) -> GoalsPatch:
        """Return a goals patch with only the supplied targets."""
        return GoalsPatch(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )


class GeneratePlanAction(BaseModel):
    action: Literal["generate_plan"]


PlanAction = Annotated[
    NavigateAction
    | SelectAction
    | AddFoodAction
    | AddCustomMealAction
    | RemoveItemAction
    | SetGoalsAction
    | GeneratePlanAction,
    Field(discriminator="action"),
]
PLAN_ACTION_ADAPTER: TypeAdapter[PlanAction] = TypeAdapter(PlanAction)


def totals_payload(totals: MacroTotals) -> dict[str, float]:
    """Serialize totals rounded for display."""
    return {
        "calories": round(totals.calories, 1),
        "protein": round(totals.protein, 1),
        "carbs": round(totals.carbs, 1),
        "fats": round(totals.fats, 1),
    }


def day_payload(plan: DailyPlan) -> dict[str, Any]:
    """Serialize a day with slot and day totals."""
    document = plan_to_document(plan)
    for slot_document, slot in zip(document["slots"], plan.slots, strict=True):
        slot_document["totals"] = totals_payload(slot_totals(slot))
    document["totals"] = totals_payload(day_totals(plan))
    return document


def week_payload(days: dict[str, DailyPlan]) -> dict[str, Any]:
    """Serialize a week keyed by date."""
    return {key: day_payload(plan) for key, plan in days.items()}


def goals_payload(goals: Goals | None) -> dict[str, float] | None:
    """Serialize optional goals."""
    return goals_to_document(goals) if goals is not None else None

