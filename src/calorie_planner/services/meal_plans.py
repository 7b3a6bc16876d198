"""AI meal plan generation restricted to the user's own foods and meals."""

import json
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from calorie_planner.domain.ai import GeneratedMealPlan
from calorie_planner.domain.nutrition import CustomMeal, FoodItem
from calorie_planner.domain.plans import Goals, MealName, MealSlot, empty_slots
from calorie_planner.services.nutrition import PlanValidationError
from calorie_planner.services.plans import add_custom_meal_to_slots, add_food_to_slots
from calorie_planner.services.recommendations import StructuredCompletionClient

_logger = logging.getLogger(__name__)

MEAL_PLAN_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meals": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "enum": [m.value for m in MealName]},
                    "items": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "source": {
                                    "type": "string",
                                    "enum": ["food", "custom_meal"],
                                },
                                "ref_id": {"type": "string"},
                                "quantity": {"type": "number"},
                            },
                            "required": ["source", "ref_id", "quantity"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["name", "items"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["meals"],
    "additionalProperties": False,
}

_INSTRUCTIONS = (
    "You are a nutritionist building one day of meals. "
    "Use only the foods and custom meals listed by id. "
    "Fill Breakfast, Lunch, Dinner and Snacks so the day's totals land close "
    "to the calorie and macro goals. Quantities are in each entry's serving "
    "unit."
)


class MealPlanError(RuntimeError):
    """Raised when a generated meal plan cannot be applied."""


@dataclass
class MealPlanService:
    """Service that turns model output into meal slots."""

    client: StructuredCompletionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def generate(
        self,
        goals: Goals,
        foods: list[FoodItem],
        custom_meals: list[CustomMeal],
    ) -> tuple[MealSlot, ...]:
        """Generate a full set of slots; unknown references reject the plan."""
        if not foods and not custom_meals:
            raise PlanValidationError(
                "Add foods or custom meals before generating a plan"
            )
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            schema_name="meal_plan",
            schema=MEAL_PLAN_SCHEMA,
            instructions=_INSTRUCTIONS,
            prompt=_format_prompt(goals, foods, custom_meals),
        )
        try:
            plan = GeneratedMealPlan.model_validate(raw)
        except ValidationError as exc:
            raise MealPlanError("Meal plan did not match the expected schema") from exc
        return build_slots(plan, foods, custom_meals)


def build_slots(
    plan: GeneratedMealPlan,
    foods: list[FoodItem],
    custom_meals: list[CustomMeal],
) -> tuple[MealSlot, ...]:
    """Resolve generated entries against the supplied records."""
    foods_by_id = {food.id: food for food in foods}
    meals_by_id = {meal.id: meal for meal in custom_meals}
    slots = empty_slots()
    for meal in plan.meals:
        meal_name = MealName(meal.name)
        for entry in meal.items:
            if entry.source == "food":
                food = foods_by_id.get(entry.ref_id)
                if food is None:
                    raise MealPlanError(f"Unknown food id {entry.ref_id!r}")
                slots = add_food_to_slots(slots, meal_name, food, entry.quantity)
            else:
                custom = meals_by_id.get(entry.ref_id)
                if custom is None:
                    raise MealPlanError(f"Unknown custom meal id {entry.ref_id!r}")
                slots = add_custom_meal_to_slots(
                    slots, meal_name, custom, entry.quantity
                )
    _logger.info(
        "Built generated plan with %d items",
        sum(len(slot.items) for slot in slots),
    )
    return slots


def _format_prompt(
    goals: Goals, foods: list[FoodItem], custom_meals: list[CustomMeal]
) -> str:
    payload = {
        "goals": {
            "calories": goals.calories,
            "protein": goals.protein,
            "carbs": goals.carbs,
            "fats": goals.fats,
        },
        "foods": [
            {
                "id": food.id,
                "name": food.name,
                "calories": food.calories,
                "protein": food.protein,
                "carbs": food.carbs,
                "fats": food.fats,
                "serving_size": food.serving_size,
                "serving_unit": food.serving_unit,
            }
            for food in foods
        ],
        "custom_meals": [
            {
                "id": meal.id,
                "name": meal.name,
                "calories": meal.total_calories,
                "protein": meal.total_protein,
                "carbs": meal.total_carbs,
                "fats": meal.total_fats,
                "serving_size": meal.serving_size,
                "serving_unit": meal.serving_unit,
            }
            for meal in custom_meals
        ],
    }
    return json.dumps(payload, ensure_ascii=False)
