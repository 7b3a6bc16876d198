"""Daily plan transforms and weekly plan aggregation."""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID, uuid4

from calorie_planner.domain.nutrition import CustomMeal, FoodItem, MacroTotals, MealItem
from calorie_planner.domain.plans import (
    DailyPlan,
    Goals,
    GoalsPatch,
    MealName,
    MealSlot,
    PlanUpdate,
    WeeklyPlan,
)
from calorie_planner.services.nutrition import custom_meal_as_food, sum_totals

_logger = logging.getLogger(__name__)


class PlanRepository(Protocol):
    """Persistence interface for per-day plans."""

    def get_daily_plan(self, owner_id: UUID, date_key: str) -> DailyPlan | None:
        """Return the stored plan for a date, if any."""

    def save_daily_plan(self, owner_id: UUID, date_key: str, plan: DailyPlan) -> None:
        """Overwrite the stored slots and goals for a date."""


def apply_plan_update(
    week: WeeklyPlan, date_key: str, update: PlanUpdate
) -> WeeklyPlan:
    """Return a new weekly plan with only the target date replaced."""
    current = week.day(date_key)
    slots = current.slots if update.slots is None else _copy_slots(update.slots)
    goals = current.goals
    if update.goals is not None:
        goals = merge_goals(goals, update.goals)
    days = dict(week.days)
    days[date_key] = DailyPlan(slots=slots, goals=goals)
    return WeeklyPlan(days=days)


def merge_goals(goals: Goals, patch: GoalsPatch) -> Goals:
    """Shallow-merge a goals patch onto existing goals."""
    return Goals(
        calories=goals.calories if patch.calories is None else patch.calories,
        protein=goals.protein if patch.protein is None else patch.protein,
        carbs=goals.carbs if patch.carbs is None else patch.carbs,
        fats=goals.fats if patch.fats is None else patch.fats,
    )


def _copy_slots(slots: tuple[MealSlot, ...]) -> tuple[MealSlot, ...]:
    return tuple(MealSlot(name=slot.name, items=tuple(slot.items)) for slot in slots)


def slot_totals(slot: MealSlot) -> MacroTotals:
    """Return consumed nutrition for one slot."""
    return sum_totals(slot.items)


def day_totals(plan: DailyPlan) -> MacroTotals:
    """Return consumed nutrition across every slot of a day."""
    return sum_totals(item for slot in plan.slots for item in slot.items)


def is_blank(plan: DailyPlan) -> bool:
    """Return True for a day with zero goals and no items in any slot."""
    goals = plan.goals
    no_goals = not any((goals.calories, goals.protein, goals.carbs, goals.fats))
    return no_goals and all(not slot.items for slot in plan.slots)


def add_food_to_slots(
    slots: tuple[MealSlot, ...],
    meal_name: MealName,
    food: FoodItem,
    quantity: float | None = None,
) -> tuple[MealSlot, ...]:
    """Append a food to a slot; quantity defaults to one serving."""
    item = MealItem(
        meal_item_id=_new_item_id(),
        food=food,
        quantity=food.serving_size if quantity is None else quantity,
    )
    return _append(slots, meal_name, item)


def add_custom_meal_to_slots(
    slots: tuple[MealSlot, ...],
    meal_name: MealName,
    meal: CustomMeal,
    quantity: float | None = None,
) -> tuple[MealSlot, ...]:
    """Append a custom meal to a slot as a single item."""
    item = MealItem(
        meal_item_id=_new_item_id(),
        food=custom_meal_as_food(meal),
        quantity=meal.serving_size if quantity is None else quantity,
        is_custom=True,
    )
    return _append(slots, meal_name, item)


def remove_item_from_slots(
    slots: tuple[MealSlot, ...], meal_name: MealName, meal_item_id: str
) -> tuple[MealSlot, ...]:
    """Remove one meal item instance from a slot."""
    return tuple(
        replace(
            slot,
            items=tuple(
                item for item in slot.items if item.meal_item_id != meal_item_id
            ),
        )
        if slot.name == meal_name
        else slot
        for slot in slots
    )


def _append(
    slots: tuple[MealSlot, ...], meal_name: MealName, item: MealItem
) -> tuple[MealSlot, ...]:
    by_name = {slot.name: slot for slot in slots}
    result = []
    for name in MealName:
        slot = by_name.get(name, MealSlot(name=name))
        if name == meal_name:
            slot = replace(slot, items=(*slot.items, item))
        result.append(slot)
    return tuple(result)


def _new_item_id() -> str:
    return str(uuid4())


@dataclass
class WeeklyPlanService:
    """Loads the seven days of a displayed week from the store."""

    repository: PlanRepository

    async def load_week(
        self,
        owner_id: UUID,
        dates: list[str],
        standing_goals: Goals | None,
        *,
        own_plan: bool,
        today_key: str,
    ) -> WeeklyPlan:
        """Fetch every date concurrently and seed today's goals when unset."""
        plans = await asyncio.gather(
            *(
                asyncio.to_thread(self.repository.get_daily_plan, owner_id, key)
                for key in dates
            )
        )
        days = {
            key: plan or DailyPlan.empty()
            for key, plan in zip(dates, plans, strict=True)
        }
        if (
            own_plan
            and standing_goals is not None
            and today_key in days
            and not days[today_key].goals.is_set
        ):
            days[today_key] = replace(days[today_key], goals=standing_goals)
            _logger.info("Seeded goals for %s from standing goals", today_key)
        return WeeklyPlan(days=days)
