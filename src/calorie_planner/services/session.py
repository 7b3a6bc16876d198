"""Per-connection planning session over one user's week."""

import asyncio
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID

from calorie_planner.domain.nutrition import CustomMeal, FoodItem
from calorie_planner.domain.plans import (
    DailyPlan,
    Goals,
    GoalsPatch,
    MealName,
    PlanUpdate,
    WeeklyPlan,
)
from calorie_planner.services.autosave import PlanAutosaver
from calorie_planner.services.dates import DEFAULT_TIMEZONE, date_key, week_dates
from calorie_planner.services.library import LibraryService
from calorie_planner.services.meal_plans import MealPlanService
from calorie_planner.services.notifications import Notification, Notifier
from calorie_planner.services.nutrition import PlanValidationError
from calorie_planner.services.plans import (
    WeeklyPlanService,
    add_custom_meal_to_slots,
    add_food_to_slots,
    apply_plan_update,
    merge_goals,
    remove_item_from_slots,
)
from calorie_planner.services.profiles import ProfileService, validate_goals

_logger = logging.getLogger(__name__)


class PlanAccessError(PermissionError):
    """Raised when a viewer may not open another user's plan."""


class ReadOnlyPlanError(PlanValidationError):
    """Raised when a mutation targets a plan the viewer does not own."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _check_quantity(quantity: float | None) -> None:
    if quantity is not None and (not math.isfinite(quantity) or quantity <= 0):
        raise PlanValidationError("Quantity must be greater than zero")


@dataclass
class PlanSession:
    """Owns the displayed week for one viewer and routes edits to autosave.

    Invalid input raises PlanValidationError. Store and AI failures are
    reported to the notifier and leave the current state untouched.
    """

    owner_id: UUID
    viewer_id: UUID
    plans: WeeklyPlanService
    library: LibraryService
    profiles: ProfileService
    meal_plans: MealPlanService
    autosaver: PlanAutosaver
    notifier: Notifier
    timezone_name: str = DEFAULT_TIMEZONE
    clock: Callable[[], datetime] = _utc_now
    week: WeeklyPlan = field(default_factory=WeeklyPlan)
    week_dates: list[str] = field(default_factory=list)
    selected_date: str = ""
    foods: list[FoodItem] = field(default_factory=list)
    custom_meals: list[CustomMeal] = field(default_factory=list)
    standing_goals: Goals | None = None
    loading: bool = True

    @property
    def own_plan(self) -> bool:
        """Return True when the viewer is the plan's owner."""
        return self.viewer_id == self.owner_id

    @property
    def today_key(self) -> str:
        """Return today's date key in the reference timezone."""
        return date_key(self.clock(), self.timezone_name)

    def selected_plan(self) -> DailyPlan:
        """Return the plan of the selected date."""
        return self.week.day(self.selected_date)

    async def initial_load(self, anchor: date | None = None) -> bool:
        """Load foods, custom meals and standing goals, then the week."""
        if not self.own_plan:
            allowed = await asyncio.to_thread(
                self.profiles.can_view_plan, self.viewer_id, self.owner_id
            )
            if not allowed:
                raise PlanAccessError("You cannot view this plan")
        self.loading = True
        try:
            foods, custom_meals, goals = await asyncio.gather(
                asyncio.to_thread(
                    self.library.list_foods, self.owner_id, seed=self.own_plan
                ),
                asyncio.to_thread(self.library.list_custom_meals, self.owner_id),
                asyncio.to_thread(self.profiles.get_goals, self.owner_id),
            )
        except Exception:
            _logger.exception(
                "Failed to load library data", extra={"owner_id": str(self.owner_id)}
            )
            await self._notify("Could not load your data", "Please try again.")
            self.loading = False
            return False
        self.foods = foods
        self.custom_meals = custom_meals
        self.standing_goals = goals
        loaded = await self._load_week(anchor or self._today())
        self.loading = False
        return loaded

    async def navigate(self, anchor: date) -> bool:
        """Show the week containing anchor, fetching only on a new window."""
        if week_dates(anchor) == self.week_dates:
            self.selected_date = anchor.isoformat()
            return True
        return await self._load_week(anchor)

    def select_date(self, selected: date) -> None:
        """Select a date inside the displayed week."""
        key = selected.isoformat()
        if key not in self.week_dates:
            raise PlanValidationError(f"{key} is not in the displayed week")
        self.selected_date = key

    def add_food(
        self, meal_name: MealName, food_id: str, quantity: float | None = None
    ) -> DailyPlan:
        """Add a library food to a slot of the selected day."""
        food = next((food for food in self.foods if food.id == food_id), None)
        if food is None:
            raise PlanValidationError(f"Unknown food id {food_id!r}")
        _check_quantity(quantity)
        slots = add_food_to_slots(self.selected_plan().slots, meal_name, food, quantity)
        return self._apply(PlanUpdate(slots=slots))

    def add_custom_meal(
        self, meal_name: MealName, meal_id: str, quantity: float | None = None
    ) -> DailyPlan:
        """Add a custom meal to a slot of the selected day."""
        meal = next((meal for meal in self.custom_meals if meal.id == meal_id), None)
        if meal is None:
            raise PlanValidationError(f"Unknown custom meal id {meal_id!r}")
        _check_quantity(quantity)
        slots = add_custom_meal_to_slots(
            self.selected_plan().slots, meal_name, meal, quantity
        )
        return self._apply(PlanUpdate(slots=slots))

    def remove_item(self, meal_name: MealName, meal_item_id: str) -> DailyPlan:
        """Remove one item instance from a slot of the selected day."""
        slots = remove_item_from_slots(
            self.selected_plan().slots, meal_name, meal_item_id
        )
        return self._apply(PlanUpdate(slots=slots))

    def set_goals(self, patch: GoalsPatch) -> DailyPlan:
        """Merge new targets onto the selected day's goals."""
        validate_goals(merge_goals(self.selected_plan().goals, patch))
        return self._apply(PlanUpdate(goals=patch))

    async def apply_generated_plan(self) -> DailyPlan | None:
        """Replace the selected day's slots with a generated plan."""
        self._ensure_writable()
        try:
            slots = await self.meal_plans.generate(
                self.selected_plan().goals, self.foods, self.custom_meals
            )
        except PlanValidationError:
            raise
        except Exception:
            _logger.exception(
                "Meal plan generation failed",
                extra={"owner_id": str(self.owner_id)},
            )
            await self._notify(
                "Could not generate a meal plan", "Your day was left unchanged."
            )
            return None
        return self._apply(PlanUpdate(slots=slots))

    async def close(self) -> None:
        """Drop pending writes and wait for writes already in flight."""
        await self.autosaver.close()

    def _apply(self, update: PlanUpdate) -> DailyPlan:
        self._ensure_writable()
        if not self.selected_date:
            raise PlanValidationError("No date is selected")
        key = self.selected_date
        self.week = apply_plan_update(self.week, key, update)
        plan = self.week.day(key)
        if not self.loading:
            self.autosaver.schedule(self.owner_id, key, plan)
        return plan

    def _ensure_writable(self) -> None:
        if not self.own_plan:
            raise ReadOnlyPlanError("You can view this plan but not change it")

    async def _load_week(self, anchor: date) -> bool:
        dates = week_dates(anchor)
        try:
            week = await self.plans.load_week(
                self.owner_id,
                dates,
                self.standing_goals,
                own_plan=self.own_plan,
                today_key=self.today_key,
            )
        except Exception:
            _logger.exception(
                "Failed to load week",
                extra={"owner_id": str(self.owner_id), "week_start": dates[0]},
            )
            await self._notify("Could not load this week", "Please try again.")
            return False
        self.week = week
        self.week_dates = dates
        self.selected_date = anchor.isoformat()
        return True

    def _today(self) -> date:
        return date.fromisoformat(self.today_key)

    async def _notify(self, title: str, description: str) -> None:
        await self.notifier.notify(Notification(title=title, description=description))
