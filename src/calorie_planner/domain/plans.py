"""Domain models for daily and weekly meal plans."""

from dataclasses import dataclass, field
from enum import Enum

from calorie_planner.domain.nutrition import MealItem


class MealName(str, Enum):
    """Closed set of meal-time categories, in display order."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"


@dataclass(frozen=True)
class MealSlot:
    """A named meal slot holding an ordered sequence of meal items."""

    name: MealName
    items: tuple[MealItem, ...] = ()


@dataclass(frozen=True)
class Goals:
    """Calorie and macro targets."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0

    @property
    def is_set(self) -> bool:
        """Return True when a calorie goal has been chosen."""
        return self.calories > 0


@dataclass(frozen=True)
class GoalsPatch:
    """Partial goals update; None leaves a target unchanged."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None


def empty_slots() -> tuple[MealSlot, ...]:
    """Return the four meal slots with no items."""
    return tuple(MealSlot(name=name) for name in MealName)


@dataclass(frozen=True)
class DailyPlan:
    """Meal slots and goals for one calendar date."""

    slots: tuple[MealSlot, ...] = field(default_factory=empty_slots)
    goals: Goals = field(default_factory=Goals)

    @classmethod
    def empty(cls) -> "DailyPlan":
        """Return a plan with empty slots and zero goals."""
        return cls()


@dataclass(frozen=True)
class PlanUpdate:
    """Partial update for one date: a full slot list and/or a goals patch."""

    slots: tuple[MealSlot, ...] | None = None
    goals: GoalsPatch | None = None


@dataclass(frozen=True)
class WeeklyPlan:
    """In-memory view of date key to daily plan for the displayed week."""

    days: dict[str, DailyPlan] = field(default_factory=dict)

    def day(self, date_key: str) -> DailyPlan:
        """Return the plan for a date, treating absent dates as empty."""
        return self.days.get(date_key) or DailyPlan.empty()
