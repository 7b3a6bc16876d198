"""Weekly body weight tracking."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID, uuid4

from calorie_planner.domain.tracking import WeightEntry
from calorie_planner.services.dates import DEFAULT_TIMEZONE, today, week_start
from calorie_planner.services.nutrition import PlanValidationError


class WeightRepository(Protocol):
    """Persistence interface for weight entries."""

    def get_entry(self, user_id: UUID, week_start: str) -> WeightEntry | None:
        """Return the entry for a week, if any."""

    def save_entry(self, entry: WeightEntry) -> WeightEntry:
        """Insert or replace the entry for its week."""

    def list_entries(self, user_id: UUID) -> list[WeightEntry]:
        """Return all entries for a user."""


@dataclass(frozen=True)
class WeightRecordResult:
    """Outcome of recording a weight."""

    entry: WeightEntry
    updated: bool


@dataclass
class WeightService:
    """Keeps one weight entry per Monday-keyed week."""

    repository: WeightRepository
    timezone_name: str = DEFAULT_TIMEZONE

    def record(
        self, user_id: UUID, weight_kg: float, now: datetime
    ) -> WeightRecordResult:
        """Record this week's weight, replacing an earlier entry of the week."""
        if not math.isfinite(weight_kg) or weight_kg <= 0:
            raise PlanValidationError("Weight must be a number greater than zero")
        key = week_start(today(self.timezone_name, now)).isoformat()
        existing = self.repository.get_entry(user_id, key)
        entry = WeightEntry(
            id=existing.id if existing else uuid4(),
            user_id=user_id,
            week_start=key,
            weight_kg=weight_kg,
            recorded_at=now,
        )
        return WeightRecordResult(
            entry=self.repository.save_entry(entry), updated=existing is not None
        )

    def history(self, user_id: UUID) -> list[WeightEntry]:
        """Return entries ordered by week."""
        return sorted(
            self.repository.list_entries(user_id), key=lambda entry: entry.week_start
        )
