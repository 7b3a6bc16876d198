"""Debounced persistence of edited days."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

from calorie_planner.domain.plans import DailyPlan
from calorie_planner.services.notifications import Notification, Notifier
from calorie_planner.services.plans import PlanRepository, is_blank

_logger = logging.getLogger(__name__)


@dataclass
class DebouncedScheduler:
    """Per-key delayed actions where a new schedule replaces a pending one.

    Only sleeping timers are cancelled; an action that already started runs
    to completion.
    """

    delay_seconds: float = 1.0
    _timers: dict[str, asyncio.Task[None]] = field(
        default_factory=dict, init=False, repr=False
    )
    _running: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    def schedule(self, key: str, action: Callable[[], Awaitable[None]]) -> None:
        """Run action after the quiet interval unless rescheduled first."""
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._timers[key] = loop.create_task(self._fire(key, action))

    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for a key, if any."""
        timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def pending(self, key: str) -> bool:
        """Return True while a timer for the key is still waiting."""
        return key in self._timers

    async def close(self) -> None:
        """Cancel waiting timers and wait for started actions."""
        waiting = list(self._timers.values())
        for key in list(self._timers):
            self.cancel(key)
        tasks = [*waiting, *self._running]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire(self, key: str, action: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay_seconds)
        current = asyncio.current_task()
        if self._timers.get(key) is current:
            del self._timers[key]
        if current is not None:
            self._running.add(current)
        try:
            await action()
        except Exception:
            _logger.exception("Scheduled action failed for %s", key)
        finally:
            self._running.discard(current)


@dataclass
class PlanAutosaver:
    """Writes the latest state of an edited day after a quiet period."""

    repository: PlanRepository
    notifier: Notifier
    scheduler: DebouncedScheduler

    def schedule(self, owner_id: UUID, date_key: str, plan: DailyPlan) -> bool:
        """Schedule a write of the day; blank days are never written."""
        key = f"{owner_id}:{date_key}"
        if is_blank(plan):
            self.scheduler.cancel(key)
            return False
        self.scheduler.schedule(key, lambda: self._write(owner_id, date_key, plan))
        return True

    async def close(self) -> None:
        """Drop pending writes and wait for writes already in flight."""
        await self.scheduler.close()

    async def _write(self, owner_id: UUID, date_key: str, plan: DailyPlan) -> None:
        try:
            await asyncio.to_thread(
                self.repository.save_daily_plan, owner_id, date_key, plan
            )
        except Exception:
            _logger.exception(
                "Failed to save daily plan",
                extra={"owner_id": str(owner_id), "date_key": date_key},
            )
            await self.notifier.notify(
                Notification(
                    title="Could not save your plan",
                    description=f"Changes for {date_key} were not saved.",
                )
            )
            return
        _logger.info("Saved daily plan owner=%s date=%s", owner_id, date_key)
