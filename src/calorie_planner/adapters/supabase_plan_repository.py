"""Supabase repository for per-day meal plans."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorie_planner.domain.plans import DailyPlan
from calorie_planner.services.documents import plan_from_document, plan_to_document
from calorie_planner.services.plans import PlanRepository


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Stores one row per user and date holding the day's slots and goals."""

    client: Client

    def get_daily_plan(self, owner_id: UUID, date_key: str) -> DailyPlan | None:
        """Return the stored plan for a date, if present."""
        response = (
            self.client.table("daily_plans")
            .select("slots, goals")
            .eq("user_id", str(owner_id))
            .eq("plan_date", date_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return plan_from_document(response.data[0])

    def save_daily_plan(self, owner_id: UUID, date_key: str, plan: DailyPlan) -> None:
        """Overwrite the day's slots and goals."""
        response = (
            self.client.table("daily_plans")
            .upsert(
                {
                    "user_id": str(owner_id),
                    "plan_date": date_key,
                    **plan_to_document(plan),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id,plan_date",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to save plan for {date_key}")
