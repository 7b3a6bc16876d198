import asyncio
from datetime import date
from uuid import UUID, uuid4

import pytest

from calorie_planner.containers import AppContainer
from calorie_planner.domain.plans import Goals, GoalsPatch, MealName
from calorie_planner.domain.profiles import UserProfile
from calorie_planner.services.nutrition import PlanValidationError
from calorie_planner.services.session import (
    PlanAccessError,
    PlanSession,
    ReadOnlyPlanError,
)
from tests.conftest import (
    TODAY_KEY,
    WEEK_KEYS,
    FakeStructuredClient,
    InMemoryLibraryRepository,
    InMemoryPlanRepository,
    InMemoryProfileRepository,
    RecordingNotifier,
    make_food,
)

SETTLE = 0.2


def _open(
    container: AppContainer,
    owner_id: UUID,
    viewer_id: UUID | None = None,
) -> tuple[PlanSession, RecordingNotifier]:
    notifier = RecordingNotifier()
    session = container.open_plan_session(owner_id, viewer_id or owner_id, notifier)
    return session, notifier


def test_initial_load_seeds_today_without_writing(
    container: AppContainer,
    plan_repository: InMemoryPlanRepository,
    profile_repository: InMemoryProfileRepository,
    user_id: UUID,
) -> None:
    profile_repository.goals[user_id] = Goals(calories=2000.0, protein=150.0)
    session, notifier = _open(container, user_id)

    async def scenario() -> bool:
        loaded = await session.initial_load()
        await asyncio.sleep(SETTLE)
        await session.close()
        return loaded

    assert asyncio.run(scenario())
    assert session.week_dates == WEEK_KEYS
    assert session.selected_date == TODAY_KEY
    assert session.selected_plan().goals == Goals(calories=2000.0, protein=150.0)
    assert len(session.foods) == 12
    assert not session.loading
    assert plan_repository.writes == []
    assert notifier.notifications == []


def test_edit_after_load_is_autosaved(
    container: AppContainer, plan_repository: InMemoryPlanRepository, user_id: UUID
) -> None:
    session, _ = _open(container, user_id)

    async def scenario() -> None:
        await session.initial_load()
        session.add_food(MealName.BREAKFAST, "oats", 50.0)
        session.add_food(MealName.BREAKFAST, "banana")
        await asyncio.sleep(SETTLE)
        await session.close()

    asyncio.run(scenario())

    assert len(plan_repository.writes) == 1
    owner_id, key, plan = plan_repository.writes[0]
    assert (owner_id, key) == (user_id, TODAY_KEY)
    assert [item.food.id for item in plan.slots[0].items] == ["oats", "banana"]


def test_invalid_edits_are_rejected(container: AppContainer, user_id: UUID) -> None:
    session, _ = _open(container, user_id)

    async def scenario() -> None:
        await session.initial_load()
        with pytest.raises(PlanValidationError, match="Unknown food"):
            session.add_food(MealName.LUNCH, "missing")
        with pytest.raises(PlanValidationError, match="Quantity"):
            session.add_food(MealName.LUNCH, "apple", 0.0)
        with pytest.raises(PlanValidationError, match="Quantity"):
            session.add_food(MealName.LUNCH, "apple", float("nan"))
        with pytest.raises(PlanValidationError, match="Quantity"):
            session.add_food(MealName.LUNCH, "apple", float("inf"))
        with pytest.raises(PlanValidationError, match="Unknown custom meal"):
            session.add_custom_meal(MealName.LUNCH, "missing")
        with pytest.raises(PlanValidationError, match="negative"):
            session.set_goals(GoalsPatch(calories=-10.0))
        with pytest.raises(PlanValidationError, match="calories"):
            session.set_goals(GoalsPatch(calories=float("nan")))
        with pytest.raises(PlanValidationError, match="not in the displayed week"):
            session.select_date(date(2024, 6, 1))
        await session.close()

    asyncio.run(scenario())


def test_set_goals_and_remove_item(
    container: AppContainer, plan_repository: InMemoryPlanRepository, user_id: UUID
) -> None:
    session, _ = _open(container, user_id)

    async def scenario() -> None:
        await session.initial_load()
        session.select_date(date(2024, 5, 16))
        plan = session.add_food(MealName.DINNER, "salmon")
        item_id = plan.slots[2].items[0].meal_item_id
        session.set_goals(GoalsPatch(calories=1900.0))
        session.remove_item(MealName.DINNER, item_id)
        await asyncio.sleep(SETTLE)
        await session.close()

    asyncio.run(scenario())

    _, key, plan = plan_repository.writes[-1]
    assert key == "2024-05-16"
    assert plan.goals == Goals(calories=1900.0)
    assert all(not slot.items for slot in plan.slots)


def test_navigate_within_the_week_does_not_refetch(
    container: AppContainer, plan_repository: InMemoryPlanRepository, user_id: UUID
) -> None:
    session, _ = _open(container, user_id)

    async def scenario() -> None:
        await session.initial_load()
        assert len(plan_repository.reads) == 7
        await session.navigate(date(2024, 5, 18))
        assert len(plan_repository.reads) == 7
        assert session.selected_date == "2024-05-18"
        await session.navigate(date(2024, 5, 22))
        await session.close()

    asyncio.run(scenario())

    assert len(plan_repository.reads) == 14
    assert session.week_dates[0] == "2024-05-20"
    assert session.selected_date == "2024-05-22"


def test_failed_navigation_keeps_the_current_week(
    container: AppContainer, plan_repository: InMemoryPlanRepository, user_id: UUID
) -> None:
    session, notifier = _open(container, user_id)

    async def scenario() -> bool:
        await session.initial_load()
        plan_repository.fail_reads = True
        moved = await session.navigate(date(2024, 5, 27))
        await session.close()
        return moved

    assert asyncio.run(scenario()) is False
    assert session.week_dates == WEEK_KEYS
    assert session.selected_date == TODAY_KEY
    assert [n.title for n in notifier.notifications] == ["Could not load this week"]


def test_failed_library_load_notifies(
    container: AppContainer,
    library_repository: InMemoryLibraryRepository,
    user_id: UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def failing(_user_id: UUID) -> list:
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(library_repository, "list_foods", failing)
    session, notifier = _open(container, user_id)

    assert asyncio.run(session.initial_load()) is False
    assert not session.loading
    assert [n.title for n in notifier.notifications] == ["Could not load your data"]


def test_professional_view_is_read_only(
    container: AppContainer,
    plan_repository: InMemoryPlanRepository,
    profile_repository: InMemoryProfileRepository,
    professional: UserProfile,
) -> None:
    client_id = uuid4()
    profile_repository.save_profile(
        UserProfile(
            user_id=client_id,
            display_name="Client",
            professional_id=professional.user_id,
        )
    )
    profile_repository.goals[client_id] = Goals(calories=1800.0)
    session, _ = _open(container, client_id, professional.user_id)

    async def scenario() -> None:
        await session.initial_load()
        with pytest.raises(ReadOnlyPlanError):
            session.set_goals(GoalsPatch(calories=1500.0))
        with pytest.raises(ReadOnlyPlanError):
            await session.apply_generated_plan()
        await session.close()

    asyncio.run(scenario())

    assert session.foods == []
    assert session.selected_plan().goals == Goals()
    assert plan_repository.writes == []


def test_unrelated_viewer_is_refused(container: AppContainer, user_id: UUID) -> None:
    session, _ = _open(container, user_id, uuid4())

    with pytest.raises(PlanAccessError):
        asyncio.run(session.initial_load())


def test_generated_plan_replaces_the_selected_day(
    container: AppContainer,
    plan_repository: InMemoryPlanRepository,
    library_repository: InMemoryLibraryRepository,
    structured_client: FakeStructuredClient,
    user_id: UUID,
) -> None:
    library_repository.foods[user_id] = [make_food()]
    structured_client.responses.append(
        {
            "meals": [
                {
                    "name": "Lunch",
                    "items": [{"source": "food", "ref_id": "rice", "quantity": 200}],
                }
            ]
        }
    )
    session, _ = _open(container, user_id)

    async def scenario() -> None:
        await session.initial_load()
        session.add_food(MealName.BREAKFAST, "rice")
        await session.apply_generated_plan()
        await asyncio.sleep(SETTLE)
        await session.close()

    asyncio.run(scenario())

    plan = session.selected_plan()
    assert plan.slots[0].items == ()
    assert [item.quantity for item in plan.slots[1].items] == [200.0]
    assert plan_repository.writes[-1][2] == plan


def test_generation_failure_leaves_the_day_unchanged(
    container: AppContainer,
    library_repository: InMemoryLibraryRepository,
    structured_client: FakeStructuredClient,
    user_id: UUID,
) -> None:
    library_repository.foods[user_id] = [make_food()]
    structured_client.responses.append(RuntimeError("model unavailable"))
    session, notifier = _open(container, user_id)

    async def scenario() -> object:
        await session.initial_load()
        before = session.selected_plan()
        result = await session.apply_generated_plan()
        await session.close()
        assert session.selected_plan() == before
        return result

    assert asyncio.run(scenario()) is None
    assert [n.title for n in notifier.notifications] == [
        "Could not generate a meal plan"
    ]
