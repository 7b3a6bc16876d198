"""Tests for container wiring."""

import asyncio
from uuid import uuid4

from calorie_planner.containers import build_container
from tests.conftest import RecordingNotifier


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.weekly_plan_service is not None
    assert container.subscription_service.gateway is not None
    assert container.client_service.free_slots == 2
    asyncio.run(container.close_resources())


def test_payment_gateway_is_optional(settings) -> None:
    container = build_container(
        settings.model_copy(update={"mercadopago_access_token": None})
    )
    assert container.subscription_service.gateway is None
    asyncio.run(container.close_resources())


def test_each_session_gets_its_own_autosave_timers(container) -> None:
    owner_id = uuid4()

    first = container.open_plan_session(owner_id, owner_id, RecordingNotifier())
    second = container.open_plan_session(owner_id, owner_id, RecordingNotifier())

    assert first.autosaver.scheduler is not second.autosaver.scheduler
    assert first.autosaver.scheduler.delay_seconds == 0.05
    assert first.timezone_name == "America/Argentina/Buenos_Aires"
