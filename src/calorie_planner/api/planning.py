"""Websocket hosting one planning session per connection."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from calorie_planner.api.models import (
    PLAN_ACTION_ADAPTER,
    AddCustomMealAction,
    AddFoodAction,
    GeneratePlanAction,
    NavigateAction,
    RemoveItemAction,
    SelectAction,
    SetGoalsAction,
    day_payload,
    goals_payload,
    week_payload,
)
from calorie_planner.services.auth import AuthenticationError
from calorie_planner.services.documents import (
    custom_meal_to_document,
    food_to_document,
)
from calorie_planner.services.notifications import Notification
from calorie_planner.services.nutrition import PlanValidationError
from calorie_planner.services.session import PlanAccessError

if TYPE_CHECKING:
    from calorie_planner.containers import AppContainer
    from calorie_planner.services.session import PlanSession

router = APIRouter(tags=["planning"])
_logger = logging.getLogger(__name__)

CLOSE_UNAUTHORIZED = 4401
CLOSE_FORBIDDEN = 4403


@dataclass
class WebSocketNotifier:
    """Sends notifications to the connected client while it is open."""

    websocket: WebSocket

    async def notify(self, notification: Notification) -> None:
        """Send a notification message; dropped once either side has closed."""
        if (
            self.websocket.application_state != WebSocketState.CONNECTED
            or self.websocket.client_state != WebSocketState.CONNECTED
        ):
            _logger.info(
                "Dropped notification for closed socket: %s", notification.title
            )
            return
        try:
            await self.websocket.send_json(
                {
                    "type": "notification",
                    "title": notification.title,
                    "description": notification.description,
                    "level": notification.level,
                }
            )
        except (WebSocketDisconnect, RuntimeError):
            _logger.warning(
                "Could not deliver notification: %s", notification.title, exc_info=True
            )


@router.websocket("/plans/ws")
async def planning_socket(
    websocket: WebSocket,
    token: str = "",
    owner_id: UUID | None = None,
    date: dt.date | None = None,
) -> None:
    """Serve a planning session for the owner's week."""
    container: AppContainer = websocket.app.state.container
    await websocket.accept()
    try:
        viewer_id = await asyncio.to_thread(
            container.identity_provider.user_id_for_token, token
        )
    except AuthenticationError:
        await websocket.close(code=CLOSE_UNAUTHORIZED)
        return
    notifier = WebSocketNotifier(websocket)
    session = container.open_plan_session(owner_id or viewer_id, viewer_id, notifier)
    try:
        await session.initial_load(date)
    except PlanAccessError:
        await websocket.close(code=CLOSE_FORBIDDEN)
        return
    await websocket.send_json(_full_state(session))
    try:
        while True:
            message = await websocket.receive_text()
            await _handle_message(session, notifier, message)
            await websocket.send_json(_state(session))
    except WebSocketDisconnect:
        _logger.info("Planning session closed for %s", session.owner_id)
    finally:
        await session.close()


async def _handle_message(
    session: PlanSession, notifier: WebSocketNotifier, message: str
) -> None:
    try:
        action = PLAN_ACTION_ADAPTER.validate_json(message)
        await _dispatch(session, action)
    except ValidationError as exc:
        await _warn(notifier, "Invalid request", _first_error(exc))
    except PlanValidationError as exc:
        await _warn(notifier, "Change not applied", str(exc))


async def _dispatch(session: PlanSession, action: object) -> None:
    if isinstance(action, NavigateAction):
        await session.navigate(action.date)
    elif isinstance(action, SelectAction):
        session.select_date(action.date)
    elif isinstance(action, AddFoodAction):
        session.add_food(action.meal, action.food_id, action.quantity)
    elif isinstance(action, AddCustomMealAction):
        session.add_custom_meal(action.meal, action.meal_id, action.quantity)
    elif isinstance(action, RemoveItemAction):
        session.remove_item(action.meal, action.meal_item_id)
    elif isinstance(action, SetGoalsAction):
        session.set_goals(action.to_patch())
    elif isinstance(action, GeneratePlanAction):
        await session.apply_generated_plan()


async def _warn(notifier: WebSocketNotifier, title: str, description: str) -> None:
    await notifier.notify(
        Notification(title=title, description=description, level="warning")
    )


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Malformed message"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid')}" if location else first["msg"]


def _state(session: PlanSession) -> dict[str, object]:
    return {
        "type": "state",
        "owner_id": str(session.owner_id),
        "read_only": not session.own_plan,
        "week_dates": session.week_dates,
        "selected_date": session.selected_date,
        "days": week_payload(session.week.days),
        "selected": day_payload(session.selected_plan()),
    }


def _full_state(session: PlanSession) -> dict[str, object]:
    return {
        **_state(session),
        "foods": [food_to_document(food) for food in session.foods],
        "custom_meals": [
            custom_meal_to_document(meal) for meal in session.custom_meals
        ],
        "standing_goals": goals_payload(session.standing_goals),
    }
