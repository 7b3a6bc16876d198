"""Endpoints for professionals managing clients."""

from __future__ import annotations

import datetime as dt
import logging
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status

from calorie_planner.api.dependencies import current_user_id, get_container
from calorie_planner.api.models import (  # noqa: TC001
    CheckoutIn,
    ClientIn,
    week_payload,
)
from calorie_planner.domain.profiles import Client  # noqa: TC001
from calorie_planner.services.clients import ClientLimitError
from calorie_planner.services.dates import date_key, today, week_dates
from calorie_planner.services.nutrition import PlanValidationError
from calorie_planner.services.payments import PaymentConfigurationError

router = APIRouter(prefix="/pro", tags=["professional"])
_logger = logging.getLogger(__name__)


@router.get("/clients")
def list_clients(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the professional's clients and slot capacity."""
    service = get_container(request).client_service
    try:
        capacity = service.capacity(user_id)
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    clients = service.list_clients(user_id)
    return {
        "clients": [_client_payload(client) for client in clients],
        "capacity": capacity,
    }


@router.post("/clients", status_code=status.HTTP_201_CREATED)
def add_client(
    payload: ClientIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Add a client when a slot is free."""
    container = get_container(request)
    try:
        client = container.client_service.add_client(
            user_id, payload.email, container.clock()
        )
    except ClientLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _client_payload(client)


@router.post("/invites/{professional_id}/accept")
def accept_invite(
    professional_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Join the professional who sent the invite."""
    container = get_container(request)
    try:
        client = container.client_service.accept_invite(
            professional_id, user_id, container.clock()
        )
    except ClientLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _client_payload(client)


@router.get("/clients/{client_user_id}/week")
async def client_week(
    client_user_id: UUID,
    request: Request,
    date: dt.date | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return a client's week read-only, without goal seeding."""
    container = get_container(request)
    if not container.profile_service.can_view_plan(user_id, client_user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
    timezone_name = container.settings.plan_timezone
    anchor = date or today(timezone_name, container.clock())
    dates = week_dates(anchor)
    week = await container.weekly_plan_service.load_week(
        client_user_id,
        dates,
        None,
        own_plan=False,
        today_key=date_key(container.clock(), timezone_name),
    )
    return {"week_dates": dates, "days": week_payload(week.days), "read_only": True}


@router.post("/client-slots/checkout")
async def client_slot_checkout(
    payload: CheckoutIn, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, str]:
    """Start a subscription for one more client slot."""
    container = get_container(request)
    try:
        url = await container.subscription_service.create_client_slot_checkout(
            user_id, payload.payer_email
        )
    except PaymentConfigurationError as exc:
        _logger.exception("Payment gateway is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc
    except PlanValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    except Exception as exc:
        _logger.exception("Checkout creation failed", extra={"user_id": str(user_id)})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not start the checkout, please try again",
        ) from exc
    return {"checkout_url": url}


def _client_payload(client: Client) -> dict[str, object]:
    return {
        "id": str(client.id),
        "email": client.email,
        "status": client.status,
        "client_user_id": str(client.client_user_id) if client.client_user_id else None,
        "display_name": client.display_name,
        "created_at": client.created_at.isoformat() if client.created_at else None,
    }
