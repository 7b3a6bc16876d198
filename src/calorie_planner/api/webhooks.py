"""Payment gateway webhook endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from calorie_planner.api.dependencies import get_container
from calorie_planner.services.payments import (
    PaymentConfigurationError,
    WebhookPayloadError,
)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
_logger = logging.getLogger(__name__)


@router.post("/mercadopago")
async def mercadopago_webhook(request: Request) -> JSONResponse:
    """Activate client slots for authorized subscriptions."""
    container = get_container(request)
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise WebhookPayloadError("Webhook body must be an object")
        outcome = await container.subscription_service.handle_webhook(payload)
    except PaymentConfigurationError:
        _logger.exception("Webhook received without payment configuration")
        return JSONResponse(
            {"status": "error", "message": "Server configuration error"},
            status_code=500,
        )
    except WebhookPayloadError as exc:
        _logger.warning("Rejected webhook: %s", exc)
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=400)
    except Exception as exc:
        _logger.exception("Failed to process payment webhook")
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=500)
    return JSONResponse({"status": "received", "outcome": outcome})
