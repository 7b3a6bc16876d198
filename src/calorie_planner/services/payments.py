"""Client-slot subscriptions through the payment gateway."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from calorie_planner.services.clients import ClientService

_logger = logging.getLogger(__name__)

PLAN_TYPE_PROFESSIONAL_CLIENT = "professional_client"


class PaymentConfigurationError(RuntimeError):
    """Raised when the payment gateway is not configured."""


class WebhookPayloadError(ValueError):
    """Raised when a webhook refers to a subscription missing required data."""


class PaymentGateway(Protocol):
    """Interface for recurring-payment subscriptions."""

    async def create_preapproval(self, payload: dict[str, object]) -> dict[str, object]:
        """Create a subscription and return the gateway's record."""

    async def get_preapproval(self, preapproval_id: str) -> dict[str, object]:
        """Fetch a subscription by id."""


@dataclass
class SubscriptionService:
    """Sells extra client slots and activates them from gateway webhooks."""

    gateway: PaymentGateway | None
    clients: ClientService
    price: float
    currency: str
    back_url: str

    async def create_client_slot_checkout(
        self, professional_id: UUID, payer_email: str
    ) -> str:
        """Create a monthly subscription for one slot and return its checkout URL."""
        gateway = self._require_gateway()
        self.clients.capacity(professional_id)
        record = await gateway.create_preapproval(
            {
                "reason": "Additional client slot",
                "external_reference": str(professional_id),
                "payer_email": payer_email,
                "back_url": self.back_url,
                "status": "pending",
                "auto_recurring": {
                    "frequency": 1,
                    "frequency_type": "months",
                    "transaction_amount": self.price,
                    "currency_id": self.currency,
                },
                "metadata": {"plan_type": PLAN_TYPE_PROFESSIONAL_CLIENT},
            }
        )
        checkout_url = record.get("init_point")
        if not checkout_url:
            raise RuntimeError("Payment gateway returned no checkout URL")
        return str(checkout_url)

    async def handle_webhook(self, payload: dict[str, object]) -> str:
        """Process a gateway notification and return what was done with it."""
        kind, action = payload.get("type"), payload.get("action")
        if kind != "preapproval" or action != "authorized":
            _logger.info("Ignoring webhook type=%s action=%s", kind, action)
            return "ignored"
        gateway = self._require_gateway()
        data = payload.get("data")
        preapproval_id = data.get("id") if isinstance(data, dict) else None
        if not preapproval_id:
            raise WebhookPayloadError("Webhook has no subscription id")
        details = await gateway.get_preapproval(str(preapproval_id))
        metadata = details.get("metadata")
        plan_type = metadata.get("plan_type") if isinstance(metadata, dict) else None
        if plan_type != PLAN_TYPE_PROFESSIONAL_CLIENT:
            _logger.info("Subscription %s is not a client slot", preapproval_id)
            return "ignored"
        reference = details.get("external_reference")
        if not reference:
            raise WebhookPayloadError("Subscription has no professional reference")
        try:
            self.clients.activate_client_slot(UUID(str(reference)))
        except Exception:
            _logger.exception(
                "Failed to activate client slot",
                extra={"preapproval_id": str(preapproval_id)},
            )
            return "failed"
        return "activated"

    def _require_gateway(self) -> PaymentGateway:
        if self.gateway is None:
            raise PaymentConfigurationError("Payment gateway is not configured")
        return self.gateway
