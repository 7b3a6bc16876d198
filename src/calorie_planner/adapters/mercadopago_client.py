"""Mercado Pago subscriptions API client."""

from dataclasses import dataclass

import httpx

from calorie_planner.services.payments import PaymentGateway


@dataclass
class HttpxMercadoPagoClient(PaymentGateway):
    """HTTPX-backed client for Mercado Pago preapprovals."""

    access_token: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, access_token: str, base_url: str) -> "HttpxMercadoPagoClient":
        """Create a Mercado Pago client with a managed httpx session."""
        return cls(
            access_token=access_token,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def create_preapproval(self, payload: dict[str, object]) -> dict[str, object]:
        """Create a subscription."""
        response = await self.http_client.post(
            f"{self.base_url}/preapproval",
            json=payload,
            headers=self._headers(),
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def get_preapproval(self, preapproval_id: str) -> dict[str, object]:
        """Fetch a subscription by id."""
        response = await self.http_client.get(
            f"{self.base_url}/preapproval/{preapproval_id}",
            headers=self._headers(),
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}
