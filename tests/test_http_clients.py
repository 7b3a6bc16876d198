"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from calorie_planner.adapters.mercadopago_client import HttpxMercadoPagoClient
from calorie_planner.adapters.openai_structured_client import OpenAIStructuredClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = json.dumps({"meals": []})) -> None:
        self.responses = _FakeResponses(output_text)


def _complete(client: OpenAIStructuredClient, reasoning_effort: str | None) -> dict:
    return asyncio.run(
        client.complete(
            model="gpt-5.2",
            reasoning_effort=reasoning_effort,
            store=False,
            schema_name="meal_plan",
            schema={"type": "object"},
            instructions="Plan a day",
            prompt="{}",
        )
    )


def test_openai_structured_client_parses_output() -> None:
    fake = _FakeOpenAI()
    client = OpenAIStructuredClient(client=fake)  # type: ignore[arg-type]

    result = _complete(client, "medium")

    assert result == {"meals": []}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["text"]["format"]["strict"] is True  # type: ignore[index]
    assert payload["text"]["format"]["name"] == "meal_plan"  # type: ignore[index]
    assert payload["reasoning"] == {"effort": "medium"}
    assert payload["instructions"] == "Plan a day"


def test_openai_structured_client_omits_empty_reasoning() -> None:
    fake = _FakeOpenAI()

    _complete(OpenAIStructuredClient(client=fake), None)  # type: ignore[arg-type]

    assert "reasoning" not in (fake.responses.last_payload or {})


def test_openai_structured_client_rejects_empty_output() -> None:
    client = OpenAIStructuredClient(client=_FakeOpenAI(""))  # type: ignore[arg-type]

    with pytest.raises(RuntimeError):
        _complete(client, None)


def test_mercadopago_client_creates_and_fetches_preapprovals() -> None:
    seen: list[tuple[str, str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(
            (request.method, request.url.path, request.headers["Authorization"])
        )
        if request.method == "POST":
            payload = json.loads(request.content.decode())
            assert payload["metadata"]["plan_type"] == "professional_client"
            return httpx.Response(201, json={"id": "pre-1", "init_point": "https://x"})
        return httpx.Response(200, json={"id": "pre-1", "status": "authorized"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxMercadoPagoClient(
        access_token="token",
        base_url="https://api.mercadopago.test",
        http_client=async_client,
    )

    created = asyncio.run(
        client.create_preapproval({"metadata": {"plan_type": "professional_client"}})
    )
    fetched = asyncio.run(client.get_preapproval("pre-1"))

    assert created["init_point"] == "https://x"
    assert fetched["status"] == "authorized"
    assert seen == [
        ("POST", "/preapproval", "Bearer token"),
        ("GET", "/preapproval/pre-1", "Bearer token"),
    ]


def test_mercadopago_client_raises_on_error_status() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "invalid token"})

    client = HttpxMercadoPagoClient(
        access_token="bad",
        base_url="https://api.mercadopago.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_preapproval("pre-1"))
