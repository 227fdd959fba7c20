"""Tests for the Razorpay gateway client."""

from __future__ import annotations

import asyncio
import base64
import json

import httpx

from storefront._errors import ErrorKind
from storefront.payments import GatewayOrder, GatewayOrderRequest, RazorpayGateway

REQUEST = GatewayOrderRequest(
    amount=150000,
    currency="INR",
    receipt="ord_1",
    notes={"order_id": "ord_1"},
)


def make_gateway(handler, timeout_seconds: float = 10.0) -> RazorpayGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RazorpayGateway(
        client,
        key_id="rzp_test_key",
        key_secret="shh",
        base_url="https://gateway.test/v1/",
        timeout_seconds=timeout_seconds,
    )


class TestRazorpayGateway:
    async def test_creates_order(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "order_X", "amount": 150000, "currency": "INR"})

        result = await make_gateway(handler).create_order(REQUEST)

        assert result.unwrap() == GatewayOrder(id="order_X", amount=150000, currency="INR")
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://gateway.test/v1/orders"
        assert json.loads(request.content) == {
            "amount": 150000,
            "currency": "INR",
            "receipt": "ord_1",
            "notes": {"order_id": "ord_1"},
        }
        expected_auth = base64.b64encode(b"rzp_test_key:shh").decode()
        assert request.headers["authorization"] == f"Basic {expected_auth}"

    async def test_exposes_public_key_and_secret(self):
        gateway = make_gateway(lambda request: httpx.Response(500))
        assert gateway.key_id == "rzp_test_key"
        assert gateway.secret == "shh"

    async def test_rejection_is_upstream(self):
        gateway = make_gateway(lambda request: httpx.Response(400, json={"error": {"code": "BAD_REQUEST_ERROR"}}))
        result = await gateway.create_order(REQUEST)
        assert result.unwrap_err().kind is ErrorKind.UPSTREAM_FAILURE

    async def test_network_error_is_upstream(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await make_gateway(handler).create_order(REQUEST)
        assert result.unwrap_err().kind is ErrorKind.UPSTREAM_FAILURE

    async def test_timeout_is_upstream(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json={"id": "late", "amount": 1, "currency": "INR"})

        result = await make_gateway(handler, timeout_seconds=0.01).create_order(REQUEST)

        error = result.unwrap_err()
        assert error.kind is ErrorKind.UPSTREAM_FAILURE
        assert "timed out" in error.message
