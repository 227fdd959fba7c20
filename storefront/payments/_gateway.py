"""
Payment gateway — creates the gateway-side order for a payment attempt.

The gateway call is the only external write in the payment flow. It is
wrapped once here: exceptions and timeouts come back as Error values,
never as raised exceptions.

    gateway = RazorpayGateway(client, key_id, key_secret, timeout_seconds=10)

    match await gateway.create_order(request):
        case Ok(GatewayOrder(id=ref)): ...
        case Error(e): ...   # UPSTREAM_FAILURE
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from combinators import flow, lift as L
from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront.payments._types import GatewayOrder, GatewayOrderRequest

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    @property
    def key_id(self) -> str:
        """Public key handed to the client checkout."""
        ...

    @property
    def secret(self) -> str:
        """Shared secret used to sign payment confirmations."""
        ...

    async def create_order(self, request: GatewayOrderRequest) -> Result[GatewayOrder, StorefrontError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Razorpay
# ═══════════════════════════════════════════════════════════════════════════════


class RazorpayGateway:
    def __init__(
        self,
        client: httpx.AsyncClient,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._key_id = key_id
        self._key_secret = key_secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def secret(self) -> str:
        return self._key_secret

    async def create_order(self, request: GatewayOrderRequest) -> Result[GatewayOrder, StorefrontError]:
        result = await (
            flow(
                L.catching_async(
                    lambda: self._post_order(request),
                    on_error=lambda e: Errors.upstream(f"Payment gateway unavailable: {type(e).__name__}"),
                )
            )
            .timeout(seconds=self._timeout)
            .compile()
        )

        match result:
            case Ok(order):
                logger.info("gateway order %s created for receipt %s", order.id, request.receipt)
                return Ok(order)
            case Error(StorefrontError() as e):
                logger.error("gateway order for receipt %s failed: %s", request.receipt, e.message)
                return Error(e)
            case Error(_):
                logger.error("gateway order for receipt %s timed out after %ss", request.receipt, self._timeout)
                return Error(Errors.upstream("Payment gateway timed out"))

    async def _post_order(self, request: GatewayOrderRequest) -> GatewayOrder:
        response = await self._client.post(
            f"{self._base_url}/orders",
            auth=(self._key_id, self._key_secret),
            json={
                "amount": request.amount,
                "currency": request.currency,
                "receipt": request.receipt,
                "notes": request.notes,
            },
        )
        response.raise_for_status()
        return _to_gateway_order(response.json())


def _to_gateway_order(payload: dict[str, Any]) -> GatewayOrder:
    return GatewayOrder(
        id=str(payload["id"]),
        amount=int(payload["amount"]),
        currency=str(payload["currency"]),
    )


__all__ = (
    "PaymentGateway",
    "RazorpayGateway",
)
