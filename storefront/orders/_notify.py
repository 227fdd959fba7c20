"""
Fulfillment notifications — best-effort side channel for shipped/delivered.
"""

from __future__ import annotations

import logging
from typing import Protocol

from storefront.orders._types import Order, OrderStatus

logger = logging.getLogger(__name__)

NOTIFY_ON = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})


class OrderNotifier(Protocol):
    async def order_status_changed(self, order: Order, previous: OrderStatus) -> None: ...


class LoggingNotifier:
    """Writes the customer notification to the log instead of sending it."""

    async def order_status_changed(self, order: Order, previous: OrderStatus) -> None:
        recipient = order.shipping_address.email or "<no email>"
        if order.status is OrderStatus.SHIPPED:
            logger.info(
                "notify %s: order %s shipped (tracking %s)",
                recipient,
                order.id,
                order.tracking_number or "n/a",
            )
        else:
            logger.info("notify %s: order %s %s", recipient, order.id, order.status.value)


__all__ = (
    "NOTIFY_ON",
    "OrderNotifier",
    "LoggingNotifier",
)
