"""
Checkout — turns a cart into a pending order.

Prices come from the catalog at the moment of purchase and are frozen
onto the order items. Clients never supply prices.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront._types import SYSTEM_ACTOR, new_id, utcnow
from storefront.auth import User
from storefront.catalog import CatalogStore
from storefront.orders._store import OrderStore
from storefront.orders._types import Order, OrderItem, ShippingAddress, StatusLogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckoutLine:
    product_id: str
    quantity: int
    product_size_id: str | None = None


class CheckoutService:
    def __init__(self, orders: OrderStore, catalog: CatalogStore) -> None:
        self._orders = orders
        self._catalog = catalog

    async def place_order(
        self,
        caller: User | None,
        lines: Sequence[CheckoutLine],
        address: ShippingAddress,
    ) -> Result[Order, StorefrontError]:
        """Create a pending order. caller=None is a guest checkout."""
        if not lines:
            return Error(Errors.invalid_request("Cart is empty"))
        for line in lines:
            if not line.product_id:
                return Error(Errors.invalid_request("product_id is required for every item"))
            if line.quantity < 1:
                return Error(Errors.invalid_request(f"Quantity must be positive (product {line.product_id})"))

        missing = address.missing_fields()
        if missing:
            return Error(Errors.invalid_request(f"Shipping address is missing: {', '.join(missing)}"))
        if "@" not in address.email:
            return Error(Errors.invalid_request("Shipping email is not valid"))

        match await self._catalog.get_products(sorted({line.product_id for line in lines})):
            case Error(e):
                logger.error("catalog lookup failed during checkout: %s", e.message)
                return Error(Errors.upstream("Could not load products"))
            case Ok(products):
                pass

        order_id = new_id("ord")
        items: list[OrderItem] = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                return Error(Errors.not_found("Product", line.product_id))
            if not product.in_stock:
                return Error(Errors.invalid_request(f"{product.name} is out of stock"))
            if line.product_size_id is not None:
                size = product.size(line.product_size_id)
                if size is None:
                    return Error(Errors.invalid_request(
                        f"Size {line.product_size_id} does not belong to product {product.id}"
                    ))
                if size.stock < 1:
                    return Error(Errors.invalid_request(f"{product.name} ({size.size}) is out of stock"))
                if size.stock < line.quantity:
                    return Error(Errors.invalid_request(
                        f"Only {size.stock} of {product.name} ({size.size}) left in stock"
                    ))
            items.append(OrderItem(
                id=new_id("itm"),
                order_id=order_id,
                product_id=product.id,
                product_size_id=line.product_size_id,
                quantity=line.quantity,
                unit_price=product.price,
            ))

        total = sum((item.line_total for item in items), Decimal("0"))
        now = utcnow()
        order = Order(
            id=order_id,
            user_id=caller.id if caller else None,
            total_amount=total,
            shipping_address=address,
            items=tuple(items),
            created_at=now,
            updated_at=now,
        )
        log = StatusLogEntry(
            order_id=order_id,
            status=order.status,
            notes="Order placed",
            updated_by=caller.id if caller else SYSTEM_ACTOR,
            created_at=now,
        )

        match await self._orders.create(order, log):
            case Ok(saved):
                logger.info("order %s placed: %s items, total %s", saved.id, len(items), total)
                return Ok(saved)
            case Error(e):
                logger.error("order creation failed: %s", e.message)
                return Error(Errors.upstream("Could not create order"))


__all__ = (
    "CheckoutLine",
    "CheckoutService",
)
