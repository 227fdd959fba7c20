"""
Order queries — read-side access with owner/staff visibility rules.

Owners see their own orders; admin, manager and warehouse see all,
and only staff see the dashboard summary.
"""

from __future__ import annotations

import logging
from datetime import datetime

from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront._types import StoreError, utcnow
from storefront.auth import STAFF_ROLES, User, require_role
from storefront.orders._store import OrderStore
from storefront.orders._types import (
    Order,
    OrderPage,
    OrderStatus,
    OrderSummary,
    StatusLogEntry,
    SummaryWindow,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
SUMMARY_EXCLUDES = frozenset({OrderStatus.CANCELLED})


def _upstream(e: StoreError) -> StorefrontError:
    logger.error("order query failed: %s", e.message)
    return Errors.upstream("Could not load orders")


class OrderQueries:
    def __init__(self, orders: OrderStore) -> None:
        self._orders = orders

    async def get_order(self, caller: User, order_id: str) -> Result[Order, StorefrontError]:
        match await self._orders.get(order_id):
            case Error(e):
                return Error(_upstream(e))
            case Ok(None):
                return Error(Errors.not_found("Order", order_id))
            case Ok(order):
                pass

        if not (order.is_owned_by(caller.id) or caller.is_staff):
            logger.warning("user %s denied access to order %s", caller.id, order_id)
            return Error(Errors.forbidden("You do not have access to this order"))
        return Ok(order)

    async def history(self, caller: User, order_id: str) -> Result[list[StatusLogEntry], StorefrontError]:
        match await self.get_order(caller, order_id):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await self._orders.logs(order_id):
            case Ok(entries):
                return Ok(entries)
            case Error(e):
                return Error(_upstream(e))

    async def list_mine(self, caller: User) -> Result[list[Order], StorefrontError]:
        match await self._orders.search(user_id=caller.id):
            case Ok((orders, _)):
                return Ok(orders)
            case Error(e):
                return Error(_upstream(e))

    async def list_all(
        self,
        caller: User,
        status: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Result[OrderPage, StorefrontError]:
        """Staff listing. status accepts any casing; "all" means no filter."""
        match require_role(caller, STAFF_ROLES):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        wanted: OrderStatus | None = None
        if status and status.strip().lower() != "all":
            wanted = OrderStatus.parse(status)
            if wanted is None:
                return Error(Errors.invalid_request(f"Invalid order status: {status}"))

        if page < 1:
            return Error(Errors.invalid_request("page must be at least 1"))
        if not 1 <= limit <= MAX_PAGE_SIZE:
            return Error(Errors.invalid_request(f"limit must be between 1 and {MAX_PAGE_SIZE}"))

        match await self._orders.search(status=wanted, offset=(page - 1) * limit, limit=limit):
            case Ok((orders, total)):
                return Ok(OrderPage(orders=tuple(orders), page=page, limit=limit, total_orders=total))
            case Error(e):
                return Error(_upstream(e))


    async def summary(
        self,
        caller: User,
        window: str | None = "week",
        now: datetime | None = None,
    ) -> Result[OrderSummary, StorefrontError]:
        """Staff dashboard figures for the window ending now, with the prior period."""
        match require_role(caller, STAFF_ROLES):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        parsed = SummaryWindow.parse(window or "week")
        if parsed is None:
            return Error(Errors.invalid_request(f"Invalid summary window: {window}"))

        end = now or utcnow()
        start = parsed.start(end)
        previous_start = start - (end - start)

        match await self._orders.totals(since=start, until=end, exclude=SUMMARY_EXCLUDES):
            case Error(e):
                return Error(_upstream(e))
            case Ok(current):
                pass
        match await self._orders.totals(since=previous_start, until=start, exclude=SUMMARY_EXCLUDES):
            case Error(e):
                return Error(_upstream(e))
            case Ok(previous):
                pass

        return Ok(OrderSummary(window=parsed, start=start, end=end, current=current, previous=previous))


__all__ = (
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "OrderQueries",
)
