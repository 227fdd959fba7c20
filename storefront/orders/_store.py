"""
Order store — typed storage protocol for orders and their audit log.

Writes pair the order row with exactly one log row in one transaction.
update() is a compare-and-swap on Order.version.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from kungfu import Result

from storefront._types import StoreError
from storefront.orders._types import Order, OrderStatus, PeriodTotals, StatusLogEntry


class OrderStore(Protocol):
    async def get(self, order_id: str) -> Result[Order | None, StoreError]:
        """Get order with items. Returns Ok(None) if not found."""
        ...

    async def create(self, order: Order, log: StatusLogEntry) -> Result[Order, StoreError]:
        """Insert order, its items and the first log row."""
        ...

    async def update(
        self,
        order: Order,
        expected_version: int,
        log: StatusLogEntry | None,
    ) -> Result[bool, StoreError]:
        """
        Persist mutable order fields if the stored version still matches.

        Returns Ok(False) when another writer got there first; nothing
        is written in that case, including the log row.
        """
        ...

    async def logs(self, order_id: str) -> Result[list[StatusLogEntry], StoreError]:
        """Log rows in chronological order."""
        ...

    async def search(
        self,
        *,
        user_id: str | None = None,
        status: OrderStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> Result[tuple[list[Order], int], StoreError]:
        """Newest first. Returns (page, total matching)."""
        ...

    async def totals(
        self,
        *,
        since: datetime,
        until: datetime,
        exclude: Collection[OrderStatus] = (),
    ) -> Result[PeriodTotals, StoreError]:
        """Count and amount sum of orders created in [since, until)."""
        ...


__all__ = ("OrderStore",)
