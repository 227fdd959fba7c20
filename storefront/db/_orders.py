"""
SQLAlchemy order store.

update() is a single conditional UPDATE guarded by the version column.
When no row matches, the log row is not inserted either.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from decimal import Decimal
from typing import Any, cast

from sqlalchemy import func, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from kungfu import Result, Ok, Error

from storefront._types import StoreError
from storefront.db._tables import OrderItemTable, OrderStatusLogTable, OrderTable
from storefront.orders import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    PeriodTotals,
    ShippingAddress,
    StatusLogEntry,
)


class SQLAlchemyOrderStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, order_id: str) -> Result[Order | None, StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(OrderTable)
                    .where(OrderTable.id == order_id)
                    .options(selectinload(OrderTable.items))
                )
                row = (await session.execute(stmt)).scalar_one_or_none()
                return Ok(_to_order(row) if row is not None else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get order: {e}", e))

    async def create(self, order: Order, log: StatusLogEntry) -> Result[Order, StoreError]:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(OrderTable(
                    id=order.id,
                    user_id=order.user_id,
                    total_amount=order.total_amount,
                    status=order.status.value,
                    payment_status=order.payment_status.value,
                    payment_reference=order.payment_reference,
                    gateway_payment_id=order.gateway_payment_id,
                    shipping_address=_address_to_json(order.shipping_address),
                    tracking_number=order.tracking_number,
                    warehouse_notes=order.warehouse_notes,
                    version=order.version,
                    created_at=order.created_at,
                    updated_at=order.updated_at,
                ))
                session.add_all([
                    OrderItemTable(
                        id=item.id,
                        order_id=order.id,
                        product_id=item.product_id,
                        product_size_id=item.product_size_id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                    )
                    for item in order.items
                ])
                session.add(_to_log_row(log))
            return Ok(order)

        except Exception as e:
            return Error(StoreError(f"Failed to create order: {e}", e))

    async def update(
        self,
        order: Order,
        expected_version: int,
        log: StatusLogEntry | None,
    ) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session, session.begin():
                stmt = (
                    update(OrderTable)
                    .where(
                        OrderTable.id == order.id,
                        OrderTable.version == expected_version,
                    )
                    .values(
                        status=order.status.value,
                        payment_status=order.payment_status.value,
                        payment_reference=order.payment_reference,
                        gateway_payment_id=order.gateway_payment_id,
                        tracking_number=order.tracking_number,
                        warehouse_notes=order.warehouse_notes,
                        version=expected_version + 1,
                        updated_at=order.updated_at,
                    )
                    .execution_options(synchronize_session=False)
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                if cursor.rowcount == 0:
                    return Ok(False)

                if log is not None:
                    session.add(_to_log_row(log))
            return Ok(True)

        except Exception as e:
            return Error(StoreError(f"Failed to update order: {e}", e))

    async def logs(self, order_id: str) -> Result[list[StatusLogEntry], StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(OrderStatusLogTable)
                    .where(OrderStatusLogTable.order_id == order_id)
                    .order_by(OrderStatusLogTable.id)
                )
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_log_entry(r) for r in rows])

        except Exception as e:
            return Error(StoreError(f"Failed to load order logs: {e}", e))

    async def search(
        self,
        *,
        user_id: str | None = None,
        status: OrderStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> Result[tuple[list[Order], int], StoreError]:
        try:
            async with self._session_factory() as session:
                filters = []
                if user_id is not None:
                    filters.append(OrderTable.user_id == user_id)
                if status is not None:
                    filters.append(OrderTable.status == status.value)

                total = (
                    await session.execute(select(func.count()).select_from(OrderTable).where(*filters))
                ).scalar_one()

                stmt = (
                    select(OrderTable)
                    .where(*filters)
                    .options(selectinload(OrderTable.items))
                    .order_by(OrderTable.created_at.desc(), OrderTable.id.desc())
                    .offset(offset)
                )
                if limit is not None:
                    stmt = stmt.limit(limit)
                rows = (await session.execute(stmt)).scalars().all()
                return Ok(([_to_order(r) for r in rows], int(total)))

        except Exception as e:
            return Error(StoreError(f"Failed to list orders: {e}", e))

    async def totals(
        self,
        *,
        since: datetime,
        until: datetime,
        exclude: Collection[OrderStatus] = (),
    ) -> Result[PeriodTotals, StoreError]:
        try:
            async with self._session_factory() as session:
                filters = [OrderTable.created_at >= since, OrderTable.created_at < until]
                if exclude:
                    filters.append(func.lower(OrderTable.status).not_in([s.value for s in exclude]))

                count, revenue = (
                    await session.execute(
                        select(func.count(OrderTable.id), func.sum(OrderTable.total_amount)).where(*filters)
                    )
                ).one()
                # SQLite sums NUMERIC as float.
                amount = Decimal(str(revenue or 0)).quantize(Decimal("0.01"))
                return Ok(PeriodTotals(order_count=int(count), revenue=amount))

        except Exception as e:
            return Error(StoreError(f"Failed to total orders: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Row ↔ Domain
# ═══════════════════════════════════════════════════════════════════════════════

def _address_to_json(address: ShippingAddress) -> dict[str, Any]:
    return {
        "name": address.name,
        "address_line1": address.address_line1,
        "address_line2": address.address_line2,
        "city": address.city,
        "state": address.state,
        "country": address.country,
        "postal_code": address.postal_code,
        "phone": address.phone,
        "email": address.email,
    }


def _address_from_json(data: dict[str, Any]) -> ShippingAddress:
    return ShippingAddress(
        name=data.get("name", ""),
        address_line1=data.get("address_line1", ""),
        address_line2=data.get("address_line2"),
        city=data.get("city", ""),
        state=data.get("state", ""),
        country=data.get("country", ""),
        postal_code=data.get("postal_code", ""),
        phone=data.get("phone", ""),
        email=data.get("email", ""),
    )


def _order_status(value: str) -> OrderStatus:
    # Legacy upper-case rows are normalized on read; anything else is corrupt.
    status = OrderStatus.parse(value)
    if status is None:
        raise ValueError(f"unknown order status {value!r}")
    return status


def _payment_status(value: str) -> PaymentStatus:
    status = PaymentStatus.parse(value)
    if status is None:
        raise ValueError(f"unknown payment status {value!r}")
    return status


def _to_order(row: OrderTable) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        total_amount=row.total_amount,
        shipping_address=_address_from_json(row.shipping_address),
        status=_order_status(row.status),
        payment_status=_payment_status(row.payment_status),
        payment_reference=row.payment_reference,
        gateway_payment_id=row.gateway_payment_id,
        tracking_number=row.tracking_number,
        warehouse_notes=row.warehouse_notes,
        items=tuple(
            OrderItem(
                id=i.id,
                order_id=i.order_id,
                product_id=i.product_id,
                product_size_id=i.product_size_id,
                quantity=i.quantity,
                unit_price=i.unit_price,
            )
            for i in row.items
        ),
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_log_row(entry: StatusLogEntry) -> OrderStatusLogTable:
    return OrderStatusLogTable(
        order_id=entry.order_id,
        status=entry.status.value,
        notes=entry.notes,
        updated_by=entry.updated_by,
        created_at=entry.created_at,
    )


def _to_log_entry(row: OrderStatusLogTable) -> StatusLogEntry:
    return StatusLogEntry(
        id=row.id,
        order_id=row.order_id,
        status=_order_status(row.status),
        notes=row.notes,
        updated_by=row.updated_by,
        created_at=row.created_at,
    )


__all__ = ("SQLAlchemyOrderStore",)
