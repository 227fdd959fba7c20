"""
Order types — statuses, orders, items and the audit log.

Two independent state machines live on an order:

    fulfillment:  pending → processing → shipped → delivered
                  cancelled / failed reachable from any non-terminal state
    payment:      pending → completed | failed   (per gateway attempt)

Status values are canonical lower-case. OrderStatus.parse() accepts the
upper-case legacy spelling at the boundary; .legacy emits it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from storefront._types import utcnow

# ═══════════════════════════════════════════════════════════════════════════════
# Statuses
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: str | None) -> OrderStatus | None:
        """Normalize a status from any casing. None if not a member."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def legacy(self) -> str:
        return self.value.upper()

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def allows_tracking(self) -> bool:
        return self in TRACKABLE_STATUSES


TERMINAL_STATUSES = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
    OrderStatus.FAILED,
})

TRACKABLE_STATUSES = frozenset({
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
})


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: str | None) -> PaymentStatus | None:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    name: str
    address_line1: str
    city: str
    state: str
    country: str
    postal_code: str
    phone: str
    email: str
    address_line2: str | None = None

    def missing_fields(self) -> tuple[str, ...]:
        """Names of required fields that are blank."""
        required = (
            "name",
            "address_line1",
            "city",
            "state",
            "country",
            "postal_code",
            "phone",
            "email",
        )
        return tuple(f for f in required if not str(getattr(self, f) or "").strip())


@dataclass(frozen=True, slots=True)
class OrderItem:
    """
    One purchased line.

    Note: unit_price is captured at checkout and never recomputed.
    """

    id: str
    order_id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    product_size_id: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class Order:
    """
    Persisted order.

    version increases by one on every stored mutation. Updates are
    conditional on the version the caller read.
    """

    id: str
    user_id: str | None
    total_amount: Decimal
    shipping_address: ShippingAddress
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_reference: str | None = None
    gateway_payment_id: str | None = None
    tracking_number: str | None = None
    warehouse_notes: str | None = None
    items: tuple[OrderItem, ...] = ()
    version: int = 1
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def is_owned_by(self, user_id: str | None) -> bool:
        return self.user_id is not None and self.user_id == user_id


@dataclass(frozen=True, slots=True)
class StatusLogEntry:
    """Append-only audit row. Never mutated or deleted."""

    order_id: str
    status: OrderStatus
    notes: str | None
    updated_by: str
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Listing
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderPage:
    orders: tuple[Order, ...]
    page: int
    limit: int
    total_orders: int

    @property
    def total_pages(self) -> int:
        if self.total_orders == 0:
            return 0
        return -(-self.total_orders // self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


# ═══════════════════════════════════════════════════════════════════════════════
# Summary
# ═══════════════════════════════════════════════════════════════════════════════


class SummaryWindow(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: str | None) -> SummaryWindow | None:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    def start(self, now: datetime) -> datetime:
        """Start of the current period ending at now. A day starts at midnight."""
        if self is SummaryWindow.DAY:
            return now.replace(hour=0, minute=0, second=0, microsecond=0)
        return now - _WINDOW_LENGTHS[self]


_WINDOW_LENGTHS = {
    SummaryWindow.WEEK: timedelta(days=7),
    SummaryWindow.MONTH: timedelta(days=30),
    SummaryWindow.YEAR: timedelta(days=365),
}


@dataclass(frozen=True, slots=True)
class PeriodTotals:
    order_count: int = 0
    revenue: Decimal = Decimal("0.00")


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """
    Order count and revenue for a window against the period just before it.

    Both periods have the same length; previous ends where current starts.
    Cancelled orders are not counted.
    """

    window: SummaryWindow
    start: datetime
    end: datetime
    current: PeriodTotals
    previous: PeriodTotals

    @property
    def order_change(self) -> int:
        return percent_change(Decimal(self.current.order_count), Decimal(self.previous.order_count))

    @property
    def revenue_change(self) -> int:
        return percent_change(self.current.revenue, self.previous.revenue)


def percent_change(current: Decimal, previous: Decimal) -> int:
    """Whole-percent change. Growth from nothing counts as 100."""
    if previous == 0:
        return 100 if current > 0 else 0
    change = (current - previous) / previous * 100
    return int(change.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


__all__ = (
    "OrderStatus",
    "TERMINAL_STATUSES",
    "TRACKABLE_STATUSES",
    "PaymentStatus",
    "ShippingAddress",
    "OrderItem",
    "Order",
    "StatusLogEntry",
    "OrderPage",
    "SummaryWindow",
    "PeriodTotals",
    "OrderSummary",
    "percent_change",
)
