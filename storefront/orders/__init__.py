"""
Orders — lifecycle manager, checkout, queries and the audit log.

    from storefront import orders as O

    manager = O.OrderLifecycleManager(order_store, gateway, notifier=O.LoggingNotifier())
    await manager.initiate_payment("ord_1", Decimal("1500.00"), "INR")
    await manager.confirm_payment(confirmation)
    await manager.set_fulfillment_status(warehouse_user, "ord_1", "shipped", "TRK123")
"""

from storefront.orders._types import (
    OrderStatus,
    TERMINAL_STATUSES,
    TRACKABLE_STATUSES,
    PaymentStatus,
    ShippingAddress,
    OrderItem,
    Order,
    StatusLogEntry,
    OrderPage,
    SummaryWindow,
    PeriodTotals,
    OrderSummary,
    percent_change,
)
from storefront.orders._store import OrderStore
from storefront.orders._notify import NOTIFY_ON, OrderNotifier, LoggingNotifier
from storefront.orders._manager import OrderLifecycleManager
from storefront.orders._queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, OrderQueries
from storefront.orders._checkout import CheckoutLine, CheckoutService

__all__ = (
    # Types
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
    # Store
    "OrderStore",
    # Notifications
    "NOTIFY_ON",
    "OrderNotifier",
    "LoggingNotifier",
    # Services
    "OrderLifecycleManager",
    "OrderQueries",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "CheckoutLine",
    "CheckoutService",
)
