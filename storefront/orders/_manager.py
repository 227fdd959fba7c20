"""
Order lifecycle manager — payment reconciliation and fulfillment transitions.

Every mutation follows the same shape:

    1. load the order                         → NOT_FOUND
    2. check preconditions                    → INVALID_REQUEST / FORBIDDEN
    3. (payments) call the gateway            → UPSTREAM_FAILURE, nothing written
    4. compare-and-swap the order + log row   → CONFLICT, nothing written

    manager = OrderLifecycleManager(orders, gateway, notifier=LoggingNotifier())

    match await manager.confirm_payment(confirmation):
        case Ok(order): ...                   # payment completed, processing
        case Error(e) if e.kind is ErrorKind.INVALID_SIGNATURE: ...

The signature check is the only path to payment_status = completed.
"""

from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront._types import SYSTEM_ACTOR, utcnow
from storefront.auth import FULFILLMENT_ROLES, User, require_role
from storefront.orders._notify import NOTIFY_ON, OrderNotifier
from storefront.orders._store import OrderStore
from storefront.orders._types import (
    Order,
    OrderStatus,
    PaymentStatus,
    StatusLogEntry,
)
from storefront.payments import (
    GatewayOrderRequest,
    PaymentConfirmation,
    PaymentGateway,
    PaymentIntent,
    to_minor_units,
    verify,
)

logger = logging.getLogger(__name__)

# Fulfillment states a confirmed payment moves forward to processing.
_AWAITING_PAYMENT = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


class OrderLifecycleManager:
    def __init__(
        self,
        orders: OrderStore,
        gateway: PaymentGateway,
        notifier: OrderNotifier | None = None,
        default_currency: str = "INR",
    ) -> None:
        self._orders = orders
        self._gateway = gateway
        self._notifier = notifier
        self._default_currency = default_currency

    # ═══════════════════════════════════════════════════════════════════════════
    # Payments
    # ═══════════════════════════════════════════════════════════════════════════

    async def initiate_payment(
        self,
        order_id: str | None,
        amount: Decimal | None,
        currency: str | None = None,
        *,
        email: str | None = None,
        name: str | None = None,
    ) -> Result[PaymentIntent, StorefrontError]:
        """
        Create a gateway order for this order's total.

        Allowed while the payment is pending or after a failed attempt.
        A failed attempt goes back to pending under a new gateway reference.
        """
        if not order_id:
            return Error(Errors.invalid_request("order_id is required"))
        if amount is None or not amount.is_finite() or amount <= 0:
            return Error(Errors.invalid_request("amount must be a positive number"))

        code = (currency or self._default_currency).strip().upper()
        if len(code) != 3 or not code.isalpha():
            return Error(Errors.invalid_request(f"Invalid currency: {currency}"))

        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        if order.payment_status is PaymentStatus.COMPLETED:
            return Error(Errors.invalid_request("Order is already paid"))
        if order.status.is_terminal:
            return Error(Errors.invalid_request(f"Order is {order.status.value}"))
        if amount != order.total_amount:
            return Error(Errors.invalid_request("Amount does not match the order total"))

        request = GatewayOrderRequest(
            amount=to_minor_units(amount, code),
            currency=code,
            receipt=order.id,
            notes={
                "order_id": order.id,
                "user_email": email or order.shipping_address.email,
                "user_name": name or order.shipping_address.name,
            },
        )
        match await self._gateway.create_order(request):
            case Error(e):
                return Error(e)
            case Ok(gateway_order):
                pass

        retry = order.payment_status is PaymentStatus.FAILED
        updated = dataclasses.replace(
            order,
            payment_status=PaymentStatus.PENDING,
            payment_reference=gateway_order.id,
            gateway_payment_id=None,
            updated_at=utcnow(),
        )
        log = None
        if retry:
            log = StatusLogEntry(
                order_id=order.id,
                status=order.status,
                notes=f"Payment retry initiated (gateway order {gateway_order.id})",
                updated_by=SYSTEM_ACTOR,
            )

        match await self._commit(order, updated, log):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info(
            "payment initiated for order %s: %s %s (gateway order %s)",
            order.id,
            gateway_order.amount,
            gateway_order.currency,
            gateway_order.id,
        )
        return Ok(PaymentIntent(
            order_id=order.id,
            gateway_order_id=gateway_order.id,
            amount=gateway_order.amount,
            currency=gateway_order.currency,
            key_id=self._gateway.key_id,
        ))

    async def confirm_payment(self, confirmation: PaymentConfirmation) -> Result[Order, StorefrontError]:
        """
        Verify the gateway signature and settle the payment.

        Match: payment completed, order moves to processing.
        Mismatch: payment failed, fulfillment untouched, INVALID_SIGNATURE.
        """
        missing = confirmation.missing_fields()
        if missing:
            return Error(Errors.invalid_request(f"Missing required fields: {', '.join(missing)}"))

        # missing_fields() guarantees these are set
        order_id = str(confirmation.order_id)
        gateway_order_id = str(confirmation.gateway_order_id)
        gateway_payment_id = str(confirmation.gateway_payment_id)

        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        # A settled payment is never reopened, not even by a forged callback.
        if order.payment_status is PaymentStatus.COMPLETED:
            return Error(Errors.invalid_request("Order is already paid"))

        now = utcnow()
        if not verify(self._gateway.secret, gateway_order_id, gateway_payment_id, str(confirmation.signature)):
            failed = dataclasses.replace(order, payment_status=PaymentStatus.FAILED, updated_at=now)
            log = StatusLogEntry(
                order_id=order.id,
                status=order.status,
                notes=f"Payment verification failed: signature mismatch (payment {gateway_payment_id})",
                updated_by=SYSTEM_ACTOR,
                created_at=now,
            )
            logger.warning("signature mismatch for order %s (gateway order %s)", order.id, gateway_order_id)
            match await self._commit(order, failed, log):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    return Error(Errors.invalid_signature())

        if order.payment_status is PaymentStatus.FAILED:
            return Error(Errors.invalid_request("Payment attempt already failed; initiate a new payment"))
        if order.payment_reference != gateway_order_id:
            return Error(Errors.invalid_request("Gateway order does not belong to this order"))

        status = OrderStatus.PROCESSING if order.status in _AWAITING_PAYMENT else order.status
        paid = dataclasses.replace(
            order,
            status=status,
            payment_status=PaymentStatus.COMPLETED,
            gateway_payment_id=gateway_payment_id,
            updated_at=now,
        )
        log = StatusLogEntry(
            order_id=order.id,
            status=status,
            notes=f"Payment confirmed (payment {gateway_payment_id})",
            updated_by=SYSTEM_ACTOR,
            created_at=now,
        )

        match await self._commit(order, paid, log):
            case Error(e):
                return Error(e)
            case Ok(saved):
                logger.info(
                    "payment %s confirmed for order %s; status %s -> %s",
                    gateway_payment_id,
                    order.id,
                    order.status.value,
                    status.value,
                )
                return Ok(saved)

    async def record_payment_failure(
        self,
        order_id: str | None,
        description: str | None = None,
    ) -> Result[Order, StorefrontError]:
        """Mark the payment failed. Repeated calls stay failed and log each time."""
        if not order_id:
            return Error(Errors.invalid_request("order_id is required"))

        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        if order.payment_status is PaymentStatus.COMPLETED:
            return Error(Errors.invalid_request("Order is already paid"))

        now = utcnow()
        failed = dataclasses.replace(order, payment_status=PaymentStatus.FAILED, updated_at=now)
        log = StatusLogEntry(
            order_id=order.id,
            status=order.status,
            notes=f"Payment failed: {description or 'no description provided'}",
            updated_by=SYSTEM_ACTOR,
            created_at=now,
        )

        match await self._commit(order, failed, log):
            case Error(e):
                return Error(e)
            case Ok(saved):
                logger.info("payment failure recorded for order %s", order.id)
                return Ok(saved)

    # ═══════════════════════════════════════════════════════════════════════════
    # Fulfillment
    # ═══════════════════════════════════════════════════════════════════════════

    async def set_fulfillment_status(
        self,
        caller: User,
        order_id: str | None,
        status: str | None,
        tracking_number: str | None = None,
        notes: str | None = None,
    ) -> Result[Order, StorefrontError]:
        """
        Move an order to any fulfillment status. Warehouse and admin only.

        No adjacency check: staff may jump between any two statuses.
        """
        match require_role(caller, FULFILLMENT_ROLES):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        if not order_id:
            return Error(Errors.invalid_request("order_id is required"))

        new_status = OrderStatus.parse(status)
        if new_status is None:
            return Error(Errors.invalid_request(f"Invalid order status: {status}"))

        tracking = (tracking_number or "").strip() or None
        if tracking is not None and not new_status.allows_tracking:
            return Error(Errors.invalid_request(
                f"Tracking number can only be set once an order is shipped (got {new_status.value})"
            ))

        match await self._load(order_id):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        now = utcnow()
        changes: dict[str, object] = {"status": new_status, "updated_at": now}
        if tracking is not None:
            changes["tracking_number"] = tracking
        if notes:
            changes["warehouse_notes"] = notes
        updated = dataclasses.replace(order, **changes)  # type: ignore[arg-type]

        log = StatusLogEntry(
            order_id=order.id,
            status=new_status,
            notes=notes or f"Order marked as {new_status.value}",
            updated_by=caller.id,
            created_at=now,
        )

        match await self._commit(order, updated, log):
            case Error(e):
                return Error(e)
            case Ok(saved):
                pass

        logger.info(
            "order %s status %s -> %s by %s",
            order.id,
            order.status.value,
            new_status.value,
            caller.id,
        )
        if new_status in NOTIFY_ON and new_status is not order.status:
            await self._notify(saved, order.status)
        return Ok(saved)

    # ═══════════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════════

    async def _load(self, order_id: str) -> Result[Order, StorefrontError]:
        match await self._orders.get(order_id):
            case Ok(None):
                return Error(Errors.not_found("Order", order_id))
            case Ok(order):
                return Ok(order)
            case Error(e):
                logger.error("order %s lookup failed: %s", order_id, e.message)
                return Error(Errors.upstream("Could not load order"))

    async def _commit(
        self,
        before: Order,
        after: Order,
        log: StatusLogEntry | None,
    ) -> Result[Order, StorefrontError]:
        match await self._orders.update(after, before.version, log):
            case Ok(True):
                return Ok(dataclasses.replace(after, version=before.version + 1))
            case Ok(_):
                logger.warning("concurrent update on order %s (version %s)", before.id, before.version)
                return Error(Errors.conflict(f"Order {before.id} was modified concurrently; retry"))
            case Error(e):
                logger.error("order %s update failed: %s", before.id, e.message)
                return Error(Errors.upstream("Could not save order"))

    async def _notify(self, order: Order, previous: OrderStatus) -> None:
        if self._notifier is None:
            return
        try:
            await self._notifier.order_status_changed(order, previous)
        except Exception:
            logger.exception("notification for order %s failed", order.id)


__all__ = ("OrderLifecycleManager",)
