"""
Payment types — gateway orders, intents and confirmations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

# ═══════════════════════════════════════════════════════════════════════════════
# Minor Units
# ═══════════════════════════════════════════════════════════════════════════════

ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "ISK", "JPY", "KMF", "KRW",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})

THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "JOD", "KWD", "OMR", "TND"})


def minor_unit_exponent(currency: str) -> int:
    code = currency.upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def to_minor_units(amount: Decimal, currency: str) -> int:
    """
    Convert a major-unit amount to the gateway's integer minor units.

    Example:
        to_minor_units(Decimal("1500.00"), "INR")  # 150000
        to_minor_units(Decimal("1500"), "JPY")     # 1500
    """
    scaled = amount * (Decimal(10) ** minor_unit_exponent(currency))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ═══════════════════════════════════════════════════════════════════════════════
# Gateway Contract
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class GatewayOrderRequest:
    amount: int
    currency: str
    receipt: str
    notes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GatewayOrder:
    id: str
    amount: int
    currency: str


# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """What the client needs to open the gateway checkout."""

    order_id: str
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str


@dataclass(frozen=True, slots=True)
class PaymentConfirmation:
    """Callback payload after the client completed the gateway checkout."""

    order_id: str | None
    gateway_order_id: str | None
    gateway_payment_id: str | None
    signature: str | None

    def missing_fields(self) -> tuple[str, ...]:
        names = ("order_id", "gateway_order_id", "gateway_payment_id", "signature")
        return tuple(n for n in names if not getattr(self, n))


__all__ = (
    "ZERO_DECIMAL_CURRENCIES",
    "THREE_DECIMAL_CURRENCIES",
    "minor_unit_exponent",
    "to_minor_units",
    "GatewayOrderRequest",
    "GatewayOrder",
    "PaymentIntent",
    "PaymentConfirmation",
)
