"""
Payments — gateway client, signatures and minor-unit conversion.

    from storefront import payments as P

    P.to_minor_units(Decimal("1500.00"), "INR")   # 150000
    P.verify(secret, "rzp_abc", "pay_1", signature)
"""

from storefront.payments._types import (
    ZERO_DECIMAL_CURRENCIES,
    THREE_DECIMAL_CURRENCIES,
    minor_unit_exponent,
    to_minor_units,
    GatewayOrderRequest,
    GatewayOrder,
    PaymentIntent,
    PaymentConfirmation,
)
from storefront.payments._signature import sign, verify
from storefront.payments._gateway import PaymentGateway, RazorpayGateway

__all__ = (
    # Money
    "ZERO_DECIMAL_CURRENCIES",
    "THREE_DECIMAL_CURRENCIES",
    "minor_unit_exponent",
    "to_minor_units",
    # Types
    "GatewayOrderRequest",
    "GatewayOrder",
    "PaymentIntent",
    "PaymentConfirmation",
    # Signature
    "sign",
    "verify",
    # Gateway
    "PaymentGateway",
    "RazorpayGateway",
)
