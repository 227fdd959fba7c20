"""
Payment signature — HMAC-SHA256 over "{gateway_order_id}|{gateway_payment_id}".
"""

from __future__ import annotations

import hashlib
import hmac


def sign(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify(
    secret: str,
    gateway_order_id: str,
    gateway_payment_id: str,
    signature: str,
) -> bool:
    """
    Constant-time comparison against the expected hex digest.

    Compares bytes, so any client-supplied text (non-ASCII included) is
    a plain mismatch rather than an error.
    """
    expected = sign(secret, gateway_order_id, gateway_payment_id).encode()
    supplied = signature.strip().lower().encode("utf-8", errors="replace")
    return hmac.compare_digest(expected, supplied)


__all__ = (
    "sign",
    "verify",
)
