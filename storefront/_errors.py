"""
Errors — the storefront error taxonomy.

Every operation returns Result[T, StorefrontError]. The kind decides the
HTTP status and the stable code the frontend switches on; the message is
safe to show to the caller.

    match await manager.confirm_payment(...):
        case Ok(order): ...
        case Error(StorefrontError(kind=ErrorKind.INVALID_SIGNATURE)): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ═══════════════════════════════════════════════════════════════════════════════
# Error Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """Kinds of storefront errors."""

    INVALID_REQUEST = "invalid_request"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_SIGNATURE = "invalid_signature"
    UPSTREAM_FAILURE = "upstream_failure"
    INTERNAL = "internal"

    @property
    def status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def code(self) -> str:
        """Stable machine-readable code, e.g. "invalid_signature"."""
        return self.value


_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_SIGNATURE: 400,
    ErrorKind.UPSTREAM_FAILURE: 502,
    ErrorKind.INTERNAL: 500,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Error Value
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StorefrontError:
    kind: ErrorKind
    message: str

    @property
    def status(self) -> int:
        return self.kind.status

    @property
    def code(self) -> str:
        return self.kind.code

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class Errors:
    @staticmethod
    def invalid_request(msg: str) -> StorefrontError:
        return StorefrontError(ErrorKind.INVALID_REQUEST, msg)

    @staticmethod
    def unauthenticated(msg: str = "Sign in required") -> StorefrontError:
        return StorefrontError(ErrorKind.UNAUTHENTICATED, msg)

    @staticmethod
    def forbidden(msg: str = "Forbidden") -> StorefrontError:
        return StorefrontError(ErrorKind.FORBIDDEN, msg)

    @staticmethod
    def not_found(entity: str, id: str) -> StorefrontError:
        return StorefrontError(ErrorKind.NOT_FOUND, f"{entity} not found: {id}")

    @staticmethod
    def conflict(msg: str) -> StorefrontError:
        return StorefrontError(ErrorKind.CONFLICT, msg)

    @staticmethod
    def invalid_signature(msg: str = "Invalid payment signature") -> StorefrontError:
        return StorefrontError(ErrorKind.INVALID_SIGNATURE, msg)

    @staticmethod
    def upstream(msg: str) -> StorefrontError:
        return StorefrontError(ErrorKind.UPSTREAM_FAILURE, msg)

    @staticmethod
    def internal(msg: str = "Internal server error") -> StorefrontError:
        return StorefrontError(ErrorKind.INTERNAL, msg)


__all__ = (
    "ErrorKind",
    "StorefrontError",
    "Errors",
)
