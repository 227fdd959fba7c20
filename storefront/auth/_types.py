"""
Auth types — roles, identities and persisted users.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront._types import utcnow

# ═══════════════════════════════════════════════════════════════════════════════
# Role
# ═══════════════════════════════════════════════════════════════════════════════


class Role(Enum):
    USER = "user"
    ADMIN = "admin"
    MANAGER = "manager"
    WAREHOUSE = "warehouse"

    @classmethod
    def parse(cls, value: str) -> Role | None:
        """
        Normalize a role from any casing.

        Note: "customer" is the legacy spelling of "user".
        """
        normalized = value.strip().lower()
        if normalized == "customer":
            return cls.USER
        try:
            return cls(normalized)
        except ValueError:
            return None


STAFF_ROLES = frozenset({Role.ADMIN, Role.MANAGER, Role.WAREHOUSE})
FULFILLMENT_ROLES = frozenset({Role.WAREHOUSE, Role.ADMIN})
ADMIN_ROLES = frozenset({Role.ADMIN})

# ═══════════════════════════════════════════════════════════════════════════════
# Identity — what the identity provider knows
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated caller as reported by the identity provider."""

    user_id: str
    email: str
    auth_type: str = "email"


# ═══════════════════════════════════════════════════════════════════════════════
# User — persisted profile
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str
    name: str | None = None
    role: Role = Role.USER
    auth_type: str = "email"
    phone: str | None = None
    default_address_id: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


# Fields a user may edit on their own profile.
PROFILE_FIELDS = ("name", "phone", "default_address_id")


__all__ = (
    "Role",
    "STAFF_ROLES",
    "FULFILLMENT_ROLES",
    "ADMIN_ROLES",
    "Identity",
    "User",
    "PROFILE_FIELDS",
)
