"""
Core types for storefront.

Re-exports from kungfu + shared helpers used by every subpackage.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, UTC

# Re-export from kungfu
from kungfu import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Persistence operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Identity & Time
# ═══════════════════════════════════════════════════════════════════════════════

SYSTEM_ACTOR = "system"
"""Actor recorded on log rows written by the service itself."""


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def utcnow() -> datetime:
    return datetime.now(UTC)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    # Store
    "StoreError",
    # Helpers
    "SYSTEM_ACTOR",
    "new_id",
    "utcnow",
)
