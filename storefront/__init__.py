"""
storefront — order lifecycle and payment reconciliation for a shop backend.

    from storefront import orders as O     # Lifecycle manager, checkout, queries
    from storefront import payments as P   # Gateway, signatures, minor units
    from storefront import auth as A       # Identity, roles, role gate
    from storefront import catalog         # Read-only products
    from storefront import db              # SQLAlchemy stores
    from storefront import wire            # FastAPI app
"""

from storefront import auth
from storefront import catalog
from storefront import orders
from storefront import payments
from storefront import db
from storefront import wire
from storefront._errors import ErrorKind, StorefrontError, Errors
from storefront._types import (
    Result,
    Ok,
    Error,
    StoreError,
    SYSTEM_ACTOR,
)
from storefront.config import Settings

__version__ = "0.1.0"

__all__ = (
    "auth",
    "catalog",
    "orders",
    "payments",
    "db",
    "wire",
    "ErrorKind",
    "StorefrontError",
    "Errors",
    "Result",
    "Ok",
    "Error",
    "StoreError",
    "SYSTEM_ACTOR",
    "Settings",
)
