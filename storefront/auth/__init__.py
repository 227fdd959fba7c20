"""
Auth — identities, roles and the role gate.

    from storefront import auth as A

    gate = A.RoleGate(identity_provider, user_store)
    result = await gate.authorize(token, A.FULFILLMENT_ROLES)

Identity (who is calling) comes from the identity provider; the role comes
from the persisted user row. The gate combines both and never writes.
"""

from storefront.auth._types import (
    Role,
    STAFF_ROLES,
    FULFILLMENT_ROLES,
    ADMIN_ROLES,
    Identity,
    User,
    PROFILE_FIELDS,
)
from storefront.auth._store import UserStore
from storefront.auth._identity import (
    IdentityProvider,
    SupabaseIdentityProvider,
)
from storefront.auth._gate import RoleGate, require_role
from storefront.auth._users import UserService

__all__ = (
    # Types
    "Role",
    "STAFF_ROLES",
    "FULFILLMENT_ROLES",
    "ADMIN_ROLES",
    "Identity",
    "User",
    "PROFILE_FIELDS",
    # Store
    "UserStore",
    # Identity
    "IdentityProvider",
    "SupabaseIdentityProvider",
    # Gate
    "RoleGate",
    "require_role",
    # Service
    "UserService",
)
