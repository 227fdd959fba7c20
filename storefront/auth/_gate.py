"""
Role gate — may this caller perform this operation?

    gate = RoleGate(identity_provider, users)

    match await gate.authorize(token, FULFILLMENT_ROLES):
        case Ok(user): ...          # permitted, user row attached
        case Error(e): ...          # UNAUTHENTICATED or FORBIDDEN

Pure predicate: the gate never writes. Callers decide what a denial means
(reject the request, redirect, ...).
"""

from __future__ import annotations

import logging
from collections.abc import Set

from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront.auth._identity import IdentityProvider
from storefront.auth._store import UserStore
from storefront.auth._types import Identity, Role, User

logger = logging.getLogger(__name__)


def require_role(user: User, roles: Set[Role]) -> Result[User, StorefrontError]:
    """Check an already-resolved user against the authorized roles."""
    if user.role in roles:
        return Ok(user)
    logger.warning("role %s denied (needs one of %s)", user.role.value, sorted(r.value for r in roles))
    return Error(Errors.forbidden(f"Role '{user.role.value}' is not permitted for this operation"))


class RoleGate:
    def __init__(self, identity: IdentityProvider, users: UserStore) -> None:
        self._identity = identity
        self._users = users

    async def authenticate(self, token: str | None) -> Result[Identity, StorefrontError]:
        """Resolve the session or fail with UNAUTHENTICATED."""
        if not token:
            return Error(Errors.unauthenticated())

        match await self._identity.resolve(token):
            case Ok(None):
                return Error(Errors.unauthenticated("Session is missing or expired"))
            case Ok(identity):
                return Ok(identity)
            case Error(e):
                return Error(e)

    async def authorize(
        self,
        token: str | None,
        roles: Set[Role] | None = None,
    ) -> Result[User, StorefrontError]:
        """
        Resolve the caller to a persisted user and check the role.

        roles=None admits any signed-in user that has a profile row.
        """
        identity = await self.authenticate(token)
        match identity:
            case Error(e):
                return Error(e)
            case Ok(who):
                pass

        match await self._users.get(who.user_id):
            case Error(store_error):
                logger.error("user lookup failed: %s", store_error.message)
                return Error(Errors.upstream("Could not load user profile"))
            case Ok(None):
                return Error(Errors.forbidden("No profile exists for this account"))
            case Ok(user):
                pass

        if roles is None:
            return Ok(user)
        return require_role(user, roles)

    async def optional_caller(self, token: str | None) -> Result[User | None, StorefrontError]:
        """
        Like authorize(), but a missing token means a guest (Ok(None)).

        Note: a token that is present but invalid is still UNAUTHENTICATED.
        """
        if not token:
            return Ok(None)
        return await self.authorize(token)


__all__ = (
    "RoleGate",
    "require_role",
)
