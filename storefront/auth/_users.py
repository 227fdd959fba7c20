"""
User service — profile provisioning, profile edits and role management.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront._types import utcnow
from storefront.auth._gate import require_role
from storefront.auth._store import UserStore
from storefront.auth._types import ADMIN_ROLES, PROFILE_FIELDS, Identity, Role, User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserStore) -> None:
        self._users = users

    async def ensure_profile(
        self,
        identity: Identity,
        name: str | None = None,
    ) -> Result[User, StorefrontError]:
        """Return the caller's profile, creating it with the default role."""
        match await self._users.get(identity.user_id):
            case Error(e):
                logger.error("profile lookup failed: %s", e.message)
                return Error(Errors.upstream("Could not load user profile"))
            case Ok(None):
                pass
            case Ok(existing):
                return Ok(existing)

        user = User(
            id=identity.user_id,
            email=identity.email,
            name=name or identity.email.split("@")[0] or None,
            auth_type=identity.auth_type,
        )
        match await self._users.create(user):
            case Ok(created):
                logger.info("profile created for user %s", created.id)
                return Ok(created)
            case Error(e):
                logger.error("profile creation failed: %s", e.message)
                return Error(Errors.upstream("Could not create user profile"))

    async def set_role(
        self,
        actor: User,
        user_id: str | None,
        new_role: str | None,
    ) -> Result[User, StorefrontError]:
        """Change a user's role. Admin only."""
        match require_role(actor, ADMIN_ROLES):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        if not user_id or not new_role:
            return Error(Errors.invalid_request("user_id and role are required"))

        role = Role.parse(new_role)
        if role is None:
            return Error(Errors.invalid_request(f"Invalid role: {new_role}"))

        match await self._users.set_role(user_id, role, utcnow()):
            case Error(e):
                logger.error("role update failed: %s", e.message)
                return Error(Errors.upstream("Could not update user role"))
            case Ok(None):
                return Error(Errors.not_found("User", user_id))
            case Ok(updated):
                logger.info("user %s role set to %s by %s", updated.id, role.value, actor.id)
                return Ok(updated)


    async def update_profile(
        self,
        caller: User,
        changes: Mapping[str, str | None],
    ) -> Result[User, StorefrontError]:
        """
        Update the caller's own profile.

        Only the fields present in changes are written. An empty string
        clears the field.
        """
        unknown = sorted(set(changes) - set(PROFILE_FIELDS))
        if unknown:
            return Error(Errors.invalid_request(f"Cannot update profile fields: {', '.join(unknown)}"))
        if not changes:
            return Error(Errors.invalid_request("No profile fields to update"))

        cleaned = {
            name: (value.strip() or None) if value is not None else None
            for name, value in changes.items()
        }

        match await self._users.update_profile(caller.id, cleaned, utcnow()):
            case Error(e):
                logger.error("profile update failed: %s", e.message)
                return Error(Errors.upstream("Could not update user profile"))
            case Ok(None):
                return Error(Errors.not_found("User", caller.id))
            case Ok(updated):
                logger.info("profile of user %s updated: %s", updated.id, ", ".join(sorted(cleaned)))
                return Ok(updated)

    async def set_default_address(
        self,
        caller: User,
        address_id: str | None,
    ) -> Result[User, StorefrontError]:
        if not address_id:
            return Error(Errors.invalid_request("Address ID is required"))
        return await self.update_profile(caller, {"default_address_id": address_id})


__all__ = ("UserService",)
