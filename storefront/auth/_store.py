"""
User store — typed storage protocol for persisted users.

All methods return Result for explicit error handling.
"""

from __future__ import annotations

from datetime import datetime
from collections.abc import Mapping
from typing import Protocol

from kungfu import Result

from storefront._types import StoreError
from storefront.auth._types import Role, User


class UserStore(Protocol):
    async def get(self, user_id: str) -> Result[User | None, StoreError]:
        """Get user by id. Returns Ok(None) if not found."""
        ...

    async def create(self, user: User) -> Result[User, StoreError]:
        """Insert a new user row."""
        ...

    async def set_role(
        self,
        user_id: str,
        role: Role,
        updated_at: datetime,
    ) -> Result[User | None, StoreError]:
        """Update role. Returns Ok(None) if the user does not exist."""
        ...

    async def update_profile(
        self,
        user_id: str,
        changes: Mapping[str, str | None],
        updated_at: datetime,
    ) -> Result[User | None, StoreError]:
        """Overwrite the given profile fields. Returns Ok(None) if the user does not exist."""
        ...


__all__ = ("UserStore",)
