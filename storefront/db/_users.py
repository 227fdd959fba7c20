"""
SQLAlchemy user store.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from storefront._types import StoreError
from storefront.auth import Role, User
from storefront.db._tables import UserTable


class SQLAlchemyUserStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, user_id: str) -> Result[User | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(UserTable, user_id)
                return Ok(_to_user(row) if row is not None else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get user: {e}", e))

    async def create(self, user: User) -> Result[User, StoreError]:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(UserTable(
                    id=user.id,
                    email=user.email,
                    name=user.name,
                    role=user.role.value,
                    auth_type=user.auth_type,
                    phone=user.phone,
                    default_address_id=user.default_address_id,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                ))
            return Ok(user)

        except Exception as e:
            return Error(StoreError(f"Failed to create user: {e}", e))

    async def set_role(
        self,
        user_id: str,
        role: Role,
        updated_at: datetime,
    ) -> Result[User | None, StoreError]:
        try:
            async with self._session_factory() as session, session.begin():
                row = (
                    await session.execute(select(UserTable).where(UserTable.id == user_id))
                ).scalar_one_or_none()
                if row is None:
                    return Ok(None)

                row.role = role.value
                row.updated_at = updated_at
                return Ok(_to_user(row))

        except Exception as e:
            return Error(StoreError(f"Failed to set role: {e}", e))

    async def update_profile(
        self,
        user_id: str,
        changes: Mapping[str, str | None],
        updated_at: datetime,
    ) -> Result[User | None, StoreError]:
        try:
            async with self._session_factory() as session, session.begin():
                row = await session.get(UserTable, user_id)
                if row is None:
                    return Ok(None)

                for column, value in changes.items():
                    setattr(row, column, value)
                row.updated_at = updated_at
                return Ok(_to_user(row))

        except Exception as e:
            return Error(StoreError(f"Failed to update profile: {e}", e))


def _role(value: str) -> Role:
    role = Role.parse(value)
    if role is None:
        raise ValueError(f"unknown role {value!r}")
    return role


def _to_user(row: UserTable) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        role=_role(row.role),
        auth_type=row.auth_type,
        phone=row.phone,
        default_address_id=row.default_address_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


__all__ = ("SQLAlchemyUserStore",)
