"""
Database setup — engine and session factory.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from storefront.db._tables import Base


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
    *,
    echo: bool = False,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """
    Create tables and return (session_factory, engine).

    In-memory SQLite shares a single connection so every session sees
    the same database.
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite") and ":memory:" in url:
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(url, **kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("create_database",)
