"""
SQLAlchemy catalog store — read-only.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from kungfu import Result, Ok, Error

from storefront._types import StoreError
from storefront.catalog import Category, Product, ProductSize, School
from storefront.db._tables import CategoryTable, ProductTable, SchoolTable


class SQLAlchemyCatalogStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_products(
        self,
        *,
        category_id: str | None = None,
        school_id: str | None = None,
    ) -> Result[list[Product], StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = select(ProductTable).options(selectinload(ProductTable.sizes)).order_by(ProductTable.name)
                if category_id is not None:
                    stmt = stmt.where(ProductTable.category_id == category_id)
                if school_id is not None:
                    stmt = stmt.where(ProductTable.school_id == school_id)
                rows = (await session.execute(stmt)).scalars().all()
                return Ok([_to_product(r) for r in rows])

        except Exception as e:
            return Error(StoreError(f"Failed to list products: {e}", e))

    async def get_product(self, product_id: str) -> Result[Product | None, StoreError]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(ProductTable)
                    .where(ProductTable.id == product_id)
                    .options(selectinload(ProductTable.sizes))
                )
                row = (await session.execute(stmt)).scalar_one_or_none()
                return Ok(_to_product(row) if row is not None else None)

        except Exception as e:
            return Error(StoreError(f"Failed to get product: {e}", e))

    async def get_products(self, product_ids: Sequence[str]) -> Result[dict[str, Product], StoreError]:
        if not product_ids:
            return Ok({})
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(ProductTable)
                    .where(ProductTable.id.in_(list(product_ids)))
                    .options(selectinload(ProductTable.sizes))
                )
                rows = (await session.execute(stmt)).scalars().all()
                return Ok({r.id: _to_product(r) for r in rows})

        except Exception as e:
            return Error(StoreError(f"Failed to get products: {e}", e))

    async def list_categories(self) -> Result[list[Category], StoreError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(select(CategoryTable).order_by(CategoryTable.name))).scalars().all()
                return Ok([
                    Category(id=r.id, name=r.name, slug=r.slug, description=r.description)
                    for r in rows
                ])

        except Exception as e:
            return Error(StoreError(f"Failed to list categories: {e}", e))

    async def list_schools(self) -> Result[list[School], StoreError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(select(SchoolTable).order_by(SchoolTable.name))).scalars().all()
                return Ok([
                    School(id=r.id, name=r.name, slug=r.slug, location=r.location)
                    for r in rows
                ])

        except Exception as e:
            return Error(StoreError(f"Failed to list schools: {e}", e))


def _to_product(row: ProductTable) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description,
        price=row.price,
        category_id=row.category_id,
        school_id=row.school_id,
        images=tuple(row.images or ()),
        in_stock=row.in_stock,
        sizes=tuple(
            ProductSize(
                id=s.id,
                product_id=s.product_id,
                size=s.size,
                age_range=s.age_range,
                stock=s.stock,
            )
            for s in row.sizes
        ),
    )


__all__ = ("SQLAlchemyCatalogStore",)
