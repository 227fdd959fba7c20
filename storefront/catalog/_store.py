"""
Catalog store — read-only storage protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from kungfu import Result

from storefront._types import StoreError
from storefront.catalog._types import Category, Product, School


class CatalogStore(Protocol):
    async def list_products(
        self,
        *,
        category_id: str | None = None,
        school_id: str | None = None,
    ) -> Result[list[Product], StoreError]: ...

    async def get_product(self, product_id: str) -> Result[Product | None, StoreError]:
        """Product with its sizes. Ok(None) if not found."""
        ...

    async def get_products(self, product_ids: Sequence[str]) -> Result[dict[str, Product], StoreError]:
        """Batch lookup keyed by id. Unknown ids are absent from the result."""
        ...

    async def list_categories(self) -> Result[list[Category], StoreError]: ...

    async def list_schools(self) -> Result[list[School], StoreError]: ...


__all__ = ("CatalogStore",)
