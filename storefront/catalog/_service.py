"""
Catalog service — thin read layer that maps store failures to API errors.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront._types import StoreError
from storefront.catalog._store import CatalogStore
from storefront.catalog._types import Category, Product, School

logger = logging.getLogger(__name__)


def _upstream(what: str, e: StoreError) -> StorefrontError:
    logger.error("catalog %s failed: %s", what, e.message)
    return Errors.upstream(f"Could not load {what}")


class CatalogService:
    def __init__(self, store: CatalogStore) -> None:
        self._store = store

    async def list_products(
        self,
        category_id: str | None = None,
        school_id: str | None = None,
    ) -> Result[list[Product], StorefrontError]:
        match await self._store.list_products(category_id=category_id, school_id=school_id):
            case Ok(products):
                return Ok(products)
            case Error(e):
                return Error(_upstream("products", e))

    async def get_product(self, product_id: str) -> Result[Product, StorefrontError]:
        match await self._store.get_product(product_id):
            case Ok(None):
                return Error(Errors.not_found("Product", product_id))
            case Ok(product):
                return Ok(product)
            case Error(e):
                return Error(_upstream("product", e))

    async def list_categories(self) -> Result[list[Category], StorefrontError]:
        match await self._store.list_categories():
            case Ok(categories):
                return Ok(categories)
            case Error(e):
                return Error(_upstream("categories", e))

    async def list_schools(self) -> Result[list[School], StorefrontError]:
        match await self._store.list_schools():
            case Ok(schools):
                return Ok(schools)
            case Error(e):
                return Error(_upstream("schools", e))


__all__ = ("CatalogService",)
