"""
Catalog — read-only products, sizes, categories and schools.
"""

from storefront.catalog._types import ProductSize, Product, Category, School
from storefront.catalog._store import CatalogStore
from storefront.catalog._service import CatalogService

__all__ = (
    "ProductSize",
    "Product",
    "Category",
    "School",
    "CatalogStore",
    "CatalogService",
)
