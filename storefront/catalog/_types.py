"""
Catalog types — products, size variants, categories and schools.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class ProductSize:
    id: str
    product_id: str
    size: str
    age_range: str | None = None
    stock: int = 0


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price: Decimal
    description: str | None = None
    category_id: str | None = None
    school_id: str | None = None
    images: tuple[str, ...] = ()
    in_stock: bool = True
    sizes: tuple[ProductSize, ...] = ()

    def size(self, size_id: str) -> ProductSize | None:
        for s in self.sizes:
            if s.id == size_id:
                return s
        return None


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str
    slug: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class School:
    id: str
    name: str
    slug: str
    location: str | None = None


__all__ = (
    "ProductSize",
    "Product",
    "Category",
    "School",
)
