"""
Database — SQLAlchemy tables and store implementations.

    session_factory, engine = await create_database("sqlite+aiosqlite:///:memory:")

    orders = SQLAlchemyOrderStore(session_factory)
    users = SQLAlchemyUserStore(session_factory)
    catalog = SQLAlchemyCatalogStore(session_factory)

Each store call opens and closes its own session.
"""

from storefront.db._tables import (
    Base,
    UserTable,
    CategoryTable,
    SchoolTable,
    ProductTable,
    ProductSizeTable,
    OrderTable,
    OrderItemTable,
    OrderStatusLogTable,
)
from storefront.db._session import create_database
from storefront.db._orders import SQLAlchemyOrderStore
from storefront.db._users import SQLAlchemyUserStore
from storefront.db._catalog import SQLAlchemyCatalogStore

__all__ = (
    # Tables
    "Base",
    "UserTable",
    "CategoryTable",
    "SchoolTable",
    "ProductTable",
    "ProductSizeTable",
    "OrderTable",
    "OrderItemTable",
    "OrderStatusLogTable",
    # Setup
    "create_database",
    # Stores
    "SQLAlchemyOrderStore",
    "SQLAlchemyUserStore",
    "SQLAlchemyCatalogStore",
)
