"""Pytest fixtures for storefront tests."""

from __future__ import annotations

from datetime import datetime, UTC
from decimal import Decimal

import pytest
from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront._types import SYSTEM_ACTOR
from storefront.auth import Identity, Role
from storefront.db import (
    CategoryTable,
    ProductSizeTable,
    ProductTable,
    SchoolTable,
    SQLAlchemyCatalogStore,
    SQLAlchemyOrderStore,
    SQLAlchemyUserStore,
    UserTable,
    create_database,
)
from storefront.orders import (
    Order,
    OrderLifecycleManager,
    OrderStatus,
    ShippingAddress,
    StatusLogEntry,
)
from storefront.payments import GatewayOrder, GatewayOrderRequest

SECRET = "test_key_secret"
KEY_ID = "rzp_test_key"

CUSTOMER = "u_customer"
OTHER_CUSTOMER = "u_other"
WAREHOUSE = "u_warehouse"
ADMIN = "u_admin"
MANAGER = "u_manager"

# token -> (user id, role); the token doubles as a bearer value in API tests
SEEDED_USERS: dict[str, tuple[str, Role]] = {
    "tok_customer": (CUSTOMER, Role.USER),
    "tok_other": (OTHER_CUSTOMER, Role.USER),
    "tok_warehouse": (WAREHOUSE, Role.WAREHOUSE),
    "tok_admin": (ADMIN, Role.ADMIN),
    "tok_manager": (MANAGER, Role.MANAGER),
}


# ═══════════════════════════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════════════════════════


class FakeGateway:
    """In-memory payment gateway. Hands out ids from `next_ids` in order."""

    def __init__(self, next_ids: list[str] | None = None) -> None:
        self.next_ids = list(next_ids or [])
        self.requests: list[GatewayOrderRequest] = []
        self.fail_with: StorefrontError | None = None
        self._counter = 0

    @property
    def key_id(self) -> str:
        return KEY_ID

    @property
    def secret(self) -> str:
        return SECRET

    async def create_order(self, request: GatewayOrderRequest) -> Result[GatewayOrder, StorefrontError]:
        self.requests.append(request)
        if self.fail_with is not None:
            return Error(self.fail_with)
        if self.next_ids:
            gateway_id = self.next_ids.pop(0)
        else:
            self._counter += 1
            gateway_id = f"rzp_auto_{self._counter}"
        return Ok(GatewayOrder(id=gateway_id, amount=request.amount, currency=request.currency))


class TokenIdentityProvider:
    """Resolves tokens from a fixed table."""

    def __init__(self, identities: dict[str, Identity]) -> None:
        self.identities = identities

    async def resolve(self, token: str) -> Result[Identity | None, StorefrontError]:
        if token == "tok_broken":
            return Error(Errors.upstream("Identity provider unavailable"))
        return Ok(self.identities.get(token))


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple[str, OrderStatus, OrderStatus]] = []
        self.fail = fail

    async def order_status_changed(self, order: Order, previous: OrderStatus) -> None:
        self.calls.append((order.id, previous, order.status))
        if self.fail:
            raise RuntimeError("mail server down")


# ═══════════════════════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
async def session_factory():
    """In-memory database seeded with users and a small catalog."""
    factory, engine = await create_database("sqlite+aiosqlite:///:memory:")
    now = datetime.now(UTC)

    async with factory() as session, session.begin():
        for user_id, role in SEEDED_USERS.values():
            session.add(UserTable(
                id=user_id,
                email=f"{user_id}@example.com",
                name=user_id,
                role=role.value,
                auth_type="email",
                created_at=now,
                updated_at=now,
            ))
        session.add(CategoryTable(id="cat_uniform", name="Uniforms", slug="uniforms"))
        session.add(SchoolTable(id="sch_oak", name="Oakridge", slug="oakridge", location="Pune"))

    async with factory() as session, session.begin():
        session.add_all([
            ProductTable(
                id="p_shirt",
                name="Shirt",
                price=Decimal("500.00"),
                category_id="cat_uniform",
                school_id="sch_oak",
                images=["shirt.png"],
                in_stock=True,
            ),
            ProductTable(id="p_skirt", name="Skirt", price=Decimal("1000.00"), category_id="cat_uniform"),
            ProductTable(id="p_tie", name="Tie", price=Decimal("150.00"), in_stock=False),
        ])

    async with factory() as session, session.begin():
        session.add_all([
            ProductSizeTable(id="s_shirt_m", product_id="p_shirt", size="M", age_range="8-10", stock=5),
            ProductSizeTable(id="s_shirt_l", product_id="p_shirt", size="L", age_range="10-12", stock=0),
        ])

    yield factory
    await engine.dispose()


@pytest.fixture
def order_store(session_factory) -> SQLAlchemyOrderStore:
    return SQLAlchemyOrderStore(session_factory)


@pytest.fixture
def user_store(session_factory) -> SQLAlchemyUserStore:
    return SQLAlchemyUserStore(session_factory)


@pytest.fixture
def catalog_store(session_factory) -> SQLAlchemyCatalogStore:
    return SQLAlchemyCatalogStore(session_factory)


# ═══════════════════════════════════════════════════════════════════════════════
# Services
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(next_ids=["rzp_abc"])


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def identity() -> TokenIdentityProvider:
    return TokenIdentityProvider({
        token: Identity(user_id=user_id, email=f"{user_id}@example.com")
        for token, (user_id, _) in SEEDED_USERS.items()
    } | {
        "tok_new": Identity(user_id="u_new", email="newbie@example.com", auth_type="google"),
    })


@pytest.fixture
def manager(order_store, gateway, notifier) -> OrderLifecycleManager:
    return OrderLifecycleManager(order_store, gateway, notifier=notifier)


def make_address(**overrides: str) -> ShippingAddress:
    fields = {
        "name": "Asha Rao",
        "address_line1": "12 MG Road",
        "city": "Pune",
        "state": "MH",
        "country": "IN",
        "postal_code": "411001",
        "phone": "+91 90000 00000",
        "email": "asha@example.com",
    }
    fields.update(overrides)
    return ShippingAddress(**fields)


@pytest.fixture
async def placed_order(order_store) -> Order:
    """`ord_1`: 1500.00 owned by the customer, pending/pending, one log row."""
    order = Order(
        id="ord_1",
        user_id=CUSTOMER,
        total_amount=Decimal("1500.00"),
        shipping_address=make_address(),
    )
    log = StatusLogEntry(order_id=order.id, status=order.status, notes="Order placed", updated_by=SYSTEM_ACTOR)
    (await order_store.create(order, log)).unwrap()
    return (await order_store.get(order.id)).unwrap()


async def load_user(user_store, user_id: str):
    return (await user_store.get(user_id)).unwrap()
