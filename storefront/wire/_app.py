"""
FastAPI application — routes, error envelope and wiring.

    services = build_services(session_factory, gateway, identity)
    app = create_app(services)

Every route answers with the same envelope:

    success → {"success": true, ...payload}
    failure → {"success": false, "error": <code>, "message": <text>}

Operations return Result; the route only renders it. Nothing raised by
an operation reaches the client as a stack trace.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, Any

import httpx
from fastapi import Depends, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from kungfu import Result, Ok, Error
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront._errors import ErrorKind, StorefrontError
from storefront._log import configure_logging
from storefront.auth import IdentityProvider, RoleGate, SupabaseIdentityProvider, UserService
from storefront.catalog import CatalogService
from storefront.config import Settings
from storefront.db import (
    SQLAlchemyCatalogStore,
    SQLAlchemyOrderStore,
    SQLAlchemyUserStore,
    create_database,
)
from storefront.orders import (
    CheckoutService,
    DEFAULT_PAGE_SIZE,
    LoggingNotifier,
    OrderLifecycleManager,
    OrderNotifier,
    OrderQueries,
)
from storefront.payments import PaymentGateway, RazorpayGateway
from storefront.wire._schemas import (
    CategoryOut,
    CheckoutIn,
    ConfirmPaymentIn,
    DefaultAddressIn,
    InitiatePaymentIn,
    OrderOut,
    OrderSummaryOut,
    PaginationOut,
    PaymentFailureIn,
    PaymentIntentOut,
    ProductOut,
    ProfileIn,
    ProfileUpdateIn,
    SchoolOut,
    SetRoleIn,
    StatusLogOut,
    StatusUpdateIn,
    UserOut,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Services
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Services:
    gate: RoleGate
    users: UserService
    lifecycle: OrderLifecycleManager
    queries: OrderQueries
    checkout: CheckoutService
    catalog: CatalogService


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    gateway: PaymentGateway,
    identity: IdentityProvider,
    notifier: OrderNotifier | None = None,
    default_currency: str = "INR",
) -> Services:
    orders = SQLAlchemyOrderStore(session_factory)
    users = SQLAlchemyUserStore(session_factory)
    catalog = SQLAlchemyCatalogStore(session_factory)
    return Services(
        gate=RoleGate(identity, users),
        users=UserService(users),
        lifecycle=OrderLifecycleManager(
            orders,
            gateway,
            notifier=notifier,
            default_currency=default_currency,
        ),
        queries=OrderQueries(orders),
        checkout=CheckoutService(orders, catalog),
        catalog=CatalogService(catalog),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Envelope
# ═══════════════════════════════════════════════════════════════════════════════


def error_response(error: StorefrontError) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": error.code, "message": error.message},
        status_code=error.status,
    )


def _failure(kind: ErrorKind, message: str, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": kind.code, "message": message},
        status_code=status_code or kind.status,
    )


def respond[T](
    result: Result[T, StorefrontError],
    render: Callable[[T], dict[str, Any]],
    status_code: int = 200,
) -> JSONResponse:
    match result:
        case Ok(value):
            body = {"success": True, **render(value)}
            return JSONResponse(jsonable_encoder(body), status_code=status_code)
        case Error(e):
            return error_response(e)


def _bearer_token(authorization: Annotated[str | None, Header()] = None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _services(request: Request) -> Services:
    return request.app.state.services  # type: ignore[no-any-return]


Token = Annotated[str | None, Depends(_bearer_token)]
Deps = Annotated[Services, Depends(_services)]


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg', 'invalid value')}" if where else str(first.get("msg", "Invalid request"))
        return _failure(ErrorKind.INVALID_REQUEST, message)

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = ErrorKind.NOT_FOUND if exc.status_code == 404 else ErrorKind.INVALID_REQUEST
        return _failure(kind, str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _failure(ErrorKind.INTERNAL, "Internal server error")


# ═══════════════════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════════════════


def _add_routes(app: FastAPI) -> None:
    @app.get("/api/health")
    async def health() -> JSONResponse:
        return JSONResponse({"success": True, "status": "ok"})

    # ── Checkout & payments ──────────────────────────────────────────────────

    @app.post("/api/checkout")
    async def checkout(body: CheckoutIn, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.optional_caller(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                lines, address = body.to_domain()
                result = await services.checkout.place_order(caller, lines, address)
                return respond(result, lambda o: {"order": OrderOut.from_domain(o)}, status_code=201)

    @app.post("/api/payment")
    async def initiate_payment(body: InitiatePaymentIn, services: Deps) -> JSONResponse:
        result = await services.lifecycle.initiate_payment(
            body.order_id,
            body.amount,
            body.currency,
            email=body.email,
            name=body.name,
        )
        return respond(result, lambda i: PaymentIntentOut.from_domain(i).model_dump())

    @app.put("/api/payment")
    async def confirm_payment(body: ConfirmPaymentIn, services: Deps) -> JSONResponse:
        result = await services.lifecycle.confirm_payment(body.to_domain())
        return respond(result, lambda o: {"order": OrderOut.from_domain(o)})

    @app.post("/api/payment/failure")
    async def payment_failure(body: PaymentFailureIn, services: Deps) -> JSONResponse:
        result = await services.lifecycle.record_payment_failure(body.order_id, body.description)
        return respond(result, lambda o: {"order": OrderOut.from_domain(o)})

    # ── Fulfillment ──────────────────────────────────────────────────────────

    @app.put("/api/warehouse/orders/{order_id}/status")
    async def set_status(order_id: str, body: StatusUpdateIn, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.lifecycle.set_fulfillment_status(
                    caller,
                    order_id,
                    body.status,
                    tracking_number=body.tracking_number,
                    notes=body.notes,
                )
                return respond(result, lambda o: {"order": OrderOut.from_domain(o)})

    # ── Order reads ──────────────────────────────────────────────────────────

    @app.get("/api/orders")
    async def my_orders(services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.queries.list_mine(caller)
                return respond(result, lambda os: {"orders": [OrderOut.from_domain(o) for o in os]})

    @app.get("/api/orders/{order_id}")
    async def get_order(order_id: str, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.queries.get_order(caller, order_id)
                return respond(result, lambda o: {"order": OrderOut.from_domain(o)})

    @app.get("/api/orders/{order_id}/logs")
    async def order_logs(order_id: str, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.queries.history(caller, order_id)
                return respond(result, lambda ls: {"logs": [StatusLogOut.from_domain(entry) for entry in ls]})

    @app.get("/api/admin/orders")
    async def staff_orders(
        services: Deps,
        token: Token,
        status: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.queries.list_all(caller, status=status, page=page, limit=limit)
                return respond(result, lambda p: {
                    "orders": [OrderOut.from_domain(o) for o in p.orders],
                    "pagination": PaginationOut.from_domain(p),
                })

    @app.get("/api/admin/orders/summary")
    async def staff_summary(services: Deps, token: Token, window: str = "week") -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.queries.summary(caller, window=window)
                return respond(result, lambda s: {"summary": OrderSummaryOut.from_domain(s)})

    # ── Users ────────────────────────────────────────────────────────────────

    @app.post("/api/profile")
    async def ensure_profile(services: Deps, token: Token, body: ProfileIn | None = None) -> JSONResponse:
        match await services.gate.authenticate(token):
            case Error(e):
                return error_response(e)
            case Ok(identity):
                result = await services.users.ensure_profile(identity, body.name if body else None)
                return respond(result, lambda u: {"user": UserOut.from_domain(u)})

    @app.put("/api/profile")
    async def update_profile(body: ProfileUpdateIn, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.users.update_profile(caller, body.changes())
                return respond(result, lambda u: {"user": UserOut.from_domain(u)})

    @app.put("/api/profile/default-address")
    async def set_default_address(body: DefaultAddressIn, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.users.set_default_address(caller, body.address_id)
                return respond(result, lambda u: {"user": UserOut.from_domain(u)})

    @app.get("/api/user/role")
    async def my_role(services: Deps, token: Token) -> JSONResponse:
        result = await services.gate.authorize(token)
        return respond(result, lambda u: {"role": u.role.value})

    @app.post("/api/users/role")
    async def set_role(body: SetRoleIn, services: Deps, token: Token) -> JSONResponse:
        match await services.gate.authorize(token):
            case Error(e):
                return error_response(e)
            case Ok(caller):
                result = await services.users.set_role(caller, body.user_id, body.role)
                return respond(result, lambda u: {"user": UserOut.from_domain(u)})

    # ── Catalog ──────────────────────────────────────────────────────────────

    @app.get("/api/products")
    async def products(
        services: Deps,
        category_id: str | None = None,
        school_id: str | None = None,
    ) -> JSONResponse:
        result = await services.catalog.list_products(category_id=category_id, school_id=school_id)
        return respond(result, lambda ps: {"products": [ProductOut.from_domain(p) for p in ps]})

    @app.get("/api/products/{product_id}")
    async def product(product_id: str, services: Deps) -> JSONResponse:
        result = await services.catalog.get_product(product_id)
        return respond(result, lambda p: {"product": ProductOut.from_domain(p)})

    @app.get("/api/categories")
    async def categories(services: Deps) -> JSONResponse:
        result = await services.catalog.list_categories()
        return respond(result, lambda cs: {"categories": [CategoryOut.from_domain(c) for c in cs]})

    @app.get("/api/schools")
    async def schools(services: Deps) -> JSONResponse:
        result = await services.catalog.list_schools()
        return respond(result, lambda ss: {"schools": [SchoolOut.from_domain(s) for s in ss]})


# ═══════════════════════════════════════════════════════════════════════════════
# Factories
# ═══════════════════════════════════════════════════════════════════════════════


def create_app(
    services: Services | None = None,
    *,
    cors_origins: Sequence[str] = ("*",),
    lifespan: Callable[[FastAPI], Any] | None = None,
) -> FastAPI:
    """
    Build the HTTP app.

    Pass services directly (tests, embedding) or a lifespan that sets
    app.state.services on startup.
    """
    app = FastAPI(title="storefront", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)
    _add_routes(app)
    return app


def create_app_from_settings(settings: Settings | None = None) -> FastAPI:
    """
    Production factory: settings → database, HTTP clients, services.

    Run with:
        uvicorn --factory storefront.wire:create_app_from_settings
    """
    cfg = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(cfg.log_level)
        session_factory, engine = await create_database(cfg.database_url)
        async with httpx.AsyncClient() as client:
            gateway = RazorpayGateway(
                client,
                key_id=cfg.razorpay_key_id,
                key_secret=cfg.razorpay_key_secret.get_secret_value(),
                base_url=cfg.razorpay_base_url,
                timeout_seconds=cfg.gateway_timeout_seconds,
            )
            identity = SupabaseIdentityProvider(
                client,
                base_url=cfg.supabase_url,
                anon_key=cfg.supabase_anon_key.get_secret_value(),
                timeout_seconds=cfg.identity_timeout_seconds,
            )
            app.state.services = build_services(
                session_factory,
                gateway,
                identity,
                notifier=LoggingNotifier(),
                default_currency=cfg.default_currency,
            )
            logger.info("storefront started (database %s)", engine.url.render_as_string(hide_password=True))
            try:
                yield
            finally:
                await engine.dispose()

    return create_app(cors_origins=cfg.cors_origins, lifespan=lifespan)


__all__ = (
    "Services",
    "build_services",
    "error_response",
    "respond",
    "create_app",
    "create_app_from_settings",
)
