"""
Wire schemas — pydantic request/response models.

Requests convert inward with to_domain(); responses convert outward with
from_domain(). Fields the lifecycle manager validates itself are optional
here so missing values surface as the manager's own error messages.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from storefront.auth import User
from storefront.catalog import Category, Product, ProductSize, School
from storefront.orders import (
    CheckoutLine,
    Order,
    OrderItem,
    OrderPage,
    OrderSummary,
    ShippingAddress,
    StatusLogEntry,
)
from storefront.payments import PaymentConfirmation, PaymentIntent

# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingAddressIn(BaseModel):
    name: str = ""
    address_line1: str = ""
    address_line2: str | None = None
    city: str = ""
    state: str = ""
    country: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(
            name=self.name.strip(),
            address_line1=self.address_line1.strip(),
            address_line2=(self.address_line2 or "").strip() or None,
            city=self.city.strip(),
            state=self.state.strip(),
            country=self.country.strip(),
            postal_code=self.postal_code.strip(),
            phone=self.phone.strip(),
            email=self.email.strip(),
        )


class CheckoutItemIn(BaseModel):
    product_id: str
    quantity: int = 1
    product_size_id: str | None = None

    def to_domain(self) -> CheckoutLine:
        return CheckoutLine(
            product_id=self.product_id,
            quantity=self.quantity,
            product_size_id=self.product_size_id,
        )


class CheckoutIn(BaseModel):
    items: list[CheckoutItemIn] = Field(default_factory=list)
    shipping_address: ShippingAddressIn

    def to_domain(self) -> tuple[list[CheckoutLine], ShippingAddress]:
        return [i.to_domain() for i in self.items], self.shipping_address.to_domain()


class InitiatePaymentIn(BaseModel):
    order_id: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    email: str | None = Field(default=None, validation_alias=AliasChoices("email", "user_email"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "user_name"))


class ConfirmPaymentIn(BaseModel):
    """Accepts both the neutral and the Razorpay field names."""

    gateway_payment_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gateway_payment_id", "razorpay_payment_id"),
    )
    gateway_order_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gateway_order_id", "razorpay_order_id"),
    )
    signature: str | None = Field(
        default=None,
        validation_alias=AliasChoices("signature", "razorpay_signature"),
    )
    order_id: str | None = None

    def to_domain(self) -> PaymentConfirmation:
        return PaymentConfirmation(
            order_id=self.order_id,
            gateway_order_id=self.gateway_order_id,
            gateway_payment_id=self.gateway_payment_id,
            signature=self.signature,
        )


class PaymentFailureIn(BaseModel):
    order_id: str | None = None
    description: str | None = Field(
        default=None,
        validation_alias=AliasChoices("description", "error", "reason"),
    )


class StatusUpdateIn(BaseModel):
    status: str | None = None
    tracking_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tracking_number", "delivery_link"),
    )
    notes: str | None = None


class ProfileIn(BaseModel):
    name: str | None = None


class ProfileUpdateIn(BaseModel):
    """Only the fields present in the body are changed; null or "" clears one."""

    name: str | None = None
    phone: str | None = None
    default_address_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("default_address_id", "defaultAddressId"),
    )

    def changes(self) -> dict[str, str | None]:
        return {name: getattr(self, name) for name in sorted(self.model_fields_set)}


class DefaultAddressIn(BaseModel):
    address_id: str | None = Field(default=None, validation_alias=AliasChoices("address_id", "addressId"))


class SetRoleIn(BaseModel):
    user_id: str | None = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))
    role: str | None = Field(default=None, validation_alias=AliasChoices("role", "newRole"))


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class _Out(BaseModel):
    model_config = ConfigDict(frozen=True)


class ShippingAddressOut(_Out):
    name: str
    address_line1: str
    address_line2: str | None
    city: str
    state: str
    country: str
    postal_code: str
    phone: str
    email: str

    @classmethod
    def from_domain(cls, dom: ShippingAddress) -> ShippingAddressOut:
        return cls(
            name=dom.name,
            address_line1=dom.address_line1,
            address_line2=dom.address_line2,
            city=dom.city,
            state=dom.state,
            country=dom.country,
            postal_code=dom.postal_code,
            phone=dom.phone,
            email=dom.email,
        )


class OrderItemOut(_Out):
    id: str
    product_id: str
    product_size_id: str | None
    quantity: int
    unit_price: Decimal

    @classmethod
    def from_domain(cls, dom: OrderItem) -> OrderItemOut:
        return cls(
            id=dom.id,
            product_id=dom.product_id,
            product_size_id=dom.product_size_id,
            quantity=dom.quantity,
            unit_price=dom.unit_price,
        )


class OrderOut(_Out):
    id: str
    user_id: str | None
    total_amount: Decimal
    status: str
    payment_status: str
    payment_reference: str | None
    gateway_payment_id: str | None
    tracking_number: str | None
    warehouse_notes: str | None
    shipping_address: ShippingAddressOut
    items: list[OrderItemOut]
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, dom: Order) -> OrderOut:
        return cls(
            id=dom.id,
            user_id=dom.user_id,
            total_amount=dom.total_amount,
            status=dom.status.value,
            payment_status=dom.payment_status.value,
            payment_reference=dom.payment_reference,
            gateway_payment_id=dom.gateway_payment_id,
            tracking_number=dom.tracking_number,
            warehouse_notes=dom.warehouse_notes,
            shipping_address=ShippingAddressOut.from_domain(dom.shipping_address),
            items=[OrderItemOut.from_domain(i) for i in dom.items],
            version=dom.version,
            created_at=dom.created_at,
            updated_at=dom.updated_at,
        )


class StatusLogOut(_Out):
    order_id: str
    status: str
    notes: str | None
    updated_by: str
    created_at: datetime

    @classmethod
    def from_domain(cls, dom: StatusLogEntry) -> StatusLogOut:
        return cls(
            order_id=dom.order_id,
            status=dom.status.value,
            notes=dom.notes,
            updated_by=dom.updated_by,
            created_at=dom.created_at,
        )


class PaginationOut(_Out):
    page: int
    limit: int
    total_orders: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_domain(cls, dom: OrderPage) -> PaginationOut:
        return cls(
            page=dom.page,
            limit=dom.limit,
            total_orders=dom.total_orders,
            total_pages=dom.total_pages,
            has_next_page=dom.has_next_page,
            has_prev_page=dom.has_prev_page,
        )


class PaymentIntentOut(_Out):
    order_id: str
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str

    @classmethod
    def from_domain(cls, dom: PaymentIntent) -> PaymentIntentOut:
        return cls(
            order_id=dom.order_id,
            gateway_order_id=dom.gateway_order_id,
            amount=dom.amount,
            currency=dom.currency,
            key_id=dom.key_id,
        )


class UserOut(_Out):
    id: str
    email: str
    name: str | None
    role: str
    auth_type: str
    phone: str | None
    default_address_id: str | None

    @classmethod
    def from_domain(cls, dom: User) -> UserOut:
        return cls(
            id=dom.id,
            email=dom.email,
            name=dom.name,
            role=dom.role.value,
            auth_type=dom.auth_type,
            phone=dom.phone,
            default_address_id=dom.default_address_id,
        )


class OrderSummaryOut(_Out):
    window: str
    start: datetime
    end: datetime
    order_count: int
    previous_order_count: int
    order_change: int
    revenue: Decimal
    previous_revenue: Decimal
    revenue_change: int

    @classmethod
    def from_domain(cls, dom: OrderSummary) -> OrderSummaryOut:
        return cls(
            window=dom.window.value,
            start=dom.start,
            end=dom.end,
            order_count=dom.current.order_count,
            previous_order_count=dom.previous.order_count,
            order_change=dom.order_change,
            revenue=dom.current.revenue,
            previous_revenue=dom.previous.revenue,
            revenue_change=dom.revenue_change,
        )


class ProductSizeOut(_Out):
    id: str
    size: str
    age_range: str | None
    stock: int

    @classmethod
    def from_domain(cls, dom: ProductSize) -> ProductSizeOut:
        return cls(id=dom.id, size=dom.size, age_range=dom.age_range, stock=dom.stock)


class ProductOut(_Out):
    id: str
    name: str
    description: str | None
    price: Decimal
    category_id: str | None
    school_id: str | None
    images: list[str]
    in_stock: bool
    sizes: list[ProductSizeOut]

    @classmethod
    def from_domain(cls, dom: Product) -> ProductOut:
        return cls(
            id=dom.id,
            name=dom.name,
            description=dom.description,
            price=dom.price,
            category_id=dom.category_id,
            school_id=dom.school_id,
            images=list(dom.images),
            in_stock=dom.in_stock,
            sizes=[ProductSizeOut.from_domain(s) for s in dom.sizes],
        )


class CategoryOut(_Out):
    id: str
    name: str
    slug: str
    description: str | None

    @classmethod
    def from_domain(cls, dom: Category) -> CategoryOut:
        return cls(id=dom.id, name=dom.name, slug=dom.slug, description=dom.description)


class SchoolOut(_Out):
    id: str
    name: str
    slug: str
    location: str | None

    @classmethod
    def from_domain(cls, dom: School) -> SchoolOut:
        return cls(id=dom.id, name=dom.name, slug=dom.slug, location=dom.location)


__all__ = (
    # Requests
    "ShippingAddressIn",
    "CheckoutItemIn",
    "CheckoutIn",
    "InitiatePaymentIn",
    "ConfirmPaymentIn",
    "PaymentFailureIn",
    "StatusUpdateIn",
    "ProfileIn",
    "ProfileUpdateIn",
    "DefaultAddressIn",
    "SetRoleIn",
    # Responses
    "ShippingAddressOut",
    "OrderItemOut",
    "OrderOut",
    "StatusLogOut",
    "PaginationOut",
    "PaymentIntentOut",
    "UserOut",
    "OrderSummaryOut",
    "ProductSizeOut",
    "ProductOut",
    "CategoryOut",
    "SchoolOut",
)
