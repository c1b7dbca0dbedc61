"""
Domain — cart, checkout and order values.

Every value is immutable; collections are tuples so the cache can hand the
same object to a snapshot and to readers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from cartsync.pricing import ProductPrice, tenant_price, calculate_total
from cartsync.tenant import Tenant

DEFAULT_TAX_RATE = 0.21


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Domain
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    """Product fields denormalized into a cart line."""

    id: str
    name: str
    price: ProductPrice
    stock_count: int = 0


@dataclass(frozen=True, slots=True)
class CartItem:
    id: str
    user_id: str
    product_id: str
    quantity: int
    product: ProductSnapshot

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"cart item {self.id} needs quantity >= 1, got {self.quantity}")

    def unit_price(self, tenant: Tenant) -> float:
        return tenant_price(self.product.price, tenant)

    def line_total(self, tenant: Tenant) -> float:
        return calculate_total(self.unit_price(tenant), self.quantity)


type Cart = tuple[CartItem, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Domain
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(StrEnum):
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    PURCHASE_ORDER = "purchase_order"
    WALLET = "wallet"


@dataclass(frozen=True, slots=True)
class BillingInfo:
    company_name: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    postal_code: str
    country: str


@dataclass(frozen=True, slots=True)
class PaymentDetails:
    card_number: str | None = None
    expiry_date: str | None = None
    cvv: str | None = None
    card_holder_name: str | None = None
    po_number: str | None = None


@dataclass(frozen=True, slots=True)
class CheckoutForm:
    billing: BillingInfo
    payment_method: PaymentMethod
    payment: PaymentDetails = field(default_factory=PaymentDetails)


@dataclass(frozen=True, slots=True)
class OrderTotals:
    subtotal: float
    tax: float
    total: float
    item_count: int

    @classmethod
    def compute(cls, cart: Cart, tenant: Tenant, tax_rate: float = DEFAULT_TAX_RATE) -> OrderTotals:
        """Totals in cents, as displayed and charged."""
        subtotal = round(sum((item.line_total(tenant) for item in cart), 0.0), 2)
        tax = round(subtotal * tax_rate, 2)
        return cls(
            subtotal=subtotal,
            tax=tax,
            total=round(subtotal + tax, 2),
            item_count=sum(item.quantity for item in cart),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Order Domain
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(StrEnum):
    """
    Order lifecycle.

    DRAFT (client only) → SUBMITTED → SUCCESS | FAILED
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class OrderLine:
    product_id: str
    name: str
    quantity: int
    unit_price: float

    @classmethod
    def from_cart_item(cls, item: CartItem, tenant: Tenant) -> OrderLine:
        return cls(
            product_id=item.product_id,
            name=item.product.name,
            quantity=item.quantity,
            unit_price=item.unit_price(tenant),
        )


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    status: OrderStatus
    payment_method: PaymentMethod
    totals: OrderTotals
    order_number: str | None = None
    lines: tuple[OrderLine, ...] = ()
    billing: BillingInfo | None = None
    created_at: datetime | None = None

    @property
    def provisional(self) -> bool:
        """Client-side placeholder not yet confirmed by the server."""
        return self.status is OrderStatus.DRAFT

    @classmethod
    def draft(
        cls,
        draft_id: str,
        cart: Cart,
        form: CheckoutForm,
        tenant: Tenant,
        tax_rate: float = DEFAULT_TAX_RATE,
    ) -> Order:
        """Placeholder shown in the orders collection while checkout is in flight."""
        return cls(
            id=draft_id,
            status=OrderStatus.DRAFT,
            payment_method=form.payment_method,
            totals=OrderTotals.compute(cart, tenant, tax_rate),
            lines=tuple(OrderLine.from_cart_item(item, tenant) for item in cart),
            billing=form.billing,
        )


type Orders = tuple[Order, ...]


__all__ = (
    "DEFAULT_TAX_RATE",
    "ProductSnapshot",
    "CartItem",
    "Cart",
    "PaymentMethod",
    "BillingInfo",
    "PaymentDetails",
    "CheckoutForm",
    "OrderTotals",
    "OrderStatus",
    "OrderLine",
    "Order",
    "Orders",
)
