"""
Wire schemas — camelCase JSON payloads of the storefront backend.

Each schema validates a payload and converts it to a domain value with
to_domain(). Money arrives as strings or numbers and goes through
parse_price, so malformed amounts become 0.0 instead of failing the read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from cartsync.alerts import Alert, Severity
from cartsync.domain import (
    CartItem,
    CheckoutForm,
    Order,
    OrderLine,
    OrderStatus,
    OrderTotals,
    PaymentMethod,
    ProductSnapshot,
)
from cartsync.pricing import ProductPrice, parse_price
from cartsync.wallet import Wallet, WalletBalance, WalletTransaction

Money = Annotated[float, BeforeValidator(parse_price)]
OptionalMoney = Annotated[float | None, BeforeValidator(lambda v: None if v is None else parse_price(v))]


class _Wire(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class ProductWire(_Wire):
    id: str
    name: str
    price: OptionalMoney = None
    price_km: OptionalMoney = None
    stock_count: int = 0

    def to_domain(self) -> ProductSnapshot:
        km = self.price_km or None
        eur = self.price
        if eur is None and km is None:
            eur = 0.0
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            price=ProductPrice(eur=eur, km=km),
            stock_count=self.stock_count,
        )


class CartItemWire(_Wire):
    id: str
    user_id: str = ""
    product_id: str
    quantity: int
    product: ProductWire

    def to_domain(self) -> CartItem:
        return CartItem(
            id=self.id,
            user_id=self.user_id,
            product_id=self.product_id,
            quantity=self.quantity,
            product=self.product.to_domain(),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Wallet
# ═══════════════════════════════════════════════════════════════════════════════


class WalletBalanceWire(_Wire):
    """Derived fields (availableCredit, totalAvailable, isOverlimit) are ignored."""

    deposit_balance: Money = 0.0
    credit_limit: Money = 0.0
    credit_used: Money = 0.0

    def to_domain(self) -> WalletBalance:
        return WalletBalance(
            deposit_balance=self.deposit_balance,
            credit_limit=self.credit_limit,
            credit_used=self.credit_used,
        )


class WalletTransactionWire(_Wire):
    id: str
    type: str
    amount: Money
    description: str = ""
    created_at: datetime
    balance_after: Money = 0.0
    order_id: str | None = None

    def to_domain(self) -> WalletTransaction:
        return WalletTransaction(
            id=self.id,
            type=self.type,
            amount=self.amount,
            description=self.description,
            created_at=self.created_at,
            balance_after=self.balance_after,
            order_id=self.order_id,
        )


class WalletWire(_Wire):
    id: str
    user_id: str
    balance: WalletBalanceWire
    recent_transactions: list[WalletTransactionWire] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        # Some endpoints wrap the wallet as {"success": true, "data": {...}}
        if isinstance(data, dict) and "data" in data and isinstance(data["data"], dict):
            return data["data"]
        return data

    def to_domain(self) -> Wallet:
        return Wallet(
            id=self.id,
            user_id=self.user_id,
            balance=self.balance.to_domain(),
            recent_transactions=tuple(t.to_domain() for t in self.recent_transactions),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════

_ORDER_STATUS = {
    "pending": OrderStatus.SUBMITTED,
    "completed": OrderStatus.SUCCESS,
    "cancelled": OrderStatus.FAILED,
    "failed": OrderStatus.FAILED,
}


class OrderLineWire(_Wire):
    product_id: str
    quantity: int
    unit_price: Money = 0.0
    product: ProductWire | None = None

    def to_domain(self) -> OrderLine:
        return OrderLine(
            product_id=self.product_id,
            name=self.product.name if self.product is not None else "",
            quantity=self.quantity,
            unit_price=self.unit_price,
        )


class OrderWire(_Wire):
    id: str
    order_number: str | None = None
    total_amount: Money = 0.0
    tax_amount: Money = 0.0
    final_amount: Money = 0.0
    status: str = "pending"
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    created_at: datetime | None = None
    items: list[OrderLineWire] = Field(default_factory=list)

    def to_domain(self) -> Order:
        lines = tuple(item.to_domain() for item in self.items)
        return Order(
            id=self.id,
            status=_ORDER_STATUS.get(self.status, OrderStatus.SUBMITTED),
            payment_method=self.payment_method,
            totals=OrderTotals(
                subtotal=self.total_amount,
                tax=self.tax_amount,
                total=self.final_amount,
                item_count=sum(line.quantity for line in lines),
            ),
            order_number=self.order_number,
            lines=lines,
            created_at=self.created_at,
        )


class BillingInfoWire(_Wire):
    company_name: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    postal_code: str
    country: str


class PaymentDetailsWire(_Wire):
    card_number: str | None = None
    expiry_date: str | None = None
    cvv: str | None = None
    card_holder_name: str | None = None
    po_number: str | None = None


class OrderRequestWire(_Wire):
    billing_info: BillingInfoWire
    payment_method: PaymentMethod
    payment_details: PaymentDetailsWire

    @classmethod
    def from_form(cls, form: CheckoutForm) -> OrderRequestWire:
        billing = form.billing
        payment = form.payment
        return cls(
            billing_info=BillingInfoWire(
                company_name=billing.company_name,
                first_name=billing.first_name,
                last_name=billing.last_name,
                email=billing.email,
                phone=billing.phone,
                address=billing.address,
                city=billing.city,
                postal_code=billing.postal_code,
                country=billing.country,
            ),
            payment_method=form.payment_method,
            payment_details=PaymentDetailsWire(
                card_number=payment.card_number,
                expiry_date=payment.expiry_date,
                cvv=payment.cvv,
                card_holder_name=payment.card_holder_name,
                po_number=payment.po_number,
            ),
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Alerts
# ═══════════════════════════════════════════════════════════════════════════════


class AlertWire(_Wire):
    id: str
    level: Severity
    category: str
    message: str
    resolved: bool = False
    timestamp: datetime
    source: str = ""

    def to_domain(self) -> Alert:
        return Alert(
            id=self.id,
            level=self.level,
            category=self.category,
            message=self.message,
            resolved=self.resolved,
            timestamp=self.timestamp,
            source=self.source,
        )


__all__ = (
    "ProductWire",
    "CartItemWire",
    "WalletBalanceWire",
    "WalletTransactionWire",
    "WalletWire",
    "OrderLineWire",
    "OrderWire",
    "OrderRequestWire",
    "AlertWire",
)
