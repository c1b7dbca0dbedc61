"""
Price parsing, formatting and totals.

All functions are pure and never raise on bad amounts: invalid input is
treated as zero so a single broken price cannot corrupt a running total.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

import structlog

from cartsync.tenant import Currency, Tenant
from cartsync.pricing._currency import CURRENCIES, Placement

log = structlog.get_logger(__name__)

type Amount = float | int | str | None

_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")


# ═══════════════════════════════════════════════════════════════════════════════
# Product Price
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductPrice:
    """Unit price in each supported currency. At least one must be set."""

    eur: float | None = None
    km: float | None = None

    def __post_init__(self) -> None:
        if self.eur is None and self.km is None:
            raise ValueError("product needs a EUR or KM price")
        for value in (self.eur, self.km):
            if value is not None and (math.isnan(value) or value < 0):
                raise ValueError(f"invalid price: {value}")


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════════


def parse_price(value: Amount) -> float:
    """Parse a number or numeric string. Anything unusable is 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip())
    except (ValueError, OverflowError):
        # OverflowError: ints beyond the float range
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_display(text: str) -> float:
    """
    Recover the amount from a formatted price, prefix or suffix placement.

    Example:
        parse_display("€12.50")    # 12.5
        parse_display("12.50 KM")  # 12.5
    """
    match = _NUMBER.search(text.replace(" ", ""))
    if match is None:
        return 0.0
    return parse_price(match.group().replace(",", "."))


# ═══════════════════════════════════════════════════════════════════════════════
# Formatting
# ═══════════════════════════════════════════════════════════════════════════════


def format_amount(amount: Amount, currency: Currency, decimals: int | None = None) -> str:
    config = CURRENCIES[currency]
    places = config.decimals if decimals is None else decimals
    number = f"{parse_price(amount):.{places}f}"
    match config.placement:
        case Placement.PREFIX:
            return f"{config.symbol}{number}"
        case Placement.SUFFIX:
            return f"{number} {config.symbol}"


def format_price(amount: Amount, tenant: Tenant, decimals: int | None = None) -> str:
    """Format amount in the tenant's currency. Bad input formats as zero."""
    return format_amount(amount, tenant.currency, decimals)


def format_admin_price(eur: Amount, km: Amount = None) -> str:
    """Admin listing: EUR always, KM appended when positive."""
    eur_text = format_amount(eur, Currency.EUR)
    if parse_price(km) > 0:
        return f"{eur_text} / {format_amount(km, Currency.KM)}"
    return eur_text


def currency_symbol(tenant: Tenant) -> str:
    return CURRENCIES[tenant.currency].symbol


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


def tenant_price(price: ProductPrice, tenant: Tenant) -> float:
    """Unit price for the tenant: KM price for KM tenants when present, else EUR."""
    if tenant.currency is Currency.KM and price.km is not None:
        return price.km
    if price.eur is not None:
        return price.eur
    # KM-only product viewed by a EUR tenant; conversion is not this layer's job
    log.warning("missing_eur_price", km=price.km)
    return 0.0


def _is_finite(value: Amount) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return False
    return not (math.isnan(number) or math.isinf(number))


def calculate_total(unit_price: Amount, quantity: int | float | None) -> float:
    """unit_price × quantity, NaN and garbage treated as zero."""
    if not (_is_finite(unit_price) and _is_finite(quantity)):
        log.warning("invalid_total_input", unit_price=unit_price, quantity=quantity)
    return parse_price(unit_price) * parse_price(quantity)


__all__ = (
    "Amount",
    "ProductPrice",
    "parse_price",
    "parse_display",
    "format_amount",
    "format_price",
    "format_admin_price",
    "currency_symbol",
    "tenant_price",
    "calculate_total",
)
