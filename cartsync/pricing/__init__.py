"""
Pricing — tenant-aware price display and totals.

    from cartsync import pricing as P

    P.format_price(12.5, tenant)                 # "€12.50" or "12.50 KM"
    P.calculate_total("9.99", 3)                 # 29.97
    P.tenant_price(P.ProductPrice(eur=10, km=19.5), tenant)
"""

from __future__ import annotations

from cartsync.pricing._currency import (
    Placement,
    CurrencyConfig,
    CURRENCIES,
    Converter,
    EUR_TO_KM,
    fixed_rate,
)
from cartsync.pricing._format import (
    Amount,
    ProductPrice,
    parse_price,
    parse_display,
    format_amount,
    format_price,
    format_admin_price,
    currency_symbol,
    tenant_price,
    calculate_total,
)

__all__ = (
    "Placement",
    "CurrencyConfig",
    "CURRENCIES",
    "Converter",
    "EUR_TO_KM",
    "fixed_rate",
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
