"""
Currency display configuration and conversion.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from cartsync.tenant import Currency


class Placement(Enum):
    PREFIX = auto()  # €12.50
    SUFFIX = auto()  # 12.50 KM


@dataclass(frozen=True, slots=True)
class CurrencyConfig:
    code: Currency
    symbol: str
    name: str
    placement: Placement
    decimals: int = 2


CURRENCIES: dict[Currency, CurrencyConfig] = {
    Currency.EUR: CurrencyConfig(Currency.EUR, "€", "Euro", Placement.PREFIX),
    Currency.KM: CurrencyConfig(
        Currency.KM,
        "KM",
        "Bosnia and Herzegovina Convertible Mark",
        Placement.SUFFIX,
    ),
}


# ═══════════════════════════════════════════════════════════════════════════════
# Conversion — supplied by a collaborator, fixed-rate default
# ═══════════════════════════════════════════════════════════════════════════════

type Converter = Callable[[float, Currency, Currency], float]
"""(amount, source, target) -> amount in target currency."""

EUR_TO_KM = 1.96


def fixed_rate(rate: float = EUR_TO_KM) -> Converter:
    """
    Converter with one fixed EUR→KM rate, rounded to cents.

    Example:
        convert = fixed_rate()
        convert(10.0, Currency.EUR, Currency.KM)  # 19.6
    """

    def convert(amount: float, source: Currency, target: Currency) -> float:
        if source is target:
            return amount
        if source is Currency.EUR:
            return round(amount * rate, 2)
        return round(amount / rate, 2)

    return convert


__all__ = (
    "Placement",
    "CurrencyConfig",
    "CURRENCIES",
    "Converter",
    "EUR_TO_KM",
    "fixed_rate",
)
