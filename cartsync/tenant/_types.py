"""
Tenant types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Currency(StrEnum):
    """Currencies a tenant can price in."""

    EUR = "EUR"
    KM = "KM"


class TenantKind(StrEnum):
    ADMIN = "admin"
    EUR_SHOP = "eur-shop"
    KM_SHOP = "km-shop"


@dataclass(frozen=True, slots=True)
class Tenant:
    """
    Active tenant descriptor.

    Passed explicitly into every pricing call; nothing reads it from
    ambient route state.
    """

    kind: TenantKind
    currency: Currency

    @property
    def is_admin(self) -> bool:
        return self.kind is TenantKind.ADMIN

    @property
    def is_shop(self) -> bool:
        return self.kind is not TenantKind.ADMIN

    @classmethod
    def shop(cls, currency: Currency) -> Tenant:
        kind = TenantKind.KM_SHOP if currency is Currency.KM else TenantKind.EUR_SHOP
        return cls(kind, currency)

    @classmethod
    def admin(cls, currency: Currency = Currency.EUR) -> Tenant:
        return cls(TenantKind.ADMIN, currency)


__all__ = ("Currency", "TenantKind", "Tenant")
