"""
Tenant — which customer segment (and currency) is active.

    from cartsync import tenant as T

    t = T.resolve("/km/cart")            # Tenant(kind=km-shop, currency=KM)
    resolver = T.TenantResolver("/cart")
    resolver.identify(user.tenant_id)
"""

from __future__ import annotations

from cartsync.tenant._types import Currency, TenantKind, Tenant
from cartsync.tenant._resolve import resolve, user_currency, TenantResolver, TenantListener

__all__ = (
    "Currency",
    "TenantKind",
    "Tenant",
    "resolve",
    "user_currency",
    "TenantResolver",
    "TenantListener",
)
