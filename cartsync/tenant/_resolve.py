"""
Tenant resolution — route and user state to a Tenant descriptor.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from cartsync.tenant._types import Currency, Tenant

log = structlog.get_logger(__name__)

ADMIN_PREFIXES = ("/admin",)
KM_PREFIXES = ("/shop/km", "/km")
EUR_PREFIXES = ("/shop/eur", "/eur")

type TenantListener = Callable[[Tenant], None]


def _has_prefix(path: str, prefixes: tuple[str, ...]) -> bool:
    # "/kmx" is not a KM route, "/km" and "/km/cart" are
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def user_currency(user_tenant: str | None) -> Currency | None:
    """Currency of a user's assigned tenant id ("km" or anything else)."""
    if not user_tenant:
        return None
    return Currency.KM if user_tenant.lower() == "km" else Currency.EUR


# ═══════════════════════════════════════════════════════════════════════════════
# resolve() — Pure
# ═══════════════════════════════════════════════════════════════════════════════


def resolve(
    path: str,
    user_tenant: str | None = None,
    *,
    admin_currency: Currency | None = None,
    default: Currency = Currency.EUR,
) -> Tenant:
    """
    Resolve the active tenant.

    Order: admin path prefix → explicit shop path prefix → user's assigned
    tenant → default currency.

    Example:
        resolve("/admin/orders", "km")       # admin, KM
        resolve("/km/cart")                  # km-shop
        resolve("/cart", "km")               # km-shop (from user)
        resolve("/cart")                     # eur-shop (default)
    """
    path = path or "/"
    assigned = user_currency(user_tenant)

    if _has_prefix(path, ADMIN_PREFIXES):
        return Tenant.admin(admin_currency or assigned or default)
    if _has_prefix(path, KM_PREFIXES):
        return Tenant.shop(Currency.KM)
    if _has_prefix(path, EUR_PREFIXES):
        return Tenant.shop(Currency.EUR)
    if assigned is not None:
        return Tenant.shop(assigned)
    return Tenant.shop(default)


# ═══════════════════════════════════════════════════════════════════════════════
# TenantResolver — Re-resolves on navigation and identity changes
# ═══════════════════════════════════════════════════════════════════════════════


class TenantResolver:
    """
    Holds the current path and user tenant and keeps the descriptor current.

    Example:
        resolver = TenantResolver("/cart")
        resolver.subscribe(lambda t: print(t.currency))
        resolver.identify("km")      # user loaded later → KM
        resolver.navigate("/admin")  # admin keeps the user's currency
    """

    def __init__(
        self,
        path: str = "/",
        user_tenant: str | None = None,
        *,
        default: Currency = Currency.EUR,
    ) -> None:
        self._path = path
        self._user_tenant = user_tenant
        self._default = default
        self._admin_currency: Currency | None = None
        self._listeners: list[TenantListener] = []
        self._tenant = self._resolve()

    @property
    def tenant(self) -> Tenant:
        return self._tenant

    @property
    def path(self) -> str:
        return self._path

    def subscribe(self, listener: TenantListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def navigate(self, path: str) -> Tenant:
        self._path = path
        return self._update()

    def identify(self, user_tenant: str | None) -> Tenant:
        self._user_tenant = user_tenant
        return self._update()

    def switch_currency(self, currency: Currency) -> Tenant:
        """Admins may switch display currency; shop tenants ignore this."""
        if not self._tenant.is_admin:
            log.info("currency_switch_ignored", kind=self._tenant.kind.value, currency=currency.value)
            return self._tenant
        self._admin_currency = currency
        return self._update()

    def _resolve(self) -> Tenant:
        return resolve(
            self._path,
            self._user_tenant,
            admin_currency=self._admin_currency,
            default=self._default,
        )

    def _update(self) -> Tenant:
        tenant = self._resolve()
        if tenant != self._tenant:
            self._tenant = tenant
            log.debug("tenant_changed", kind=tenant.kind.value, currency=tenant.currency.value)
            for listener in tuple(self._listeners):
                listener(tenant)
        return self._tenant


__all__ = ("resolve", "user_currency", "TenantResolver", "TenantListener")
