"""
Storefront — wires cache, coordinator and services for one client session.
"""

from __future__ import annotations

import httpx
import structlog

from cartsync import cache as C
from cartsync import mutation as M
from cartsync._types import Collection
from cartsync.api import (
    UNAUTHORIZED,
    ApiClient,
    LogNotifier,
    Navigator,
    Notifier,
    SessionProvider,
    StorefrontApi,
)
from cartsync.config import Settings
from cartsync.storefront._alerts import AlertBoard
from cartsync.storefront._cart import CartService
from cartsync.storefront._checkout import CheckoutService
from cartsync.storefront._wallet import WalletService
from cartsync.tenant import Tenant, TenantResolver

log = structlog.get_logger(__name__)


class Storefront:
    """
    One client session of the storefront.

    Example:
        shop = Storefront.from_settings(load_settings(), session, notifier, navigator)
        shop.sync_session()
        await shop.cart.refresh()
        handle = shop.cart.update_quantity(item_id, 3)
        ...
        shop.navigate("/checkout", leaving=(Collection.CART,))
    """

    def __init__(
        self,
        api: StorefrontApi,
        session: SessionProvider,
        notifier: Notifier,
        navigator: Navigator | None = None,
        *,
        settings: Settings | None = None,
        path: str = "/",
    ) -> None:
        settings = settings or Settings()
        self.settings = settings
        self.api = api
        self._session = session
        self._notifier = notifier
        self._navigator = navigator
        self._redirected = False

        self.cache = C.OptimisticCache()
        self.tenants = TenantResolver(path, default=settings.default_currency)
        self.coordinator = M.Coordinator(
            self.cache,
            notifier,
            navigator,
            login_path=settings.login_path,
            timeout=settings.timeout,
        )
        self.wallet = WalletService(api, self.cache, self.tenants, fresh_seconds=settings.wallet_fresh_seconds)
        self.cart = CartService(
            api,
            self.cache,
            self.coordinator,
            self.tenants,
            fresh_seconds=settings.cart_fresh_seconds,
        )
        self.checkout = CheckoutService(
            api,
            self.cache,
            self.coordinator,
            self.tenants,
            self.cart,
            self.wallet,
            tax_rate=settings.tax_rate,
        )
        self.alerts = AlertBoard(api, self.cache)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: SessionProvider,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        path: str = "/",
    ) -> Storefront:
        client = ApiClient(settings.api_url, timeout=settings.timeout, transport=transport)
        return cls(
            StorefrontApi(client),
            session,
            notifier or LogNotifier(),
            navigator,
            settings=settings,
            path=path,
        )

    @property
    def tenant(self) -> Tenant:
        return self.tenants.tenant

    # ───────────────────────────────────────────────────────────────────────────
    # Session
    # ───────────────────────────────────────────────────────────────────────────

    def sync_session(self) -> bool:
        """
        Follow the session provider.

        Loaded user: re-identify the tenant. Not authenticated: cancel all
        pending mutations, notify once and redirect to login. Returns True
        while the session is usable.
        """
        session = self._session.session
        if session.is_loading:
            return True

        if session.is_authenticated:
            self._redirected = False
            if session.user is not None:
                self.tenants.identify(session.user.tenant_id)
            return True

        if not self._redirected:
            self._redirected = True
            cancelled = self.coordinator.cancel_all()
            log.info("session_lost", cancelled=cancelled)
            self._notifier.notify(UNAUTHORIZED)
            if self._navigator is not None:
                self._navigator.redirect(self.settings.login_path)
        return False

    async def logout(self) -> None:
        self.coordinator.cancel_all()
        await self._session.logout()
        self.api.client.forget_csrf()
        C.invalidate_pattern(self.cache, "*")

    # ───────────────────────────────────────────────────────────────────────────
    # Navigation
    # ───────────────────────────────────────────────────────────────────────────

    def navigate(self, path: str, *, leaving: tuple[Collection | str, ...] = ()) -> Tenant:
        """Move to path. Mutations of the collections in leaving are cancelled."""
        if leaving:
            self.leave_page(*leaving)
        return self.tenants.navigate(path)

    def leave_page(self, *keys: Collection | str) -> int:
        return self.coordinator.cancel(*keys)

    async def aclose(self) -> None:
        self.coordinator.cancel_all()
        await self.api.client.aclose()


__all__ = ("Storefront",)
