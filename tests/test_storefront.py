"""Tests for session handling and navigation on the storefront."""

import asyncio

import httpx

from cartsync import Collection
from cartsync import mutation as M
from cartsync.api import UNAUTHORIZED, Session, User
from cartsync.tenant import Currency, Tenant

from support import item_json


def _hanging_patch(backend):
    async def hang(request):
        await asyncio.sleep(3600)
        return httpx.Response(200, json={})

    backend.route("PATCH", "/api/cart/item-1", handler=hang)


class TestSession:
    def test_loading_session_is_usable(self, session, make_shop, notifier, navigator):
        session.session = Session(is_loading=True)
        shop = make_shop()

        assert shop.sync_session()
        assert notifier.notifications == []
        assert navigator.redirects == []

    def test_authenticated_user_sets_tenant(self, session, make_shop):
        session.session = Session(user=User("u-2", tenant_id="km"), is_authenticated=True)
        shop = make_shop("/cart")

        assert shop.sync_session()
        assert shop.tenant == Tenant.shop(Currency.KM)

    def test_lost_session_cancels_notifies_and_redirects_once(
        self, backend, session, make_shop, notifier, navigator
    ):
        backend.route("GET", "/api/cart", json=[item_json("item-1", 2)])
        _hanging_patch(backend)
        shop = make_shop()

        async def scenario():
            await shop.cart.refresh()
            handle = shop.cart.update_quantity("item-1", 4)
            for _ in range(20):
                await asyncio.sleep(0)
            session.session = Session()
            first = shop.sync_session()
            second = shop.sync_session()
            return first, second, await handle

        first, second, result = asyncio.run(scenario())

        assert (first, second) == (False, False)
        assert result.state is M.MutationState.CANCELLED
        assert notifier.notifications == [UNAUTHORIZED]
        assert navigator.redirects == ["/auth"]
        assert shop.cache.entry(Collection.CART).stale

    def test_redirect_rearms_after_login(self, session, make_shop, navigator):
        shop = make_shop()
        session.session = Session()
        shop.sync_session()

        session.session = Session(user=User("u-1"), is_authenticated=True)
        shop.sync_session()
        session.session = Session()
        shop.sync_session()

        assert navigator.redirects == ["/auth", "/auth"]

    def test_logout(self, backend, session, make_shop):
        backend.route("GET", "/api/cart", json=[item_json("item-1", 2)])
        backend.route("DELETE", "/api/cart", status=204)
        shop = make_shop()

        async def scenario():
            await shop.cart.refresh()
            await shop.cart.clear_cart()
            await shop.logout()
            await shop.cart.clear_cart()

        asyncio.run(scenario())

        assert session.logouts == 1
        assert shop.cache.entry(Collection.CART).stale
        assert len(backend.calls("GET", "/api/csrf-token")) == 1


class TestNavigation:
    def test_navigate_resolves_tenant(self, make_shop):
        shop = make_shop("/cart")

        assert shop.navigate("/km/cart") == Tenant.shop(Currency.KM)
        assert shop.navigate("/admin") == Tenant.admin(Currency.EUR)

    def test_leaving_page_cancels_its_mutations(self, backend, make_shop, notifier):
        backend.route("GET", "/api/cart", json=[item_json("item-1", 2)])
        _hanging_patch(backend)
        shop = make_shop("/cart")

        async def scenario():
            await shop.cart.refresh()
            handle = shop.cart.update_quantity("item-1", 7)
            for _ in range(20):
                await asyncio.sleep(0)
            during = shop.cart.find("item-1").quantity
            shop.navigate("/checkout", leaving=(Collection.CART,))
            result = await handle
            return during, result

        during, result = asyncio.run(scenario())

        assert during == 7
        assert result.state is M.MutationState.CANCELLED
        assert not shop.coordinator.is_pending(Collection.CART)
        assert shop.cache.entry(Collection.CART).stale
        assert notifier.notifications == []

    def test_leave_page_without_pending_mutations(self, make_shop):
        assert make_shop().leave_page(Collection.CART, Collection.WALLET) == 0
