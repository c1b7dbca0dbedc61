"""Fakes and factories shared by the tests."""

from __future__ import annotations

import inspect
import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from cartsync.api import Notification, Session, User
from cartsync.domain import CartItem, ProductSnapshot
from cartsync.pricing import ProductPrice

type Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


# Collaborators


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]


class FakeNavigator:
    def __init__(self) -> None:
        self.redirects: list[str] = []

    def redirect(self, path: str) -> None:
        self.redirects.append(path)


class FakeSession:
    def __init__(self, session: Session | None = None) -> None:
        self.session = session or Session(user=User("user-1", tenant_id="eur"), is_authenticated=True)
        self.logouts = 0

    async def logout(self) -> None:
        self.logouts += 1
        self.session = Session()


# Domain factories


def make_item(
    item_id: str = "item-1",
    quantity: int = 2,
    *,
    eur: float | None = 10.0,
    km: float | None = None,
    name: str = "Widget",
) -> CartItem:
    return CartItem(
        id=item_id,
        user_id="user-1",
        product_id=f"prod-{item_id}",
        quantity=quantity,
        product=ProductSnapshot(id=f"prod-{item_id}", name=name, price=ProductPrice(eur=eur, km=km), stock_count=5),
    )


def item_json(
    item_id: str = "item-1",
    quantity: int = 2,
    *,
    price: str = "10.00",
    price_km: str | None = None,
    name: str = "Widget",
) -> dict[str, Any]:
    product: dict[str, Any] = {"id": f"prod-{item_id}", "name": name, "price": price, "stockCount": 5}
    if price_km is not None:
        product["priceKm"] = price_km
    return {
        "id": item_id,
        "userId": "user-1",
        "productId": f"prod-{item_id}",
        "quantity": quantity,
        "product": product,
    }


def wallet_json(deposit: str = "0.00", limit: str = "0.00", used: str = "0.00") -> dict[str, Any]:
    return {
        "id": "wallet-1",
        "userId": "user-1",
        "balance": {
            "depositBalance": deposit,
            "creditLimit": limit,
            "creditUsed": used,
            # stale derived copies, must be ignored
            "availableCredit": "999.00",
            "totalAvailable": "999.00",
            "isOverlimit": True,
        },
        "recentTransactions": [],
    }


# Backend


class FakeBackend:
    """
    Route table behind httpx.MockTransport.

    Unrouted requests get 404. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []
        self.route("GET", "/api/csrf-token", json={"csrfToken": "csrf-123"})

    def route(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        status: int = 200,
        handler: Handler | None = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request, json: Any = json, status: int = status) -> httpx.Response:
                if json is None:
                    return httpx.Response(status)
                return httpx.Response(status, json=json)

        self.routes[(method, path)] = handler

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"no route {request.method} {request.url.path}"})
        response = handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def body(request: httpx.Request) -> Any:
    return json.loads(request.content)
