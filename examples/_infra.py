"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import itertools
import json
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from cartsync import configure_logging
from cartsync.api import Notification, Session, User
from cartsync.config import Settings, load_settings
from cartsync.storefront import Storefront


# Collaborators
class PrintNotifier:
    def notify(self, notification: Notification) -> None:
        mark = "✗" if notification.variant.value == "destructive" else "✓"
        print(f"  {mark} toast: {notification.title}: {notification.description}")


class PrintNavigator:
    def redirect(self, path: str) -> None:
        print(f"  → redirect {path}")


@dataclass(slots=True)
class StaticSession:
    session: Session = field(
        default_factory=lambda: Session(user=User("user-1", "buyer@acme.ba", tenant_id="km"), is_authenticated=True)
    )

    async def logout(self) -> None:
        self.session = Session()


# Fake backend
@dataclass(slots=True)
class FakeShopBackend:
    """In-memory storefront API behind httpx.MockTransport."""

    cart: dict[str, dict[str, Any]] = field(default_factory=dict)
    deposit: float = 40.0
    credit_limit: float = 100.0
    credit_used: float = 70.0
    fail_next: int | None = None
    latency: float = 0.05
    _orders: itertools.count = field(default_factory=lambda: itertools.count(1001))

    def add(self, item_id: str, name: str, price: float, price_km: float, quantity: int = 1) -> None:
        self.cart[item_id] = {
            "id": item_id,
            "userId": "user-1",
            "productId": f"p-{item_id}",
            "quantity": quantity,
            "product": {"id": f"p-{item_id}", "name": name, "price": f"{price:.2f}", "priceKm": f"{price_km:.2f}"},
        }

    async def handle(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(self.latency)
        method, path = request.method, request.url.path

        if method != "GET" and self.fail_next is not None:
            status, self.fail_next = self.fail_next, None
            return httpx.Response(status, json={"message": "Simulated failure"})

        match method, path.split("/")[2:]:
            case "GET", ["csrf-token"]:
                return httpx.Response(200, json={"csrfToken": "demo-token"})
            case "GET", ["cart"]:
                return httpx.Response(200, json=list(self.cart.values()))
            case "DELETE", ["cart"]:
                self.cart.clear()
                return httpx.Response(204)
            case "PATCH", ["cart", item_id] if item_id in self.cart:
                self.cart[item_id]["quantity"] = json.loads(request.content)["quantity"]
                return httpx.Response(200, json=self.cart[item_id])
            case "DELETE", ["cart", item_id] if item_id in self.cart:
                del self.cart[item_id]
                return httpx.Response(204)
            case "GET", ["wallet"]:
                balance = {
                    "depositBalance": self.deposit,
                    "creditLimit": self.credit_limit,
                    "creditUsed": self.credit_used,
                }
                return httpx.Response(200, json={"id": "w-1", "userId": "user-1", "balance": balance})
            case "POST", ["orders"]:
                number = f"ORD-{next(self._orders)}"
                self.cart.clear()
                return httpx.Response(201, json={"id": number.lower(), "orderNumber": number, "status": "pending"})
        return httpx.Response(404, json={"message": f"no route {method} {path}"})

    def storefront(self, path: str = "/", settings: Settings | None = None) -> Storefront:
        return Storefront.from_settings(
            settings or Settings(api_url="http://shop.demo", tax_rate=0.17),
            StaticSession(),
            PrintNotifier(),
            PrintNavigator(),
            transport=httpx.MockTransport(self.handle),
            path=path,
        )


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_json)
    asyncio.run(main())
