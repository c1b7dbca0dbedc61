"""
Typed storefront endpoints.
"""

from __future__ import annotations

from typing import Any

import structlog

from cartsync.alerts import Alert
from cartsync.api._client import ApiClient
from cartsync.api._schemas import (
    AlertWire,
    CartItemWire,
    OrderRequestWire,
    OrderWire,
    WalletWire,
)
from cartsync.domain import Cart, CartItem, CheckoutForm, Order, Orders
from cartsync.wallet import Wallet

log = structlog.get_logger(__name__)


def _items(payload: Any) -> list[Any]:
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("data") or payload.get("items") or []
    return list(payload)


class StorefrontApi:
    """
    Storefront REST endpoints returning domain values.

    Example:
        api = StorefrontApi(ApiClient(settings.api_url, timeout=settings.timeout))
        cart = await api.get_cart()
        item = await api.update_cart_item(cart[0].id, 3)
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    # ───────────────────────────────────────────────────────────────────────────
    # Cart
    # ───────────────────────────────────────────────────────────────────────────

    async def get_cart(self) -> Cart:
        payload = await self.client.get("/api/cart")
        return tuple(CartItemWire.model_validate(item).to_domain() for item in _items(payload))

    async def update_cart_item(self, item_id: str, quantity: int) -> CartItem | None:
        """PATCH the quantity. Returns the updated line when the server echoes it."""
        payload = await self.client.patch(f"/api/cart/{item_id}", {"quantity": quantity})
        if not isinstance(payload, dict) or "product" not in payload:
            return None
        return CartItemWire.model_validate(payload).to_domain()

    async def remove_cart_item(self, item_id: str) -> None:
        await self.client.delete(f"/api/cart/{item_id}")

    async def clear_cart(self) -> None:
        await self.client.delete("/api/cart")

    # ───────────────────────────────────────────────────────────────────────────
    # Wallet
    # ───────────────────────────────────────────────────────────────────────────

    async def get_wallet(self) -> Wallet:
        payload = await self.client.get("/api/wallet")
        return WalletWire.model_validate(payload).to_domain()

    # ───────────────────────────────────────────────────────────────────────────
    # Orders
    # ───────────────────────────────────────────────────────────────────────────

    async def place_order(self, form: CheckoutForm) -> Order:
        payload = await self.client.post("/api/orders", OrderRequestWire.from_form(form).to_json())
        order = OrderWire.model_validate(payload).to_domain()
        log.info("order_placed", order_id=order.id, order_number=order.order_number)
        return order

    async def get_orders(self) -> Orders:
        payload = await self.client.get("/api/orders")
        return tuple(OrderWire.model_validate(order).to_domain() for order in _items(payload))

    # ───────────────────────────────────────────────────────────────────────────
    # Alerts
    # ───────────────────────────────────────────────────────────────────────────

    async def get_alerts(self) -> tuple[Alert, ...]:
        payload = await self.client.get("/api/alerts/recent")
        return tuple(AlertWire.model_validate(alert).to_domain() for alert in _items(payload))


__all__ = ("StorefrontApi",)
