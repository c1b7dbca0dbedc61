"""
Checkout service — local validation gate, provisional order, placement.
"""

from __future__ import annotations

import uuid

from cartsync import cache as C
from cartsync import mutation as M
from cartsync._types import Collection, Reconciler
from cartsync.api import Notification, StorefrontApi
from cartsync.domain import (
    DEFAULT_TAX_RATE,
    CheckoutForm,
    Order,
    Orders,
    OrderTotals,
    PaymentMethod,
)
from cartsync.storefront._cart import CartService
from cartsync.storefront._wallet import WalletService
from cartsync.tenant import TenantResolver

EMPTY_CART = Notification.error("Empty Cart", "Your cart is empty. Add some items to proceed.")
ORDER_FAILED = Notification.error("Order Failed", "Failed to place order. Please try again.")


def with_server_order(draft_id: str) -> Reconciler[Orders, Order]:
    """Reconciler: the server order replaces the draft."""

    def reconcile(orders: Orders | None, order: Order) -> Orders:
        current = orders or ()
        if not any(o.id == draft_id for o in current):
            return (order, *current)
        return tuple(order if o.id == draft_id else o for o in current)

    return reconcile


class CheckoutService:
    """
    Order placement.

    Empty cart and (for wallet payment) an insufficient balance are refused
    before anything changes: no request, one notification.
    """

    def __init__(
        self,
        api: StorefrontApi,
        cache: C.OptimisticCache,
        coordinator: M.Coordinator,
        tenants: TenantResolver,
        cart: CartService,
        wallet: WalletService,
        *,
        tax_rate: float = DEFAULT_TAX_RATE,
    ) -> None:
        self._api = api
        self._cache = cache
        self._coordinator = coordinator
        self._tenants = tenants
        self._cart = cart
        self._wallet = wallet
        self._tax_rate = tax_rate
        self._orders = C.query(Collection.ORDERS, api.get_orders).build(cache)

    async def orders(self, *, force: bool = False) -> Orders:
        result = await (self._orders.refresh() if force else self._orders.get())
        return result.value or ()

    def totals(self) -> OrderTotals:
        return OrderTotals.compute(self._cart.items, self._tenants.tenant, self._tax_rate)

    def validate(self, form: CheckoutForm) -> M.Reject | None:
        """Local gate. Returns the rejection, or None when the order may go out."""
        if not self._cart.items:
            return M.Reject(EMPTY_CART, "cart is empty")

        if form.payment_method is PaymentMethod.WALLET:
            total = self.totals().total
            if self._wallet.has_insufficient_balance(total):
                available = self._wallet.format(self._wallet.total_available)
                required = self._wallet.format(total)
                return M.Reject(
                    Notification.error(
                        "Insufficient Balance",
                        f"Your wallet balance ({available}) is insufficient for this order "
                        f"({required}). Please add funds or use another payment method.",
                    ),
                    "insufficient wallet balance",
                )
        return None

    def place_order(self, form: CheckoutForm) -> M.MutationHandle[Orders]:
        """
        Place an order from the current cart.

        A draft order is shown in the orders collection while the request
        runs; on success the server order replaces it and cart and wallet
        are marked stale.
        """
        draft_id = f"draft-{uuid.uuid4().hex[:12]}"

        def add_draft(orders: Orders | None) -> Orders:
            draft = Order.draft(draft_id, self._cart.items, form, self._tenants.tenant, self._tax_rate)
            return (draft, *(orders or ()))

        def placed(order: Order) -> Notification:
            return Notification("Order Placed Successfully", f"Your order #{order.order_number} has been placed")

        return self._coordinator.submit(
            M.mutation(
                Collection.ORDERS,
                "place_order",
                apply=add_draft,
                request=lambda: self._api.place_order(form),
                reconcile=with_server_order(draft_id),
                check=lambda _: self.validate(form),
                success=placed,
                failure=ORDER_FAILED,
                on_commit=lambda _: C.invalidate(self._cache, Collection.CART, Collection.WALLET),
            )
        )


__all__ = ("CheckoutService", "with_server_order", "EMPTY_CART", "ORDER_FAILED")
