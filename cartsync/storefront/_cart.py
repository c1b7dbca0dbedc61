"""
Cart service — selectors and optimistic cart mutations.
"""

from __future__ import annotations

from dataclasses import replace

from cartsync import cache as C
from cartsync import mutation as M
from cartsync._types import Collection
from cartsync.api import Notification, StorefrontApi
from cartsync.domain import Cart, CartItem
from cartsync.pricing import format_price
from cartsync.tenant import TenantResolver

UPDATED = Notification("Updated", "Quantity updated successfully")
UPDATE_FAILED = Notification.error("Error", "Failed to update quantity. Please try again.")
REMOVE_FAILED = Notification.error("Error", "Failed to remove item. Please try again.")
CLEAR_FAILED = Notification.error("Error", "Failed to clear cart. Please try again.")


def find_item(items: Cart | None, item_id: str) -> CartItem | None:
    return next((item for item in items or () if item.id == item_id), None)


def with_quantity(items: Cart | None, item_id: str, quantity: int) -> Cart:
    return tuple(replace(item, quantity=quantity) if item.id == item_id else item for item in items or ())


def without_item(items: Cart | None, item_id: str) -> Cart:
    return tuple(item for item in items or () if item.id != item_id)


def with_server_item(items: Cart | None, server_item: CartItem | None) -> Cart | None:
    """Swap in the server's copy of a line. None keeps the optimistic cart."""
    if server_item is None:
        return None
    return tuple(server_item if item.id == server_item.id else item for item in items or ())


class CartService:
    """
    Cart state for the active tenant.

    Example:
        cart = CartService(api, cache, coordinator, tenants)
        await cart.refresh()
        cart.formatted_total          # "€59.97"
        result = await cart.update_quantity(item.id, 3)
    """

    def __init__(
        self,
        api: StorefrontApi,
        cache: C.OptimisticCache,
        coordinator: M.Coordinator,
        tenants: TenantResolver,
        *,
        fresh_seconds: float = 30.0,
    ) -> None:
        self._api = api
        self._cache = cache
        self._coordinator = coordinator
        self._tenants = tenants
        self._query = C.query(Collection.CART, api.get_cart).fresh_for(seconds=fresh_seconds).build(cache)

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def refresh(self, *, force: bool = False) -> Cart:
        result = await (self._query.refresh() if force else self._query.get())
        return result.value or ()

    @property
    def items(self) -> Cart:
        return self._cache.get(Collection.CART) or ()

    def find(self, item_id: str) -> CartItem | None:
        return find_item(self.items, item_id)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_amount(self) -> float:
        tenant = self._tenants.tenant
        return sum((item.line_total(tenant) for item in self.items), 0.0)

    @property
    def formatted_total(self) -> str:
        return format_price(self.total_amount, self._tenants.tenant)

    def line_total(self, item: CartItem) -> float:
        return item.line_total(self._tenants.tenant)

    def formatted_line_total(self, item: CartItem) -> str:
        return format_price(self.line_total(item), self._tenants.tenant)

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def update_quantity(self, item_id: str, quantity: int) -> M.MutationHandle[Cart]:
        """Set a line's quantity. 0 removes the line; unknown ids are a no-op."""
        if quantity == 0:
            return self.remove_item(item_id)

        def check(items: Cart | None) -> M.Verdict:
            if quantity < 0:
                return M.Skip(f"invalid quantity {quantity}")
            if find_item(items, item_id) is None:
                return M.Skip(f"no cart item {item_id}")
            return None

        return self._coordinator.submit(
            M.mutation(
                Collection.CART,
                "update_quantity",
                apply=lambda items: with_quantity(items, item_id, quantity),
                request=lambda: self._api.update_cart_item(item_id, quantity),
                reconcile=with_server_item,
                check=check,
                success=UPDATED,
                failure=UPDATE_FAILED,
            )
        )

    def remove_item(self, item_id: str) -> M.MutationHandle[Cart]:
        removed: list[CartItem] = []

        def check(items: Cart | None) -> M.Verdict:
            item = find_item(items, item_id)
            if item is None:
                return M.Skip(f"no cart item {item_id}")
            removed.append(item)
            return None

        return self._coordinator.submit(
            M.mutation(
                Collection.CART,
                "remove_item",
                apply=lambda items: without_item(items, item_id),
                request=lambda: self._api.remove_cart_item(item_id),
                check=check,
                success=lambda _: Notification("Removed", f"{removed[0].product.name} removed from cart"),
                failure=REMOVE_FAILED,
            )
        )

    def clear_cart(self) -> M.MutationHandle[Cart]:
        cleared: list[int] = []

        def check(items: Cart | None) -> M.Verdict:
            if not items:
                return M.Skip("cart is empty")
            cleared.append(len(items))
            return None

        return self._coordinator.submit(
            M.mutation(
                Collection.CART,
                "clear_cart",
                apply=lambda _: (),
                request=self._api.clear_cart,
                check=check,
                success=lambda _: Notification("Cart Cleared", f"{cleared[0]} items removed from cart"),
                failure=CLEAR_FAILED,
            )
        )


__all__ = (
    "CartService",
    "find_item",
    "with_quantity",
    "without_item",
    "with_server_item",
)
