"""
Storefront — the surface the UI consumes.

    from cartsync.storefront import Storefront

    shop = Storefront.from_settings(settings, session, notifier, navigator)
    await shop.cart.refresh()

    shop.cart.total_items                      # 3
    shop.cart.formatted_total                  # "59.97 KM"
    result = await shop.cart.update_quantity(item_id, 2)
    result = await shop.checkout.place_order(form)
"""

from __future__ import annotations

from cartsync.storefront._cart import CartService
from cartsync.storefront._wallet import WalletService
from cartsync.storefront._checkout import CheckoutService
from cartsync.storefront._alerts import AlertBoard
from cartsync.storefront._facade import Storefront

__all__ = (
    "CartService",
    "WalletService",
    "CheckoutService",
    "AlertBoard",
    "Storefront",
)
