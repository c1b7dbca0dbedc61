"""
Cart — optimistic quantity changes with rollback.

Level 3: cartsync.storefront (CartService)
Level 2: cartsync.mutation (Coordinator, MutationHandle)
Level 1: cartsync.cache (OptimisticCache)
"""

import asyncio

from examples._infra import FakeShopBackend, banner, run


async def main() -> None:
    backend = FakeShopBackend()
    backend.add("c-1", "Office 365 Business", 12.50, 24.45, quantity=2)
    backend.add("c-2", "Antivirus Pro", 29.90, 58.50)
    shop = backend.storefront("/cart")
    shop.sync_session()

    banner("Cart: load (KM tenant from user)")
    await shop.cart.refresh()
    for item in shop.cart.items:
        print(f"  {item.product.name} × {item.quantity} = {shop.cart.formatted_line_total(item)}")
    print(f"  total: {shop.cart.formatted_total}")

    banner("Cart: optimistic update")
    handle = shop.cart.update_quantity("c-1", 5)
    await asyncio.sleep(0)
    print(f"  shown now: {shop.cart.find('c-1').quantity} ({handle.status.value})")
    result = await handle
    print(f"  settled: {result.state.name}, total {shop.cart.formatted_total}")

    banner("Cart: server failure rolls back")
    backend.fail_next = 500
    result = await shop.cart.update_quantity("c-2", 9)
    print(f"  {result.state.name}: quantity back to {shop.cart.find('c-2').quantity}")

    banner("Cart: clear, then a stale update is a no-op")
    cleared = shop.cart.clear_cart()
    stale = shop.cart.update_quantity("c-1", 1)
    print(f"  clear: {(await cleared).state.name}, update: {(await stale).state.name}")

    await shop.aclose()


if __name__ == "__main__":
    run(main)
