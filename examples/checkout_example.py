"""
Checkout — local validation gate, draft order, cache invalidation.

Level 3: cartsync.storefront (CheckoutService, WalletService)
Level 2: cartsync.mutation (Check → Reject)
"""

from cartsync import Collection
from cartsync.domain import BillingInfo, CheckoutForm, PaymentMethod
from examples._infra import FakeShopBackend, banner, run

BILLING = BillingInfo(
    company_name="Acme d.o.o.",
    first_name="Amra",
    last_name="Hodžić",
    email="amra@acme.ba",
    phone="+387 33 000 000",
    address="Titova 1",
    city="Sarajevo",
    postal_code="71000",
    country="BA",
)


async def main() -> None:
    backend = FakeShopBackend(deposit=20.0, credit_limit=100.0, credit_used=70.0)
    backend.add("c-1", "Server Licence", 25.00, 48.90, quantity=3)
    shop = backend.storefront("/checkout")
    shop.sync_session()

    await shop.cart.refresh()
    await shop.wallet.refresh()
    totals = shop.checkout.totals()
    print(f"  total {shop.wallet.format(totals.total)}, wallet {shop.wallet.format(shop.wallet.total_available)}")

    banner("Checkout: wallet too low, nothing sent")
    result = await shop.checkout.place_order(CheckoutForm(BILLING, PaymentMethod.WALLET))
    print(f"  {result.state.name}: {result.failure.message}")

    banner("Checkout: bank transfer")
    result = await shop.checkout.place_order(CheckoutForm(BILLING, PaymentMethod.BANK_TRANSFER))
    order = result.value[0]
    print(f"  {result.state.name}: {order.order_number} ({order.status.value})")
    print(f"  cart stale: {shop.cache.entry(Collection.CART).stale}")

    await shop.cart.refresh()
    print(f"  cart after reload: {len(shop.cart.items)} items")

    await shop.aclose()


if __name__ == "__main__":
    run(main)
