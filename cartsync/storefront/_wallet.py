"""
Wallet service — cached wallet and the balance gate.
"""

from __future__ import annotations

from cartsync import cache as C
from cartsync._types import Collection
from cartsync.api import StorefrontApi
from cartsync.pricing import format_price
from cartsync.tenant import TenantResolver
from cartsync.wallet import Wallet, WalletBalance, has_insufficient_balance


class WalletService:
    def __init__(
        self,
        api: StorefrontApi,
        cache: C.OptimisticCache,
        tenants: TenantResolver,
        *,
        fresh_seconds: float = 30.0,
    ) -> None:
        self._cache = cache
        self._tenants = tenants
        self._query = C.query(Collection.WALLET, api.get_wallet).fresh_for(seconds=fresh_seconds).build(cache)

    async def refresh(self, *, force: bool = False) -> Wallet | None:
        result = await (self._query.refresh() if force else self._query.get())
        return result.value

    @property
    def wallet(self) -> Wallet | None:
        return self._cache.get(Collection.WALLET)

    @property
    def balance(self) -> WalletBalance | None:
        wallet = self.wallet
        return wallet.balance if wallet is not None else None

    @property
    def total_available(self) -> float:
        balance = self.balance
        return balance.total_available if balance is not None else 0.0

    def has_insufficient_balance(self, required: float) -> bool:
        """True when the wallet is unknown or cannot cover required."""
        return has_insufficient_balance(self.wallet, required)

    def format(self, amount: float) -> str:
        return format_price(amount, self._tenants.tenant)


__all__ = ("WalletService",)
