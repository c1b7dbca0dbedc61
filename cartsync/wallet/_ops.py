"""
Wallet checks.
"""

from __future__ import annotations

from cartsync.wallet._types import Wallet, WalletBalance


def has_insufficient_balance(wallet: Wallet | WalletBalance | None, required: float) -> bool:
    """
    True when the wallet cannot cover `required`.

    Compared in cents. An unknown wallet (not loaded yet) is always
    insufficient.
    """
    if wallet is None:
        return True
    balance = wallet.balance if isinstance(wallet, Wallet) else wallet
    return round(balance.total_available, 2) < round(required, 2)


__all__ = ("has_insufficient_balance",)
