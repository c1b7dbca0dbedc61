"""
Wallet — stored value plus credit line, used as a checkout payment method.

    from cartsync import wallet as W

    balance = W.WalletBalance(deposit_balance=20, credit_limit=100, credit_used=70)
    balance.total_available                       # 50.0
    W.has_insufficient_balance(balance, 75.0)     # True
"""

from __future__ import annotations

from cartsync.wallet._types import WalletBalance, WalletTransaction, Wallet
from cartsync.wallet._ops import has_insufficient_balance

__all__ = (
    "WalletBalance",
    "WalletTransaction",
    "Wallet",
    "has_insufficient_balance",
)
