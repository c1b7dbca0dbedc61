"""
Wallet types.

Derived balance fields are properties: they are recomputed from the three
stored amounts on every read and can never drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class WalletBalance:
    deposit_balance: float = 0.0
    credit_limit: float = 0.0
    credit_used: float = 0.0

    def __post_init__(self) -> None:
        if self.deposit_balance < 0:
            raise ValueError("deposit balance cannot be negative")
        if self.credit_limit < 0:
            raise ValueError("credit limit cannot be negative")
        if self.credit_used < 0:
            raise ValueError("credit used cannot be negative")

    @property
    def available_credit(self) -> float:
        return max(0.0, self.credit_limit - self.credit_used)

    @property
    def total_available(self) -> float:
        return self.deposit_balance + self.available_credit

    @property
    def is_overlimit(self) -> bool:
        return self.credit_used > self.credit_limit


@dataclass(frozen=True, slots=True)
class WalletTransaction:
    id: str
    type: str
    amount: float
    description: str
    created_at: datetime
    balance_after: float
    order_id: str | None = None


@dataclass(frozen=True, slots=True)
class Wallet:
    id: str
    user_id: str
    balance: WalletBalance
    recent_transactions: tuple[WalletTransaction, ...] = ()


__all__ = ("WalletBalance", "WalletTransaction", "Wallet")
