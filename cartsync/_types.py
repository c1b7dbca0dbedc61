"""
Core types for cartsync.

Type aliases shared by the cache, the mutation coordinator and the
storefront services.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable
from enum import StrEnum

# ═══════════════════════════════════════════════════════════════════════════════
# Collection Keys
# ═══════════════════════════════════════════════════════════════════════════════


class Collection(StrEnum):
    """Well-known cache keys for server-derived collections."""

    CART = "cart"
    WALLET = "wallet"
    ORDERS = "orders"
    ALERTS = "alerts"


# ═══════════════════════════════════════════════════════════════════════════════
# Function Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Updater[T] = Callable[[T], T]
"""Pure function producing the speculative value from the current one."""

type Request[R] = Callable[[], Awaitable[R]]
"""Deferred network call. Not started until the coordinator awaits it."""

type Reconciler[T, R] = Callable[[T, R], T | None]
"""Merge a server response into the optimistic value. None keeps it as is."""

type Subscriber[T] = Callable[[str, T | None], None]
"""Cache change callback: (key, new value)."""

type Unsubscribe = Callable[[], None]

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Collection",
    "Updater",
    "Request",
    "Reconciler",
    "Subscriber",
    "Unsubscribe",
)
