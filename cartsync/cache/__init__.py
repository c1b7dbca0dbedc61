"""
Cache — optimistic collections with snapshot and rollback.

    from cartsync import cache as C

    cache = C.OptimisticCache()
    cart = C.query("cart", api.get_cart).fresh_for(seconds=30).build(cache)
    result = await cart.get()
"""

from __future__ import annotations

from cartsync.cache._types import (
    Entry,
    Snapshot,
    CacheResult,
    CacheError,
    CacheErrorKind,
)
from cartsync.cache._store import OptimisticCache
from cartsync.cache._builder import Fetch, query, Query, QueryExecutor
from cartsync.cache._ops import invalidate, invalidate_pattern

__all__ = (
    "Entry",
    "Snapshot",
    "CacheResult",
    "CacheError",
    "CacheErrorKind",
    "OptimisticCache",
    "Fetch",
    "query",
    "Query",
    "QueryExecutor",
    "invalidate",
    "invalidate_pattern",
)
