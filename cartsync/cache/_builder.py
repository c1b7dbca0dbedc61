"""
Query builder — fluent API for read-through collections.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Awaitable
from dataclasses import dataclass
from datetime import timedelta

import structlog

from cartsync.cache._store import OptimisticCache
from cartsync.cache._types import CacheResult

log = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Fetch Function Type
# ═══════════════════════════════════════════════════════════════════════════════

type Fetch[T] = Callable[[], Awaitable[T]]


# ═══════════════════════════════════════════════════════════════════════════════
# Query Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class Query[T]:
    """
    Fluent query builder.

    Example:
        cart_query = (
            C.query("cart", api.get_cart)
            .fresh_for(seconds=30)
            .build(cache)
        )
    """

    _key: str
    _fetch: Fetch[T]
    _fresh_for: timedelta | None

    def fresh_for(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> Query[T]:
        """How long a fetched value is served without refetching."""
        window = delta if delta is not None else timedelta(seconds=seconds or 0)
        return Query(
            _key=self._key,
            _fetch=self._fetch,
            _fresh_for=window,
        )

    def build(self, cache: OptimisticCache) -> QueryExecutor[T]:
        """Bind to a cache."""
        return QueryExecutor(
            key=self._key,
            fetch=self._fetch,
            fresh_for=self._fresh_for,
            cache=cache,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Query Executor
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class QueryExecutor[T]:
    """Compiled query bound to one cache key."""

    key: str
    fetch: Fetch[T]
    fresh_for: timedelta | None
    cache: OptimisticCache

    async def get(self) -> CacheResult[T]:
        """
        Serve the cached value when fresh, otherwise fetch.

        While a mutation holds the key the optimistic value is served
        without fetching.
        """
        cache = self.cache
        max_age = self.fresh_for.total_seconds() if self.fresh_for is not None else None

        if cache.pending(self.key):
            return self._cached(optimistic=True)
        if cache.is_fresh(self.key, max_age):
            return self._cached(optimistic=False)
        return await self.refresh()

    async def refresh(self) -> CacheResult[T]:
        """
        Fetch unconditionally and store the result.

        The fetch is registered as a read of the key, so a mutation starting
        meanwhile cancels it; the caller then gets the cached value instead.
        Fetch errors propagate.
        """
        cache = self.cache
        if cache.pending(self.key):
            return self._cached(optimistic=True)

        read = asyncio.ensure_future(self.fetch())
        cache.track_read(self.key, read)
        try:
            value = await read
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            log.debug("read_superseded", key=self.key)
            return self._cached(optimistic=cache.pending(self.key))

        if not cache.seed(self.key, value):
            return self._cached(optimistic=True)
        return CacheResult(value=value, hit=False, optimistic=False, age=timedelta(0))

    def _cached(self, *, optimistic: bool) -> CacheResult[T]:
        age = self.cache.age(self.key)
        return CacheResult(
            value=self.cache.get(self.key),
            hit=True,
            optimistic=optimistic,
            age=timedelta(seconds=age) if age is not None else None,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# query() — Entry Point
# ═══════════════════════════════════════════════════════════════════════════════


def query[T](key: str, fetch: Fetch[T]) -> Query[T]:
    """
    Create a query builder for a collection key.

    Example:
        from cartsync import cache as C

        wallet = C.query("wallet", api.get_wallet).fresh_for(seconds=30).build(cache)
        result = await wallet.get()
    """
    return Query(
        _key=key,
        _fetch=fetch,
        _fresh_for=None,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("Fetch", "Query", "QueryExecutor", "query")
