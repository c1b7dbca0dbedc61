"""
Alert board — cached alerts with filtering and summary.
"""

from __future__ import annotations

from cartsync import alerts as A
from cartsync import cache as C
from cartsync._types import Collection
from cartsync.api import StorefrontApi


class AlertBoard:
    def __init__(self, api: StorefrontApi, cache: C.OptimisticCache, *, fresh_seconds: float = 30.0) -> None:
        self._cache = cache
        self._query = C.query(Collection.ALERTS, api.get_alerts).fresh_for(seconds=fresh_seconds).build(cache)

    async def refresh(self, *, force: bool = False) -> tuple[A.Alert, ...]:
        result = await (self._query.refresh() if force else self._query.get())
        return result.value or ()

    @property
    def alerts(self) -> tuple[A.Alert, ...]:
        return self._cache.get(Collection.ALERTS) or ()

    def visible(self, criteria: A.AlertFilter = A.AlertFilter()) -> tuple[A.Alert, ...]:
        return A.filter_alerts(self.alerts, criteria)

    def summary(self) -> A.AlertSummary:
        return A.summarize(self.alerts)

    def categories(self) -> tuple[str, ...]:
        return A.categories(self.alerts)


__all__ = ("AlertBoard",)
