"""
Optimistic cache — last-known-good collections with speculative overlays.

The cache is the only shared mutable state. Everything outside it goes
through snapshot / set_optimistic / commit / rollback (mutations) or
seed / invalidate (reads).
"""

from __future__ import annotations

import asyncio
import fnmatch
import itertools
import time
from collections.abc import Callable
from typing import Any

import structlog

from cartsync._types import Subscriber, Unsubscribe, Updater
from cartsync.cache._types import (
    Entry,
    Snapshot,
    CacheError,
    CacheErrorKind,
)

log = structlog.get_logger(__name__)


class OptimisticCache:
    """
    Key-value store of server-derived collections.

    Example:
        cache = OptimisticCache()
        cache.seed("cart", items)

        snap = cache.snapshot("cart", owner="remove#1")
        cache.set_optimistic("cart", lambda items: items[1:], snap)
        ...
        cache.commit("cart", server_items, snap)   # or
        cache.rollback("cart", snap)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, Entry[Any]] = {}
        self._snapshots: dict[str, Snapshot[Any]] = {}
        self._subscribers: dict[str, list[Subscriber[Any]]] = {}
        self._reads: dict[str, set[asyncio.Future[Any]]] = {}
        self._stamps = itertools.count(1)

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def entry(self, key: str) -> Entry[Any] | None:
        return self._entries.get(key)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def pending(self, key: str) -> bool:
        """True while a mutation holds a snapshot for key."""
        return key in self._snapshots

    def age(self, key: str) -> float | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._clock() - entry.updated_at

    def is_fresh(self, key: str, max_age: float | None) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.stale:
            return False
        if max_age is None:
            return True
        return self._clock() - entry.updated_at <= max_age

    def seed(self, key: str, value: Any) -> bool:
        """
        Store a server read result.

        Refused while a mutation holds the key: the read started before the
        mutation and its value may predate the speculative change.
        """
        if key in self._snapshots:
            log.debug("seed_refused", key=key, owner=self._snapshots[key].owner)
            return False
        self._write(key, value)
        return True

    # ───────────────────────────────────────────────────────────────────────────
    # Mutation Operations
    # ───────────────────────────────────────────────────────────────────────────

    def snapshot(self, key: str, owner: str) -> Snapshot[Any]:
        """Capture the current value for owner. One snapshot per key."""
        held = self._snapshots.get(key)
        if held is not None:
            raise CacheError(
                CacheErrorKind.SNAPSHOT_HELD,
                key,
                f"{key} is held by {held.owner}; {owner} must wait",
            )
        snap = Snapshot(key=key, owner=owner, entry=self._entries.get(key))
        self._snapshots[key] = snap
        log.debug("snapshot_taken", key=key, owner=owner, version=snap.version)
        return snap

    def set_optimistic(self, key: str, updater: Updater[Any], snapshot: Snapshot[Any]) -> Any:
        """Replace the value with updater(current). Returns the new value."""
        self._check_active(key, snapshot)
        value = updater(self.get(key))
        self._write(key, value, optimistic=True)
        return value

    def commit(self, key: str, server_value: Any, snapshot: Snapshot[Any]) -> None:
        """Authoritative value replaces the optimistic one. Snapshot discarded."""
        self._check_active(key, snapshot)
        del self._snapshots[key]
        self._write(key, server_value)

    def rollback(self, key: str, snapshot: Snapshot[Any]) -> Any | None:
        """Restore the pre-mutation entry verbatim. Returns the restored value."""
        self._check_active(key, snapshot)
        del self._snapshots[key]
        if snapshot.entry is None:
            self._entries.pop(key, None)
        else:
            self._entries[key] = snapshot.entry
        self._notify(key, snapshot.value)
        return snapshot.value

    def release(self, snapshot: Snapshot[Any]) -> None:
        """
        Drop a snapshot without writing (cancelled mutation).

        The current value stays but is marked stale so the next read
        refetches the authoritative state.
        """
        self._check_active(snapshot.key, snapshot)
        del self._snapshots[snapshot.key]
        self.invalidate(snapshot.key)

    # ───────────────────────────────────────────────────────────────────────────
    # Invalidation
    # ───────────────────────────────────────────────────────────────────────────

    def invalidate(self, key: str) -> bool:
        """Mark key stale. Returns True if it existed."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        self._entries[key] = Entry(
            value=entry.value,
            version=entry.version,
            updated_at=entry.updated_at,
            optimistic=entry.optimistic,
            stale=True,
        )
        return True

    def invalidate_pattern(self, pattern: str) -> int:
        keys = [k for k in self._entries if fnmatch.fnmatch(k, pattern)]
        for key in keys:
            self.invalidate(key)
        return len(keys)

    # ───────────────────────────────────────────────────────────────────────────
    # Reads in flight
    # ───────────────────────────────────────────────────────────────────────────

    def track_read(self, key: str, read: asyncio.Future[Any]) -> None:
        reads = self._reads.setdefault(key, set())
        reads.add(read)
        read.add_done_callback(reads.discard)

    def cancel_reads(self, key: str) -> int:
        """Cancel outstanding fetches for key. Returns how many were cancelled."""
        cancelled = 0
        for read in tuple(self._reads.get(key, ())):
            if not read.done() and read.cancel():
                cancelled += 1
        if cancelled:
            log.debug("reads_cancelled", key=key, count=cancelled)
        return cancelled

    # ───────────────────────────────────────────────────────────────────────────
    # Subscriptions
    # ───────────────────────────────────────────────────────────────────────────

    def subscribe(self, key: str, callback: Subscriber[Any]) -> Unsubscribe:
        """Call callback(key, value) synchronously on every change of key."""
        subscribers = self._subscribers.setdefault(key, [])
        subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    def _check_active(self, key: str, snapshot: Snapshot[Any]) -> None:
        if self._snapshots.get(key) is not snapshot:
            raise CacheError(
                CacheErrorKind.STALE_SNAPSHOT,
                key,
                f"snapshot of {key} by {snapshot.owner} is no longer active",
            )

    def _write(self, key: str, value: Any, *, optimistic: bool = False) -> None:
        self._entries[key] = Entry(
            value=value,
            version=next(self._stamps),
            updated_at=self._clock(),
            optimistic=optimistic,
        )
        self._notify(key, value)

    def _notify(self, key: str, value: Any) -> None:
        for callback in tuple(self._subscribers.get(key, ())):
            try:
                callback(key, value)
            except Exception:
                # A broken subscriber must not leave the cache half-updated
                log.exception("subscriber_failed", key=key)


__all__ = ("OptimisticCache",)
