"""
Cache types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum, auto

# ═══════════════════════════════════════════════════════════════════════════════
# Entry — Materialized Value
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Entry[T]:
    """
    Materialized value of one collection.

    version: monotonic write stamp, unique across the cache.
    optimistic: value is speculative (a mutation holds a snapshot).
    stale: value was invalidated and should be refetched before trusting it.
    """

    value: T
    version: int
    updated_at: float
    optimistic: bool = False
    stale: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot — Pre-Mutation State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Snapshot[T]:
    """
    Prior state of a collection, owned by exactly one in-flight mutation.

    entry is None when the collection had never been loaded.
    Values are never mutated in place (updaters return new values), so
    holding the prior entry is holding an immutable copy.
    """

    key: str
    owner: str
    entry: Entry[T] | None

    @property
    def value(self) -> T | None:
        return self.entry.value if self.entry is not None else None

    @property
    def version(self) -> int:
        return self.entry.version if self.entry is not None else 0


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheResult[T]:
    """Read result with metadata."""

    value: T | None
    hit: bool
    optimistic: bool = False
    age: timedelta | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CacheErrorKind(Enum):
    """Cache error kinds."""

    SNAPSHOT_HELD = auto()  # another mutation owns the key
    STALE_SNAPSHOT = auto()  # snapshot already committed, rolled back or released


class CacheError(Exception):
    """Cache operation error."""

    def __init__(self, kind: CacheErrorKind, key: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.key = key
        self.message = message


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Entry",
    "Snapshot",
    "CacheResult",
    "CacheError",
    "CacheErrorKind",
)
