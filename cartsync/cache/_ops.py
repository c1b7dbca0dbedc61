"""
Cache operations — standalone utilities.
"""

from __future__ import annotations

import structlog

from cartsync.cache._store import OptimisticCache

log = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# invalidate() — Keys
# ═══════════════════════════════════════════════════════════════════════════════


def invalidate(cache: OptimisticCache, *keys: str) -> int:
    """
    Mark keys stale so the next read refetches them.

    Example:
        C.invalidate(cache, "cart", "wallet")

    Returns:
        Number of keys that existed
    """
    count = sum(1 for key in keys if cache.invalidate(key))
    log.debug("invalidated", keys=keys, count=count)
    return count


# ═══════════════════════════════════════════════════════════════════════════════
# invalidate_pattern() — Pattern Match
# ═══════════════════════════════════════════════════════════════════════════════


def invalidate_pattern(cache: OptimisticCache, pattern: str) -> int:
    """
    Mark all keys matching a glob pattern stale.

    Example:
        count = C.invalidate_pattern(cache, "wallet*")
    """
    count = cache.invalidate_pattern(pattern)
    log.debug("invalidated_pattern", pattern=pattern, count=count)
    return count


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("invalidate", "invalidate_pattern")
