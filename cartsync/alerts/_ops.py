"""
Alert filtering and aggregation. Pure functions over alert sequences.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from cartsync.alerts._types import ALL, Alert, AlertFilter, AlertSummary, Severity

# ═══════════════════════════════════════════════════════════════════════════════
# filter_alerts()
# ═══════════════════════════════════════════════════════════════════════════════


def _matches(alert: Alert, criteria: AlertFilter, needle: str) -> bool:
    if needle and needle not in alert.message.lower() and needle not in alert.category.lower():
        return False
    if criteria.severity != ALL and alert.level != criteria.severity:
        return False
    if criteria.category != ALL and alert.category != criteria.category:
        return False
    return True


def filter_alerts(alerts: Iterable[Alert], criteria: AlertFilter = AlertFilter()) -> tuple[Alert, ...]:
    """
    Keep alerts matching all criteria, in their original order.

    Example:
        critical = filter_alerts(alerts, AlertFilter(severity="critical"))
        hits = filter_alerts(alerts, AlertFilter(search_text="login"))
    """
    needle = criteria.search_text.strip().lower()
    return tuple(alert for alert in alerts if _matches(alert, criteria, needle))


# ═══════════════════════════════════════════════════════════════════════════════
# summarize()
# ═══════════════════════════════════════════════════════════════════════════════


def summarize(alerts: Iterable[Alert]) -> AlertSummary:
    unresolved: Counter[Severity] = Counter()
    resolved = 0
    for alert in alerts:
        if alert.resolved:
            resolved += 1
        else:
            unresolved[alert.level] += 1

    return AlertSummary(
        critical=unresolved[Severity.CRITICAL],
        warning=unresolved[Severity.WARNING],
        info=unresolved[Severity.INFO],
        resolved=resolved,
        active=sum(unresolved.values()),
    )


def categories(alerts: Iterable[Alert]) -> tuple[str, ...]:
    """Distinct categories in first-seen order."""
    return tuple(dict.fromkeys(alert.category for alert in alerts))


# ═══════════════════════════════════════════════════════════════════════════════
# time_ago()
# ═══════════════════════════════════════════════════════════════════════════════


def time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """
    Relative age: "Just now", "5m ago", "3h ago", "2d ago".

    Naive datetimes are taken as UTC.
    """
    now = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    minutes = int((now - timestamp).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    return f"{minutes // 1440}d ago"


def by_newest(alerts: Sequence[Alert]) -> tuple[Alert, ...]:
    return tuple(sorted(alerts, key=lambda alert: alert.timestamp, reverse=True))


__all__ = ("filter_alerts", "summarize", "categories", "time_ago", "by_newest")
