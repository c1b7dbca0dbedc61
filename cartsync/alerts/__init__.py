"""
Alerts — read-only filtering and aggregation over alert records.

    from cartsync import alerts as A

    visible = A.filter_alerts(alerts, A.AlertFilter(search_text="db", severity="warning"))
    summary = A.summarize(alerts)          # summary.critical, summary.active, ...
    A.time_ago(alert.timestamp)            # "5m ago"
"""

from __future__ import annotations

from cartsync.alerts._types import ALL, Severity, Alert, AlertFilter, AlertSummary
from cartsync.alerts._ops import filter_alerts, summarize, categories, time_ago, by_newest

__all__ = (
    "ALL",
    "Severity",
    "Alert",
    "AlertFilter",
    "AlertSummary",
    "filter_alerts",
    "summarize",
    "categories",
    "time_ago",
    "by_newest",
)
