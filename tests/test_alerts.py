"""Tests for alert filtering, summary and the alert board."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from cartsync import alerts as A
from cartsync.alerts import Alert, AlertFilter, Severity

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _alert(alert_id, level, category, message, *, resolved=False, minutes=0):
    return Alert(
        id=alert_id,
        level=Severity(level),
        category=category,
        message=message,
        resolved=resolved,
        timestamp=NOW - timedelta(minutes=minutes),
    )


ALERTS = (
    _alert("1", "critical", "payments", "Gateway timeout on card capture", minutes=3),
    _alert("2", "warning", "inventory", "Low stock for Office 365", minutes=90),
    _alert("3", "info", "auth", "New login from Sarajevo", resolved=True, minutes=2),
    _alert("4", "critical", "auth", "Repeated failed logins", resolved=True, minutes=3000),
    _alert("5", "warning", "payments", "Slow PAYMENT webhook"),
)


class TestFilter:
    def test_default_filter_keeps_everything_in_order(self):
        assert A.filter_alerts(ALERTS) == ALERTS

    def test_search_is_case_insensitive_over_message_and_category(self):
        hits = A.filter_alerts(ALERTS, AlertFilter(search_text="payment"))

        assert [a.id for a in hits] == ["1", "5"]

    def test_search_matches_category(self):
        assert [a.id for a in A.filter_alerts(ALERTS, AlertFilter(search_text="AUTH"))] == ["3", "4"]

    def test_severity_and_category_combine(self):
        hits = A.filter_alerts(ALERTS, AlertFilter(severity="critical", category="auth"))

        assert [a.id for a in hits] == ["4"]

    def test_severity_enum_or_string(self):
        by_enum = A.filter_alerts(ALERTS, AlertFilter(severity=Severity.WARNING))
        by_str = A.filter_alerts(ALERTS, AlertFilter(severity="warning"))

        assert by_enum == by_str
        assert [a.id for a in by_enum] == ["2", "5"]

    def test_no_matches(self):
        assert A.filter_alerts(ALERTS, AlertFilter(search_text="nothing like this")) == ()


class TestSummary:
    def test_counts_unresolved_per_severity(self):
        summary = A.summarize(ALERTS)

        assert (summary.critical, summary.warning, summary.info) == (1, 2, 0)
        assert summary.resolved == 2
        assert summary.active == 3
        assert summary.total == 5

    def test_empty(self):
        assert A.summarize(()) == A.AlertSummary()

    def test_categories_first_seen(self):
        assert A.categories(ALERTS) == ("payments", "inventory", "auth")


class TestTimeAgo:
    @pytest.mark.parametrize(
        ("minutes", "text"),
        [(0, "Just now"), (5, "5m ago"), (59, "59m ago"), (60, "1h ago"), (1439, "23h ago"), (2880, "2d ago")],
    )
    def test_buckets(self, minutes, text):
        assert A.time_ago(NOW - timedelta(minutes=minutes), NOW) == text

    def test_naive_timestamp_is_utc(self):
        naive = datetime(2024, 5, 1, 11, 0)

        assert A.time_ago(naive, NOW) == "1h ago"

    def test_by_newest(self):
        assert [a.id for a in A.by_newest(ALERTS)] == ["5", "3", "1", "2", "4"]


class TestBoard:
    def test_refresh_and_views(self, backend, make_shop):
        backend.route(
            "GET",
            "/api/alerts/recent",
            json=[
                {"id": "1", "level": "critical", "category": "payments", "message": "Gateway down",
                 "timestamp": "2024-05-01T10:00:00Z"},
                {"id": "2", "level": "info", "category": "auth", "message": "Login",
                 "resolved": True, "timestamp": "2024-05-01T09:00:00Z"},
            ],
        )
        shop = make_shop("/admin/alerts")

        asyncio.run(shop.alerts.refresh())

        assert [a.id for a in shop.alerts.visible(AlertFilter(severity="critical"))] == ["1"]
        assert shop.alerts.summary().active == 1
        assert shop.alerts.categories() == ("payments", "auth")
