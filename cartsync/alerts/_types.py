"""
Alert types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

ALL = "all"


class Severity(StrEnum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Alert:
    id: str
    level: Severity
    category: str
    message: str
    resolved: bool
    timestamp: datetime
    source: str = ""


@dataclass(frozen=True, slots=True)
class AlertFilter:
    """
    Filter criteria. "all" disables the severity or category filter.

    search_text matches message or category, case-insensitively.
    """

    search_text: str = ""
    severity: Severity | str = ALL
    category: str = ALL


@dataclass(frozen=True, slots=True)
class AlertSummary:
    """Unresolved counts per severity, plus resolved and active totals."""

    critical: int = 0
    warning: int = 0
    info: int = 0
    resolved: int = 0
    active: int = 0

    @property
    def total(self) -> int:
        return self.resolved + self.active


__all__ = ("ALL", "Severity", "Alert", "AlertFilter", "AlertSummary")
