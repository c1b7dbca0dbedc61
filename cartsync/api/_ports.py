"""
Collaborator protocols — session, notifications, navigation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

import structlog

log = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Notifications
# ═══════════════════════════════════════════════════════════════════════════════


class Variant(StrEnum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    description: str
    variant: Variant = Variant.DEFAULT

    @classmethod
    def error(cls, title: str, description: str) -> Notification:
        return cls(title, description, Variant.DESTRUCTIVE)


UNAUTHORIZED = Notification.error("Unauthorized", "You are logged out. Logging in again...")
CONNECTION_ERROR = Notification.error(
    "Connection Error",
    "Could not reach the server. Check your connection and try again.",
)


class Notifier(Protocol):
    """Toast sink."""

    def notify(self, notification: Notification) -> None: ...


class LogNotifier:
    """Notifier that writes notifications to the log. For headless use."""

    def notify(self, notification: Notification) -> None:
        log.info(
            "notification",
            title=notification.title,
            description=notification.description,
            variant=notification.variant.value,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Navigation
# ═══════════════════════════════════════════════════════════════════════════════


class Navigator(Protocol):
    """Redirects to an external path (login page on authorization failure)."""

    def redirect(self, path: str) -> None: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str = ""
    tenant_id: str | None = None
    role: str = "b2b_user"


@dataclass(frozen=True, slots=True)
class Session:
    user: User | None = None
    is_authenticated: bool = False
    is_loading: bool = False


class SessionProvider(Protocol):
    """Authentication state. Identity may load after the first read."""

    @property
    def session(self) -> Session: ...

    async def logout(self) -> None: ...


__all__ = (
    "Variant",
    "Notification",
    "UNAUTHORIZED",
    "CONNECTION_ERROR",
    "Notifier",
    "LogNotifier",
    "Navigator",
    "User",
    "Session",
    "SessionProvider",
)
