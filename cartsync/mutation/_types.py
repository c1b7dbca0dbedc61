"""
Mutation types — core data structures.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, StrEnum, auto

from cartsync._types import Updater, Request, Reconciler
from cartsync.api import Failure, Notification

# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class MutationState(Enum):
    """
    Mutation lifecycle.

    IDLE → OPTIMISTIC → IN_FLIGHT → COMMITTED | ROLLED_BACK
    IDLE → SKIPPED | REJECTED      (check refused before any cache change)
    any non-terminal → CANCELLED   (no commit, no rollback)
    """

    IDLE = auto()
    OPTIMISTIC = auto()
    IN_FLIGHT = auto()
    COMMITTED = auto()
    ROLLED_BACK = auto()
    REJECTED = auto()
    SKIPPED = auto()
    CANCELLED = auto()

    @property
    def terminal(self) -> bool:
        return self not in (MutationState.IDLE, MutationState.OPTIMISTIC, MutationState.IN_FLIGHT)


class Status(StrEnum):
    """Coarse status surfaced to the UI."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


# ═══════════════════════════════════════════════════════════════════════════════
# Check — Verdict Before Any State Transition
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Skip:
    """Nothing to do. No request, no notification."""

    reason: str


@dataclass(frozen=True, slots=True)
class Reject:
    """Refused locally. No request, one notification."""

    notice: Notification
    reason: str = ""


type Verdict = Skip | Reject | None
type Check[T] = Callable[[T | None], Verdict]
"""Inspects the current collection value; None lets the mutation proceed."""


# ═══════════════════════════════════════════════════════════════════════════════
# Mutation — Optimistic Change + Request
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Mutation[T, R]:
    """
    One user-initiated change of a cached collection.

    apply: speculative updater, applied before the request.
    request: the server call.
    reconcile: merges the server response into the optimistic value;
        None keeps the optimistic value.
    check: evaluated under the key's queue before the snapshot.
    success / failure: terminal notifications. failure is the fallback
        when the error carries no usable server message.
    on_commit: side effects after commit (invalidating related collections).
    """

    key: str
    name: str
    apply: Updater[T]
    request: Request[R]
    failure: Notification
    reconcile: Reconciler[T, R] | None = None
    check: Check[T] | None = None
    success: Callable[[R], Notification | None] | None = None
    on_commit: Callable[[R], None] | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class MutationResult[T]:
    """Terminal outcome of one invocation."""

    key: str
    owner: str
    state: MutationState
    value: T | None = None
    failure: Failure | None = None
    notice: Notification | None = None

    @property
    def status(self) -> Status:
        match self.state:
            case MutationState.COMMITTED:
                return Status.SUCCESS
            case MutationState.ROLLED_BACK | MutationState.REJECTED:
                return Status.ERROR
            case MutationState.SKIPPED | MutationState.CANCELLED:
                return Status.IDLE
            case _:
                return Status.PENDING

    @property
    def ok(self) -> bool:
        return self.state is MutationState.COMMITTED


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "MutationState",
    "Status",
    "Skip",
    "Reject",
    "Verdict",
    "Check",
    "Mutation",
    "MutationResult",
)
