"""
Mutation execution with automatic rollback.

Each key has a FIFO queue. Under the queue a mutation cancels reads of the
key, snapshots it, applies the optimistic change and awaits the request.
Success commits, failure restores the snapshot, cancellation releases it.
Every invocation ends with at most one notification.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from typing import Any

import structlog

from cartsync.api import (
    CONNECTION_ERROR,
    UNAUTHORIZED,
    Failure,
    FailureKind,
    Navigator,
    Notification,
    Notifier,
    classify,
)
from cartsync.cache import OptimisticCache, Snapshot
from cartsync.mutation._types import (
    Mutation,
    MutationResult,
    MutationState,
    Reject,
    Skip,
    Status,
)

log = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# MutationHandle — Pending Invocation
# ═══════════════════════════════════════════════════════════════════════════════


class MutationHandle[T]:
    """
    Handle of a submitted mutation.

    Awaiting the handle yields its MutationResult. Cancelling the awaiting
    task does not cancel the mutation; use handle.cancel() for that.
    """

    def __init__(self, key: str, owner: str) -> None:
        self.key = key
        self.owner = owner
        self._state = MutationState.IDLE
        self._task: asyncio.Task[MutationResult[T]] | None = None

    @property
    def state(self) -> MutationState:
        return self._state

    @property
    def status(self) -> Status:
        result = self.result()
        return Status.PENDING if result is None else result.status

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def result(self) -> MutationResult[T] | None:
        if self._task is None or not self._task.done():
            return None
        if self._task.cancelled():
            return self._cancelled()
        return self._task.result()

    def cancel(self) -> bool:
        """Cancel the mutation. False if it already finished."""
        if self._task is None or self._task.done():
            return False
        return self._task.cancel()

    def _bind(self, task: asyncio.Task[MutationResult[T]]) -> None:
        self._task = task

    def _advance(self, state: MutationState) -> None:
        log.debug("mutation_state", owner=self.owner, key=self.key, state=state.name.lower())
        self._state = state

    def _cancelled(self) -> MutationResult[T]:
        # Cancelled before the task got to run
        self._state = MutationState.CANCELLED
        return MutationResult(key=self.key, owner=self.owner, state=MutationState.CANCELLED)

    async def _wait(self) -> MutationResult[T]:
        assert self._task is not None
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return self._cancelled()
            raise

    def __await__(self) -> Generator[Any, None, MutationResult[T]]:
        return self._wait().__await__()

    def __repr__(self) -> str:
        return f"<MutationHandle {self.owner} {self._state.name.lower()}>"


# ═══════════════════════════════════════════════════════════════════════════════
# Coordinator
# ═══════════════════════════════════════════════════════════════════════════════


class Coordinator:
    """
    Runs mutations against an OptimisticCache.

    Example:
        coordinator = Coordinator(cache, notifier, navigator, timeout=15.0)

        handle = coordinator.submit(remove)   # optimistic change applied soon
        handle.status                          # Status.PENDING
        result = await handle                  # MutationResult

        coordinator.cancel("cart")             # page leave
    """

    def __init__(
        self,
        cache: OptimisticCache,
        notifier: Notifier,
        navigator: Navigator | None = None,
        *,
        login_path: str = "/auth",
        timeout: float | None = None,
    ) -> None:
        self.cache = cache
        self._notifier = notifier
        self._navigator = navigator
        self._login_path = login_path
        self._timeout = timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._queued: dict[str, int] = {}
        self._handles: dict[str, set[MutationHandle[Any]]] = {}
        self._ids = itertools.count(1)

    # ───────────────────────────────────────────────────────────────────────────
    # Public API
    # ───────────────────────────────────────────────────────────────────────────

    def submit[T, R](self, mutation: Mutation[T, R]) -> MutationHandle[T]:
        """Schedule a mutation. Must be called from a running event loop."""
        handle: MutationHandle[T] = MutationHandle(mutation.key, f"{mutation.name}#{next(self._ids)}")
        task = asyncio.get_running_loop().create_task(
            self._execute(mutation, handle),
            name=handle.owner,
        )
        handle._bind(task)

        handles = self._handles.setdefault(mutation.key, set())
        handles.add(handle)
        task.add_done_callback(lambda _: self._forget(handle))
        return handle

    async def run[T, R](self, mutation: Mutation[T, R]) -> MutationResult[T]:
        """Submit and await."""
        return await self.submit(mutation)

    def cancel(self, *keys: str) -> int:
        """Cancel pending mutations of keys. Returns how many were cancelled."""
        cancelled = 0
        for key in keys:
            for handle in tuple(self._handles.get(key, ())):
                if handle.cancel():
                    cancelled += 1
        if cancelled:
            log.info("mutations_cancelled", keys=keys, count=cancelled)
        return cancelled

    def cancel_all(self) -> int:
        return self.cancel(*self._handles)

    def is_pending(self, key: str) -> bool:
        return bool(self._handles.get(key))

    # ───────────────────────────────────────────────────────────────────────────
    # Execution
    # ───────────────────────────────────────────────────────────────────────────

    async def _execute[T, R](
        self,
        mutation: Mutation[T, R],
        handle: MutationHandle[T],
    ) -> MutationResult[T]:
        try:
            async with self._exclusive(mutation.key):
                return await self._apply(mutation, handle)
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None:
                task.uncancel()
            log.info("mutation_cancelled", owner=handle.owner, key=mutation.key, state=handle.state.name.lower())
            handle._advance(MutationState.CANCELLED)
            return MutationResult(key=mutation.key, owner=handle.owner, state=MutationState.CANCELLED)

    async def _apply[T, R](
        self,
        mutation: Mutation[T, R],
        handle: MutationHandle[T],
    ) -> MutationResult[T]:
        cache = self.cache
        key = mutation.key
        cache.cancel_reads(key)

        verdict = self._check(mutation, cache.get(key))
        match verdict:
            case Skip(reason=reason):
                log.debug("mutation_skipped", owner=handle.owner, key=key, reason=reason)
                handle._advance(MutationState.SKIPPED)
                return MutationResult(key=key, owner=handle.owner, state=MutationState.SKIPPED)
            case Reject(notice=notice, reason=reason):
                log.info("mutation_rejected", owner=handle.owner, key=key, reason=reason)
                self._notify(notice)
                handle._advance(MutationState.REJECTED)
                return MutationResult(
                    key=key,
                    owner=handle.owner,
                    state=MutationState.REJECTED,
                    failure=Failure(FailureKind.LOCAL, reason or notice.description),
                    notice=notice,
                )

        snapshot = cache.snapshot(key, handle.owner)
        try:
            cache.set_optimistic(key, mutation.apply, snapshot)
        except Exception as exc:
            log.exception("optimistic_update_failed", owner=handle.owner, key=key)
            cache.rollback(key, snapshot)
            return self._fail(mutation, handle, Failure(FailureKind.LOCAL, str(exc)))
        handle._advance(MutationState.OPTIMISTIC)

        handle._advance(MutationState.IN_FLIGHT)
        try:
            async with asyncio.timeout(self._timeout):
                response = await mutation.request()
        except asyncio.CancelledError:
            cache.release(snapshot)
            raise
        except Exception as exc:
            restored = cache.rollback(key, snapshot)
            failure = classify(exc)
            log.warning(
                "mutation_failed",
                owner=handle.owner,
                key=key,
                kind=failure.kind.name,
                status=failure.status,
                error=failure.message,
            )
            return self._fail(mutation, handle, failure, restored)

        return self._commit(mutation, handle, snapshot, response)

    def _commit[T, R](
        self,
        mutation: Mutation[T, R],
        handle: MutationHandle[T],
        snapshot: Snapshot[T],
        response: R,
    ) -> MutationResult[T]:
        cache = self.cache
        optimistic = cache.get(mutation.key)
        value = optimistic
        if mutation.reconcile is not None:
            try:
                reconciled = mutation.reconcile(optimistic, response)
            except Exception:
                log.exception("reconcile_failed", owner=handle.owner, key=mutation.key)
                reconciled = None
            if reconciled is not None:
                value = reconciled

        cache.commit(mutation.key, value, snapshot)
        handle._advance(MutationState.COMMITTED)
        log.info("mutation_committed", owner=handle.owner, key=mutation.key)

        if mutation.on_commit is not None:
            try:
                mutation.on_commit(response)
            except Exception:
                log.exception("on_commit_failed", owner=handle.owner, key=mutation.key)

        notice = mutation.success(response) if mutation.success is not None else None
        if notice is not None:
            self._notify(notice)
        return MutationResult(
            key=mutation.key,
            owner=handle.owner,
            state=MutationState.COMMITTED,
            value=value,
            notice=notice,
        )

    def _fail[T, R](
        self,
        mutation: Mutation[T, R],
        handle: MutationHandle[T],
        failure: Failure,
        restored: T | None = None,
    ) -> MutationResult[T]:
        handle._advance(MutationState.ROLLED_BACK)
        notice = failure_notice(mutation.failure, failure)
        self._notify(notice)
        if failure.kind is FailureKind.UNAUTHORIZED:
            self._redirect_to_login()
        return MutationResult(
            key=mutation.key,
            owner=handle.owner,
            state=MutationState.ROLLED_BACK,
            value=restored,
            failure=failure,
            notice=notice,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    def _check[T, R](self, mutation: Mutation[T, R], current: T | None) -> Skip | Reject | None:
        if mutation.check is None:
            return None
        try:
            return mutation.check(current)
        except Exception as exc:
            log.exception("mutation_check_failed", key=mutation.key, name=mutation.name)
            return Reject(mutation.failure, str(exc))

    @asynccontextmanager
    async def _exclusive(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._queued[key] = self._queued.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._queued[key] -= 1
            if not self._queued[key]:
                del self._queued[key]
                del self._locks[key]

    def _forget(self, handle: MutationHandle[Any]) -> None:
        handles = self._handles.get(handle.key)
        if handles is None:
            return
        handles.discard(handle)
        if not handles:
            del self._handles[handle.key]

    def _notify(self, notice: Notification) -> None:
        self._notifier.notify(notice)

    def _redirect_to_login(self) -> None:
        if self._navigator is None:
            log.warning("login_redirect_unavailable", path=self._login_path)
            return
        self._navigator.redirect(self._login_path)


# ═══════════════════════════════════════════════════════════════════════════════
# failure_notice() — Failure → Notification
# ═══════════════════════════════════════════════════════════════════════════════


def failure_notice(fallback: Notification, failure: Failure) -> Notification:
    """
    Pick the notification for a failure.

    Authorization failures win over everything; rejections show the server
    message verbatim when there is one.
    """
    match failure.kind:
        case FailureKind.UNAUTHORIZED:
            return UNAUTHORIZED
        case FailureKind.REJECTED if failure.message:
            return Notification.error(fallback.title, failure.message)
        case FailureKind.NETWORK:
            return CONNECTION_ERROR
        case _:
            return fallback


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("MutationHandle", "Coordinator", "failure_notice")
