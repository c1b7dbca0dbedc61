"""Tests for the mutation coordinator."""

import asyncio

import httpx

from cartsync import mutation as M
from cartsync.api import (
    CONNECTION_ERROR,
    UNAUTHORIZED,
    ApiError,
    FailureKind,
    NetworkError,
    Notification,
)

FAILED = Notification.error("Error", "Failed to update. Please try again.")
DONE = Notification("Updated", "Done")


def _mutation(apply=lambda v: v + 10, request=None, *, key="counter", name="add", **kwargs):
    async def ok():
        return "ok"

    return M.mutation(
        key,
        name,
        apply=apply,
        request=request or ok,
        failure=kwargs.pop("failure", FAILED),
        **kwargs,
    )


def _failing(error):
    async def request():
        raise error

    return request


def _gated(gate, result="ok", error=None):
    async def request():
        await gate.wait()
        if error is not None:
            raise error
        return result

    return request


class TestCommit:
    def test_success_commits_and_notifies_once(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        result = asyncio.run(coordinator.run(_mutation(success=DONE)))

        assert result.state is M.MutationState.COMMITTED
        assert result.status is M.Status.SUCCESS
        assert result.ok
        assert result.value == 11
        assert cache.get("counter") == 11
        assert not cache.entry("counter").optimistic
        assert not cache.pending("counter")
        assert notifier.notifications == [DONE]

    def test_reconcile_replaces_optimistic_value(self, cache, coordinator):
        cache.seed("counter", 1)

        async def request():
            return 42

        mutation = _mutation(request=request, reconcile=lambda current, response: response)
        result = asyncio.run(coordinator.run(mutation))

        assert result.value == 42
        assert cache.get("counter") == 42

    def test_reconcile_none_keeps_optimistic_value(self, cache, coordinator):
        cache.seed("counter", 1)

        mutation = _mutation(reconcile=M.keep_optimistic)
        asyncio.run(coordinator.run(mutation))

        assert cache.get("counter") == 11

    def test_replace_with_response(self, cache, coordinator):
        cache.seed("counter", 1)

        async def request():
            return 42

        result = asyncio.run(coordinator.run(_mutation(request=request, reconcile=M.replace_with_response)))

        assert result.value == 42
        assert cache.get("counter") == 42

    def test_broken_reconcile_keeps_optimistic_value(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        def reconcile(current, response):
            raise KeyError("id")

        result = asyncio.run(coordinator.run(_mutation(reconcile=reconcile, success=DONE)))

        assert result.ok
        assert cache.get("counter") == 11
        assert notifier.notifications == [DONE]

    def test_success_callable_gets_response(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        async def request():
            return "ORD-7"

        mutation = _mutation(request=request, success=lambda number: Notification("Placed", f"#{number}"))
        asyncio.run(coordinator.run(mutation))

        assert notifier.notifications == [Notification("Placed", "#ORD-7")]

    def test_on_commit_runs_after_commit(self, cache, coordinator):
        cache.seed("counter", 1)
        seen = []

        mutation = _mutation(on_commit=lambda response: seen.append((response, cache.get("counter"))))
        asyncio.run(coordinator.run(mutation))

        assert seen == [("ok", 11)]

    def test_optimistic_value_visible_while_in_flight(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            gate = asyncio.Event()
            handle = coordinator.submit(_mutation(request=_gated(gate)))
            await asyncio.sleep(0)
            during = (cache.get("counter"), cache.entry("counter").optimistic, handle.status, handle.state)
            gate.set()
            result = await handle
            return during, result

        during, result = asyncio.run(scenario())

        assert during == (11, True, M.Status.PENDING, M.MutationState.IN_FLIGHT)
        assert result.ok

    def test_reads_cancelled_before_snapshot(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            read = asyncio.get_running_loop().create_future()
            cache.track_read("counter", read)
            await coordinator.run(_mutation())
            return read.cancelled()

        assert asyncio.run(scenario())


class TestRollback:
    def test_server_error_rolls_back_with_fallback_notice(self, cache, coordinator, notifier):
        cache.seed("counter", 1)
        before = cache.entry("counter")

        result = asyncio.run(coordinator.run(_mutation(request=_failing(ApiError(500, "db down")))))

        assert result.state is M.MutationState.ROLLED_BACK
        assert result.status is M.Status.ERROR
        assert result.failure.kind is FailureKind.SERVER
        assert result.value == 1
        assert cache.entry("counter") is before
        assert notifier.notifications == [FAILED]

    def test_rejection_shows_server_message(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        request = _failing(ApiError(429, "Too many requests, slow down"))
        result = asyncio.run(coordinator.run(_mutation(request=request)))

        assert result.failure.kind is FailureKind.REJECTED
        assert notifier.notifications == [Notification.error("Error", "Too many requests, slow down")]

    def test_rejection_without_message_uses_fallback(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        asyncio.run(coordinator.run(_mutation(request=_failing(ApiError(404, "")))))

        assert notifier.notifications == [FAILED]

    def test_unauthorized_redirects_to_login(self, cache, coordinator, notifier, navigator):
        cache.seed("counter", 1)

        result = asyncio.run(coordinator.run(_mutation(request=_failing(ApiError(401, "Unauthorized")))))

        assert result.failure.kind is FailureKind.UNAUTHORIZED
        assert cache.get("counter") == 1
        assert notifier.notifications == [UNAUTHORIZED]
        assert navigator.redirects == ["/auth"]

    def test_forbidden_is_unauthorized(self, cache, coordinator, notifier, navigator):
        cache.seed("counter", 1)

        asyncio.run(coordinator.run(_mutation(request=_failing(ApiError(403, "Forbidden")))))

        assert notifier.notifications == [UNAUTHORIZED]
        assert navigator.redirects == ["/auth"]

    def test_network_error_uses_connection_notice(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        result = asyncio.run(coordinator.run(_mutation(request=_failing(NetworkError("refused")))))

        assert result.failure.kind is FailureKind.NETWORK
        assert notifier.notifications == [CONNECTION_ERROR]

    def test_raw_transport_error_is_network_failure(self, cache, coordinator):
        cache.seed("counter", 1)

        request = _failing(httpx.ConnectError("refused"))
        result = asyncio.run(coordinator.run(_mutation(request=request)))

        assert result.failure.kind is FailureKind.NETWORK

    def test_timeout_rolls_back(self, cache, notifier, navigator):
        coordinator = M.Coordinator(cache, notifier, navigator, timeout=0.01)
        cache.seed("counter", 1)

        async def slow():
            await asyncio.sleep(5)

        result = asyncio.run(coordinator.run(_mutation(request=slow)))

        assert result.failure.kind is FailureKind.TIMEOUT
        assert cache.get("counter") == 1
        assert notifier.notifications == [FAILED]

    def test_unexpected_error_rolls_back(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        result = asyncio.run(coordinator.run(_mutation(request=_failing(ValueError("bad json")))))

        assert result.failure.kind is FailureKind.UNEXPECTED
        assert cache.get("counter") == 1
        assert len(notifier.notifications) == 1

    def test_failing_updater_is_local_failure(self, cache, coordinator, notifier):
        cache.seed("counter", 1)
        sent = []

        async def request():
            sent.append(1)

        def apply(value):
            raise TypeError("bad state")

        result = asyncio.run(coordinator.run(_mutation(apply=apply, request=request)))

        assert result.failure.kind is FailureKind.LOCAL
        assert sent == []
        assert cache.get("counter") == 1
        assert not cache.pending("counter")
        assert notifier.notifications == [FAILED]

    def test_missing_navigator_still_notifies(self, cache, notifier):
        coordinator = M.Coordinator(cache, notifier)
        cache.seed("counter", 1)

        asyncio.run(coordinator.run(_mutation(request=_failing(ApiError(401, "")))))

        assert notifier.notifications == [UNAUTHORIZED]


class TestCheck:
    def test_skip_sends_nothing(self, cache, coordinator, notifier):
        cache.seed("counter", 1)
        sent = []

        async def request():
            sent.append(1)

        mutation = _mutation(request=request, check=lambda value: M.Skip("nothing to do"))
        result = asyncio.run(coordinator.run(mutation))

        assert result.state is M.MutationState.SKIPPED
        assert result.status is M.Status.IDLE
        assert sent == []
        assert notifier.notifications == []
        assert cache.get("counter") == 1

    def test_reject_notifies_once_without_request(self, cache, coordinator, notifier):
        cache.seed("counter", 1)
        sent = []
        notice = Notification.error("Empty Cart", "Your cart is empty.")

        async def request():
            sent.append(1)

        mutation = _mutation(request=request, check=lambda value: M.Reject(notice, "empty"))
        result = asyncio.run(coordinator.run(mutation))

        assert result.state is M.MutationState.REJECTED
        assert result.status is M.Status.ERROR
        assert result.failure.kind is FailureKind.LOCAL
        assert sent == []
        assert notifier.notifications == [notice]
        assert cache.entry("counter").version == 1

    def test_check_sees_value_left_by_earlier_mutation(self, cache, coordinator):
        cache.seed("counter", 1)
        seen = []

        def check(value):
            seen.append(value)
            return None

        async def scenario():
            first = coordinator.submit(_mutation())
            second = coordinator.submit(_mutation(check=check))
            return await first, await second

        asyncio.run(scenario())

        assert seen == [11]
        assert cache.get("counter") == 21


class TestOrdering:
    def test_failed_first_does_not_undo_second(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            gate = asyncio.Event()
            a = coordinator.submit(_mutation(apply=lambda v: v + 10, request=_gated(gate, error=ApiError(500, ""))))
            b = coordinator.submit(_mutation(apply=lambda v: v + 100))
            await asyncio.sleep(0)
            assert cache.get("counter") == 11
            gate.set()
            return await a, await b

        a, b = asyncio.run(scenario())

        assert a.state is M.MutationState.ROLLED_BACK
        assert b.state is M.MutationState.COMMITTED
        assert cache.get("counter") == 101

    def test_failed_second_keeps_first(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            a = coordinator.submit(_mutation(apply=lambda v: v + 10))
            b = coordinator.submit(_mutation(apply=lambda v: v + 100, request=_failing(ApiError(500, ""))))
            return await a, await b

        a, b = asyncio.run(scenario())

        assert a.ok
        assert b.state is M.MutationState.ROLLED_BACK
        assert cache.get("counter") == 11

    def test_same_key_runs_in_call_order(self, cache, coordinator):
        cache.seed("log", ())

        async def scenario():
            handles = [
                coordinator.submit(_mutation(key="log", apply=lambda v, i=i: v + (i,), reconcile=M.keep_optimistic))
                for i in range(5)
            ]
            return [await h for h in handles]

        asyncio.run(scenario())

        assert cache.get("log") == (0, 1, 2, 3, 4)

    def test_different_keys_run_concurrently(self, cache, coordinator):
        cache.seed("cart", 0)
        cache.seed("wallet", 0)

        async def scenario():
            gate = asyncio.Event()
            cart = coordinator.submit(_mutation(key="cart", request=_gated(gate)))
            wallet = coordinator.submit(_mutation(key="wallet"))
            wallet_result = await wallet
            cart_status = cart.status
            gate.set()
            await cart
            return wallet_result, cart_status

        wallet_result, cart_status = asyncio.run(scenario())

        assert wallet_result.ok
        assert cart_status is M.Status.PENDING


class TestCancellation:
    def test_cancel_in_flight_releases_without_writing(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        async def scenario():
            gate = asyncio.Event()
            handle = coordinator.submit(_mutation(request=_gated(gate)))
            await asyncio.sleep(0)
            cancelled = coordinator.cancel("counter")
            return cancelled, await handle

        cancelled, result = asyncio.run(scenario())

        assert cancelled == 1
        assert result.state is M.MutationState.CANCELLED
        assert result.status is M.Status.IDLE
        assert notifier.notifications == []
        assert not cache.pending("counter")
        assert cache.get("counter") == 11
        assert cache.entry("counter").stale
        assert not coordinator.is_pending("counter")

    def test_cancel_queued_mutation(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            gate = asyncio.Event()
            first = coordinator.submit(_mutation(request=_gated(gate)))
            second = coordinator.submit(_mutation(apply=lambda v: v + 100))
            await asyncio.sleep(0)
            second.cancel()
            gate.set()
            return await first, await second

        first, second = asyncio.run(scenario())

        assert first.ok
        assert second.state is M.MutationState.CANCELLED
        assert cache.get("counter") == 11

    def test_cancel_before_start(self, cache, coordinator, notifier):
        cache.seed("counter", 1)

        async def scenario():
            handle = coordinator.submit(_mutation())
            handle.cancel()
            return await handle, handle

        result, handle = asyncio.run(scenario())

        assert result.state is M.MutationState.CANCELLED
        assert handle.status is M.Status.IDLE
        assert cache.get("counter") == 1
        assert notifier.notifications == []

    def test_cancelling_waiter_does_not_cancel_mutation(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            gate = asyncio.Event()
            handle = coordinator.submit(_mutation(request=_gated(gate)))

            async def wait():
                return await handle

            waiter = asyncio.create_task(wait())
            await asyncio.sleep(0)
            waiter.cancel()
            await asyncio.sleep(0)
            gate.set()
            return await handle, waiter.cancelled()

        result, waiter_cancelled = asyncio.run(scenario())

        assert waiter_cancelled
        assert result.ok
        assert cache.get("counter") == 11

    def test_cancel_all(self, cache, coordinator):
        cache.seed("cart", 0)
        cache.seed("orders", 0)

        async def scenario():
            gate = asyncio.Event()
            handles = [
                coordinator.submit(_mutation(key="cart", request=_gated(gate))),
                coordinator.submit(_mutation(key="orders", request=_gated(gate))),
            ]
            await asyncio.sleep(0)
            cancelled = coordinator.cancel_all()
            return cancelled, [await h for h in handles]

        cancelled, results = asyncio.run(scenario())

        assert cancelled == 2
        assert all(r.state is M.MutationState.CANCELLED for r in results)

    def test_cancel_finished_is_noop(self, cache, coordinator):
        cache.seed("counter", 1)

        async def scenario():
            handle = coordinator.submit(_mutation())
            await handle
            return handle.cancel(), coordinator.cancel("counter")

        assert asyncio.run(scenario()) == (False, 0)
