"""
Mutation — optimistic changes with automatic rollback.

    from cartsync import mutation as M

    remove = M.mutation(
        "cart",
        "remove_item",
        apply=lambda items: tuple(i for i in items if i.id != item_id),
        request=lambda: api.remove_cart_item(item_id),
        failure=Notification.error("Error", "Failed to remove item."),
    )

    coordinator = M.Coordinator(cache, notifier, navigator, timeout=15.0)
    handle = coordinator.submit(remove)
    result = await handle

    match result.state:
        case M.MutationState.COMMITTED:
            ...
        case M.MutationState.ROLLED_BACK:
            print(result.failure.kind)
"""

from __future__ import annotations

from cartsync.mutation._types import (
    MutationState,
    Status,
    Skip,
    Reject,
    Verdict,
    Check,
    Mutation,
    MutationResult,
)
from cartsync.mutation._step import mutation, replace_with_response, keep_optimistic
from cartsync.mutation._run import MutationHandle, Coordinator, failure_notice

__all__ = (
    # Types
    "MutationState",
    "Status",
    "Skip",
    "Reject",
    "Verdict",
    "Check",
    "Mutation",
    "MutationResult",
    # Creation
    "mutation",
    "replace_with_response",
    "keep_optimistic",
    # Execution
    "MutationHandle",
    "Coordinator",
    "failure_notice",
)
