"""
Mutation creation.
"""

from __future__ import annotations

from collections.abc import Callable

from cartsync._types import Updater, Request, Reconciler
from cartsync.api import Notification
from cartsync.mutation._types import Mutation, Check

# ═══════════════════════════════════════════════════════════════════════════════
# mutation() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def mutation[T, R](
    key: str,
    name: str,
    *,
    apply: Updater[T],
    request: Request[R],
    failure: Notification,
    reconcile: Reconciler[T, R] | None = None,
    check: Check[T] | None = None,
    success: Notification | Callable[[R], Notification | None] | None = None,
    on_commit: Callable[[R], None] | None = None,
) -> Mutation[T, R]:
    """
    Create a mutation.

    Args:
        key: Cache collection the mutation changes
        name: Owner name for logs and snapshots
        apply: Speculative updater for the collection
        request: Server call, awaited while the change is shown
        failure: Fallback error notification
        reconcile: Merge of the server response into the optimistic value
        check: Local gate evaluated before the snapshot
        success: Success notification, or a function of the response
        on_commit: Side effects after a commit

    Example:
        from cartsync import mutation as M

        remove = M.mutation(
            "cart",
            "remove_item",
            apply=lambda items: tuple(i for i in items if i.id != item_id),
            request=lambda: api.remove_cart_item(item_id),
            success=Notification("Removed", f"{name} removed from cart"),
            failure=Notification.error("Error", "Failed to remove item."),
        )

        result = await coordinator.run(remove)
    """
    match success:
        case Notification() as notice:
            success_fn: Callable[[R], Notification | None] | None = lambda _: notice
        case _:
            success_fn = success

    return Mutation(
        key=key,
        name=name,
        apply=apply,
        request=request,
        failure=failure,
        reconcile=reconcile,
        check=check,
        success=success_fn,
        on_commit=on_commit,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Reconcilers
# ═══════════════════════════════════════════════════════════════════════════════


def replace_with_response[T](current: T | None, response: T | None) -> T | None:
    """Reconciler: the response is the whole new collection."""
    return response


def keep_optimistic[T, R](current: T | None, response: R) -> T | None:
    """Reconciler: the optimistic value already matches the server."""
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("mutation", "replace_with_response", "keep_optimistic")
