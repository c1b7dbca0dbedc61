"""
API — storefront backend adapter and collaborator protocols.

    from cartsync import api as A

    async with A.ApiClient(settings.api_url, timeout=settings.timeout) as client:
        shop = A.StorefrontApi(client)
        cart = await shop.get_cart()

    try:
        await shop.clear_cart()
    except A.ApiError as exc:
        failure = A.classify(exc)      # Failure(kind=FailureKind.REJECTED, ...)
"""

from __future__ import annotations

from cartsync.api._errors import (
    ApiError,
    NetworkError,
    RequestTimeout,
    is_unauthorized_error,
    FailureKind,
    Failure,
    classify,
)
from cartsync.api._ports import (
    Variant,
    Notification,
    UNAUTHORIZED,
    CONNECTION_ERROR,
    Notifier,
    LogNotifier,
    Navigator,
    User,
    Session,
    SessionProvider,
)
from cartsync.api._client import ApiClient, CSRF_PATH, CSRF_HEADER
from cartsync.api._schemas import (
    ProductWire,
    CartItemWire,
    WalletBalanceWire,
    WalletTransactionWire,
    WalletWire,
    OrderLineWire,
    OrderWire,
    OrderRequestWire,
    AlertWire,
)
from cartsync.api._endpoints import StorefrontApi

__all__ = (
    # Errors
    "ApiError",
    "NetworkError",
    "RequestTimeout",
    "is_unauthorized_error",
    "FailureKind",
    "Failure",
    "classify",
    # Ports
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
    # Client
    "ApiClient",
    "CSRF_PATH",
    "CSRF_HEADER",
    "StorefrontApi",
    # Wire
    "ProductWire",
    "CartItemWire",
    "WalletBalanceWire",
    "WalletTransactionWire",
    "WalletWire",
    "OrderLineWire",
    "OrderWire",
    "OrderRequestWire",
    "AlertWire",
)
