"""
API errors and the failure taxonomy.

Below the mutation boundary failures are exceptions (ApiError and
subclasses). At the boundary they are classified into a Failure value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

import httpx

# ═══════════════════════════════════════════════════════════════════════════════
# Exceptions
# ═══════════════════════════════════════════════════════════════════════════════


class ApiError(Exception):
    """Request reached the server and got a non-2xx response."""

    def __init__(self, status: int | None, message: str = "", body: Any = None) -> None:
        super().__init__(f"{status}: {message or 'request failed'}" if status is not None else message)
        self.status = status
        self.message = message
        self.body = body

    @property
    def is_unauthorized(self) -> bool:
        return self.status in (401, 403)

    @classmethod
    def from_response(cls, response: httpx.Response) -> ApiError:
        body: Any = None
        message = ""
        try:
            body = response.json()
        except ValueError:
            message = response.text.strip()
        if isinstance(body, dict):
            message = str(body.get("message") or body.get("error") or "")
        # message stays empty without a server-provided one; callers fall back
        return cls(response.status_code, message, body)


class NetworkError(ApiError):
    """Request never reached the server or no response came back."""

    def __init__(self, message: str = "network error") -> None:
        super().__init__(None, message)


class RequestTimeout(NetworkError):
    """Request exceeded its timeout."""


def is_unauthorized_error(error: BaseException) -> bool:
    return isinstance(error, ApiError) and error.is_unauthorized


# ═══════════════════════════════════════════════════════════════════════════════
# Failure — Classified Error Value
# ═══════════════════════════════════════════════════════════════════════════════


class FailureKind(Enum):
    """
    Failure taxonomy.

    UNAUTHORIZED: 401/403, redirect to login. Checked first.
    REJECTED: 429 or other 4xx, server message shown verbatim.
    SERVER: 5xx.
    NETWORK: no response.
    TIMEOUT: request timed out.
    LOCAL: detected before any request (empty cart, low balance).
    UNEXPECTED: anything else raised by a request.
    """

    UNAUTHORIZED = auto()
    REJECTED = auto()
    SERVER = auto()
    NETWORK = auto()
    TIMEOUT = auto()
    LOCAL = auto()
    UNEXPECTED = auto()


@dataclass(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    message: str = ""
    status: int | None = None


def classify(error: BaseException) -> Failure:
    """Map an exception raised by a request into a Failure."""
    match error:
        case RequestTimeout() | TimeoutError() | httpx.TimeoutException():
            return Failure(FailureKind.TIMEOUT, str(error))
        case NetworkError() | httpx.TransportError():
            return Failure(FailureKind.NETWORK, str(error))
        case ApiError(status=401 | 403):
            return Failure(FailureKind.UNAUTHORIZED, error.message, error.status)
        case ApiError(status=int(status)) if 400 <= status < 500:
            return Failure(FailureKind.REJECTED, error.message, status)
        case ApiError():
            return Failure(FailureKind.SERVER, error.message, error.status)
        case _:
            return Failure(FailureKind.UNEXPECTED, str(error))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ApiError",
    "NetworkError",
    "RequestTimeout",
    "is_unauthorized_error",
    "FailureKind",
    "Failure",
    "classify",
)
