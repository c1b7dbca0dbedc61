"""
HTTP client — JSON over httpx with CSRF and typed errors.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
import structlog

from cartsync.api._errors import ApiError, NetworkError, RequestTimeout

log = structlog.get_logger(__name__)

CSRF_PATH = "/api/csrf-token"
CSRF_HEADER = "X-CSRF-Token"
STATE_CHANGING = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class ApiClient:
    """
    Async JSON client for the storefront backend.

    Cookies persist on the underlying httpx.AsyncClient, so the session
    cookie travels with every request. State-changing requests carry the
    CSRF token, fetched once and reused.

    Example:
        async with ApiClient("https://shop.example.com", timeout=15.0) as client:
            cart = await client.get("/api/cart")
            await client.patch("/api/cart/42", {"quantity": 3})
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._csrf_token: str | None = None

    # ───────────────────────────────────────────────────────────────────────────
    # Verbs
    # ───────────────────────────────────────────────────────────────────────────

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Any = None) -> Any:
        return await self.request("POST", path, data)

    async def patch(self, path: str, data: Any = None) -> Any:
        return await self.request("PATCH", path, data)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and decode the JSON body.

        Returns None for empty bodies. Raises ApiError on non-2xx,
        RequestTimeout on timeouts, NetworkError when no response came back.
        """
        headers: dict[str, str] = {}
        if method in STATE_CHANGING:
            token = await self._ensure_csrf()
            if token:
                headers[CSRF_HEADER] = token

        try:
            response = await self._client.request(
                method,
                path,
                json=data,
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise RequestTimeout(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path}: {exc}") from exc

        if response.is_error:
            error = ApiError.from_response(response)
            log.debug("api_error", method=method, path=path, status=error.status, error=error.message)
            raise error

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ───────────────────────────────────────────────────────────────────────────
    # CSRF
    # ───────────────────────────────────────────────────────────────────────────

    async def _ensure_csrf(self) -> str | None:
        if self._csrf_token is not None:
            return self._csrf_token
        try:
            response = await self._client.get(CSRF_PATH)
            response.raise_for_status()
            self._csrf_token = response.json().get("csrfToken")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            # The request still goes out; the server decides whether it needs the token
            log.warning("csrf_token_unavailable", error=str(exc))
        return self._csrf_token

    def forget_csrf(self) -> None:
        """Drop the cached token (after logout)."""
        self._csrf_token = None

    # ───────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ───────────────────────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ("ApiClient", "CSRF_PATH", "CSRF_HEADER")
