"""HTTP transport shared by ordinary calls and refresh exchanges."""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

import httpx

from sessionguard.core.errors import TransportError
from sessionguard.core.models import RequestConfig


# Keys understood by httpx.AsyncClient.request besides method and url.
_REQUEST_KEYS = frozenset(
    {"headers", "params", "content", "data", "files", "json", "cookies", "timeout", "extensions"}
)


class Transport(Protocol):
    async def send(self, url: str, config: RequestConfig) -> httpx.Response: ...

    async def close(self) -> None: ...


class HttpxTransport:
    """Single ``httpx.AsyncClient`` whose cookie jar carries the session credentials.

    ``config`` mirrors ``httpx.AsyncClient.request`` keyword arguments plus
    ``method`` and ``raise_for_status``. With ``raise_for_status`` set, an
    error status raises :class:`TransportError` carrying that status.
    """

    def __init__(self, *, timeout: float = 30.0, **client_kwargs: Any) -> None:
        self.timeout = timeout
        self._client_kwargs = client_kwargs
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=self.timeout,
                    follow_redirects=True,
                    **self._client_kwargs,
                )
            return self._client

    async def send(self, url: str, config: RequestConfig) -> httpx.Response:
        unknown = set(config) - _REQUEST_KEYS - {"method", "raise_for_status"}
        if unknown:
            raise TypeError(f"Unsupported request options: {', '.join(sorted(unknown))}")
        client = await self._ensure_client()
        method = str(config.get("method", "GET")).upper()
        kwargs = {key: value for key, value in config.items() if key in _REQUEST_KEYS}
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        if config.get("raise_for_status") and response.is_error:
            await response.aread()
            raise TransportError.from_response(response)
        return response

    async def close(self) -> None:
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
