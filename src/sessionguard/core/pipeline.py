"""Request pipeline that keeps a session alive across expiry responses."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional

import httpx

from sessionguard.core.coordinator import RefreshCoordinator, apply_intents
from sessionguard.core.errors import RefreshApiError, RefreshLoopError, UninitializedError, error_status
from sessionguard.core.headers import (
    anti_forgery_intents,
    build_request_headers,
    continuation_intents,
    get_domain_from_url,
)
from sessionguard.core.locks import AsyncioLockManager, LockManager
from sessionguard.core.models import RefreshOutcome, RequestConfig, StoreIntent
from sessionguard.core.settings import PipelineSettings
from sessionguard.data.anti_forgery import AntiForgeryStore
from sessionguard.data.storage import FileStorage, KeyValueStorage, MemoryStorage
from sessionguard.data.token_store import ContinuationTokenStore
from sessionguard.services.audit_logger import AuditLogger
from sessionguard.services.transport import HttpxTransport, Transport
from sessionguard.utils.logging import get_logger


RequestBuilder = Callable[[RequestConfig], Awaitable[httpx.Response]]


class SessionClient:
    """HTTP entry point that attaches session headers and replays requests after a refresh.

    Instances are independent: each owns its settings, stores, lock manager and
    transport. Call :meth:`init` before use and :meth:`dispose` (or use
    ``async with``) when done.
    """

    def __init__(
        self,
        *,
        storage: Optional[KeyValueStorage] = None,
        token_store: Optional[ContinuationTokenStore] = None,
        anti_forgery: Optional[AntiForgeryStore] = None,
        lock_manager: Optional[LockManager] = None,
        transport: Optional[Transport] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> None:
        storage = storage or MemoryStorage()
        self.token_store = token_store or ContinuationTokenStore(storage)
        self.anti_forgery = anti_forgery or AntiForgeryStore(storage)
        self.lock_manager = lock_manager or AsyncioLockManager()
        self.transport = transport
        self.audit_logger = audit_logger
        self.settings: Optional[PipelineSettings] = None
        self.logger = get_logger("SessionClient")
        self._owns_transport = False
        self._coordinator: Optional[RefreshCoordinator] = None
        self._api_domain = ""
        self._intercept_globally: Optional[bool] = None

    @classmethod
    def from_settings(cls, settings: PipelineSettings, **kwargs: Any) -> "SessionClient":
        """Build and initialise a client, persisting tokens to ``settings.store_path`` when set."""
        if settings.store_path is not None and "storage" not in kwargs:
            kwargs["storage"] = FileStorage(Path(settings.store_path))
        client = cls(**kwargs)
        client.init(settings)
        return client

    @property
    def initialized(self) -> bool:
        return self._coordinator is not None

    @property
    def intercept_globally(self) -> Optional[bool]:
        return self._intercept_globally

    def init(self, settings: Optional[PipelineSettings] = None, **options: Any) -> None:
        if settings is None:
            settings = PipelineSettings(**options)
        elif options:
            settings = PipelineSettings.model_validate({**settings.model_dump(), **options})

        intercept = settings.intercept_globally
        if intercept is None:
            # first init defaults to on; later inits keep the previous choice
            intercept = True if self._intercept_globally is None else self._intercept_globally

        if self.transport is None:
            self.transport = HttpxTransport(timeout=settings.timeout)
            self._owns_transport = True

        self._coordinator = RefreshCoordinator(
            refresh_endpoint=settings.refresh_endpoint,
            token_store=self.token_store,
            anti_forgery=self.anti_forgery,
            lock_manager=self.lock_manager,
            transport=self.transport,
            custom_headers=settings.custom_refresh_headers,
            expiry_status_code=settings.expiry_status_code,
            audit_logger=self.audit_logger,
        )
        self._intercept_globally = intercept
        self._api_domain = get_domain_from_url(settings.refresh_endpoint)
        self.settings = settings
        self.logger.info("Initialised for %s (intercept_globally=%s)", self._api_domain, intercept)

    async def dispose(self) -> None:
        if self._owns_transport and self.transport is not None:
            await self.transport.close()
            self.transport = None
            self._owns_transport = False
        self._coordinator = None
        self._intercept_globally = None
        self._api_domain = ""
        self.settings = None
        self.logger.info("Disposed")

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    def _require_init(self) -> RefreshCoordinator:
        if self._coordinator is None or self.settings is None:
            raise UninitializedError()
        return self._coordinator

    async def execute(
        self,
        request_builder: RequestBuilder,
        config: Optional[RequestConfig] = None,
        url: Optional[str] = None,
    ) -> httpx.Response:
        """Send a request through ``request_builder``, refreshing the session on expiry.

        An expiry the refresh cannot recover from is not an error: the server's
        own expiry response is returned (or its error re-raised).
        """
        self._require_init()
        config = dict(config or {})
        domain = get_domain_from_url(url) if url is not None else self._api_domain
        if self._intercept_globally and domain != self._api_domain:
            self.logger.debug("Bypassing session handling for %s", url)
            return await request_builder(config)
        try:
            return await self._send_with_refresh(request_builder, config)
        finally:
            if await self.token_store.get() is None:
                await self.anti_forgery.clear()

    async def _send_with_refresh(self, request_builder: RequestBuilder, config: RequestConfig) -> httpx.Response:
        assert self.settings is not None
        expiry = self.settings.expiry_status_code
        for attempt in range(1, self.settings.max_attempts + 1):
            # compared against the post-lock token to detect refreshes by other requests
            pre_request_token = await self.token_store.get()
            anti_forgery = await self.anti_forgery.get(pre_request_token)
            request_config = {
                **config,
                "headers": build_request_headers(config.get("headers"), anti_forgery),
            }
            try:
                response = await request_builder(request_config)
            except Exception as exc:
                if error_status(exc) != expiry:
                    raise
                if not await self.handle_unauthorised(pre_request_token):
                    raise
                self.logger.debug("Replaying request after refresh (attempt %d)", attempt)
                continue

            await self._apply(continuation_intents(response.headers))
            if response.status_code == expiry:
                if not await self.handle_unauthorised(pre_request_token):
                    return response
                self.logger.debug("Replaying request after refresh (attempt %d)", attempt)
                continue

            await self._apply(anti_forgery_intents(response.headers))
            return response

        raise RefreshLoopError(
            f"Request still unauthorised after {self.settings.max_attempts} attempts"
        )

    async def handle_unauthorised(self, pre_request_token: Optional[str]) -> bool:
        """Return True when the request should be replayed, False when the session is gone."""
        coordinator = self._require_init()
        if pre_request_token is None:
            # sent without a session; only worth replaying if one appeared since
            return await self.token_store.get() is not None
        result = await coordinator.coordinate(pre_request_token)
        if result.outcome is RefreshOutcome.SESSION_EXPIRED:
            return False
        if result.outcome is RefreshOutcome.API_ERROR:
            assert result.error is not None
            raise RefreshApiError(result.error) from result.error
        return True

    async def _apply(self, intents: Iterable[StoreIntent]) -> None:
        await apply_intents(intents, self.token_store, self.anti_forgery)

    async def fetch(self, url: str, **config: Any) -> httpx.Response:
        self._require_init()
        transport = self.transport
        assert transport is not None

        async def send(request_config: RequestConfig) -> httpx.Response:
            return await transport.send(url, request_config)

        return await self.execute(send, config, url)

    async def get(self, url: str, **config: Any) -> httpx.Response:
        return await self.fetch(url, **{"method": "GET", **config})

    async def post(self, url: str, **config: Any) -> httpx.Response:
        return await self.fetch(url, **{"method": "POST", **config})

    async def put(self, url: str, **config: Any) -> httpx.Response:
        return await self.fetch(url, **{"method": "PUT", **config})

    async def delete(self, url: str, **config: Any) -> httpx.Response:
        return await self.fetch(url, **{"method": "DELETE", **config})

    async def session_exists(self) -> bool:
        self._require_init()
        return await self.token_store.get() is not None
