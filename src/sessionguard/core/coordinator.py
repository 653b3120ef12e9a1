"""Single-flight coordination of session refresh exchanges."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from sessionguard.core.errors import TransportError, error_status
from sessionguard.core.headers import anti_forgery_intents, build_request_headers, refresh_intents
from sessionguard.core.locks import LockManager
from sessionguard.core.models import REFRESH_LOCK_NAME, IntentKind, RefreshResult, StoreIntent
from sessionguard.data.anti_forgery import AntiForgeryStore
from sessionguard.data.token_store import TOMBSTONE, ContinuationTokenStore
from sessionguard.services.audit_logger import AuditLogger
from sessionguard.services.transport import Transport
from sessionguard.utils.logging import get_logger


async def apply_intents(
    intents: Iterable[StoreIntent],
    token_store: ContinuationTokenStore,
    anti_forgery: AntiForgeryStore,
) -> None:
    """Apply store mutations in order; anti-forgery values bind to the token read at that moment."""
    for intent in intents:
        if intent.kind is IntentKind.SET_CONTINUATION:
            await token_store.set(intent.value)
        elif intent.kind is IntentKind.CLEAR_CONTINUATION:
            await token_store.set(TOMBSTONE)
        elif intent.kind is IntentKind.SET_ANTI_FORGERY and intent.value is not None:
            await anti_forgery.set(intent.value, await token_store.get())


class RefreshCoordinator:
    """Turns any number of concurrent expiry detections into at most one refresh call.

    Every caller passes the continuation token it sent its request with. Once
    inside the lock, a different stored token means another caller already
    refreshed, so only the caller whose token is still current talks to the
    refresh endpoint.
    """

    def __init__(
        self,
        *,
        refresh_endpoint: str,
        token_store: ContinuationTokenStore,
        anti_forgery: AntiForgeryStore,
        lock_manager: LockManager,
        transport: Transport,
        custom_headers: Optional[Mapping[str, str]] = None,
        expiry_status_code: int = 401,
        audit_logger: Optional[AuditLogger] = None,
        lock_name: str = REFRESH_LOCK_NAME,
    ) -> None:
        self.refresh_endpoint = refresh_endpoint
        self.token_store = token_store
        self.anti_forgery = anti_forgery
        self.lock_manager = lock_manager
        self.transport = transport
        self.custom_headers = dict(custom_headers or {})
        self.expiry_status_code = expiry_status_code
        self.audit_logger = audit_logger
        self.lock_name = lock_name
        self.logger = get_logger("RefreshCoordinator")

    async def coordinate(self, pre_request_token: str) -> RefreshResult:
        async with self.lock_manager.lock(self.lock_name):
            post_lock_token = await self.token_store.get()
            if post_lock_token is None:
                self.logger.debug("Session removed while waiting for the refresh lock")
                return RefreshResult.expired()
            if post_lock_token != pre_request_token:
                self.logger.debug("Session already refreshed by another request")
                return RefreshResult.retry()

            status: Optional[int] = None
            try:
                status, result = await self._refresh(post_lock_token)
            except Exception as exc:
                status = error_status(exc)
                if await self.token_store.get() is None:
                    result = RefreshResult.expired()
                else:
                    self.logger.warning("Refresh request failed: %s", exc)
                    result = RefreshResult.api_error(exc)
            self.logger.info("Refresh exchange finished: %s (status=%s)", result.outcome.value, status)
            if self.audit_logger is not None:
                await self.audit_logger.log_exchange(
                    endpoint=self.refresh_endpoint, status=status, outcome=result.outcome
                )
            return result

    async def _refresh(self, token: str) -> tuple[int, RefreshResult]:
        anti_forgery = await self.anti_forgery.get(token)
        headers = build_request_headers(self.custom_headers, anti_forgery)
        response = await self.transport.send(self.refresh_endpoint, {"method": "POST", "headers": headers})
        status = response.status_code
        await apply_intents(
            refresh_intents(status, response.headers, self.expiry_status_code),
            self.token_store,
            self.anti_forgery,
        )
        if status >= 300:
            await response.aread()
            raise TransportError.from_response(response)
        if await self.token_store.get() is None:
            return status, RefreshResult.expired()
        await apply_intents(anti_forgery_intents(response.headers), self.token_store, self.anti_forgery)
        return status, RefreshResult.retry()
