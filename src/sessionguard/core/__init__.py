"""Refresh coordination protocol and request pipeline."""

from .coordinator import RefreshCoordinator
from .errors import (
    RefreshApiError,
    RefreshLoopError,
    SessionGuardError,
    TransportError,
    UninitializedError,
)
from .locks import AsyncioLockManager, LockManager
from .models import REFRESH_LOCK_NAME, IntentKind, RefreshOutcome, RefreshResult, StoreIntent
from .pipeline import SessionClient
from .settings import PipelineSettings

__all__ = [
    "AsyncioLockManager",
    "IntentKind",
    "LockManager",
    "PipelineSettings",
    "REFRESH_LOCK_NAME",
    "RefreshApiError",
    "RefreshCoordinator",
    "RefreshLoopError",
    "RefreshOutcome",
    "RefreshResult",
    "SessionClient",
    "SessionGuardError",
    "StoreIntent",
    "TransportError",
    "UninitializedError",
]
