"""Data models shared by the request pipeline and the refresh coordinator."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional


RequestConfig = Dict[str, Any]

REFRESH_LOCK_NAME = "REFRESH_TOKEN_USE"


class RefreshOutcome(enum.Enum):
    """Result of one pass through the refresh critical section."""

    SESSION_EXPIRED = "session_expired"
    RETRY = "retry"
    API_ERROR = "api_error"


@dataclass(frozen=True, slots=True)
class RefreshResult:
    outcome: RefreshOutcome
    error: Optional[BaseException] = None

    @classmethod
    def expired(cls) -> "RefreshResult":
        return cls(RefreshOutcome.SESSION_EXPIRED)

    @classmethod
    def retry(cls) -> "RefreshResult":
        return cls(RefreshOutcome.RETRY)

    @classmethod
    def api_error(cls, error: BaseException) -> "RefreshResult":
        return cls(RefreshOutcome.API_ERROR, error)


class IntentKind(str, enum.Enum):
    """Store mutations requested by a response."""

    SET_CONTINUATION = "set_continuation"
    CLEAR_CONTINUATION = "clear_continuation"
    SET_ANTI_FORGERY = "set_anti_forgery"


@dataclass(frozen=True, slots=True)
class StoreIntent:
    kind: IntentKind
    value: Optional[str] = None
