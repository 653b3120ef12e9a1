"""Exception hierarchy raised by sessionguard."""

from __future__ import annotations

from typing import Optional

import httpx


class SessionGuardError(Exception):
    """Base class for every error raised by this package."""


class UninitializedError(SessionGuardError):
    """The client was used before ``init`` or after ``dispose``."""

    def __init__(self, message: str = "init function not called") -> None:
        super().__init__(message)


class TransportError(SessionGuardError):
    """Network or HTTP failure reported by a transport.

    ``status`` is set when the failure corresponds to an HTTP response.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.response = response

    @classmethod
    def from_response(cls, response: httpx.Response) -> "TransportError":
        try:
            target = f"{response.request.method} {response.request.url}"
        except RuntimeError:
            target = "Request"
        return cls(
            f"{target} returned {response.status_code}",
            status=response.status_code,
            response=response,
        )


class RefreshApiError(SessionGuardError):
    """The refresh endpoint failed with something other than session expiry."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(f"Refresh request failed: {error}")
        self.error = error
        self.status: Optional[int] = getattr(error, "status", None)


class RefreshLoopError(SessionGuardError):
    """A request exhausted its retry budget without reaching a decision."""


def error_status(error: BaseException) -> Optional[int]:
    """Return the HTTP status carried by ``error``, if any."""
    status = getattr(error, "status", None)
    if isinstance(status, int):
        return status
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None
