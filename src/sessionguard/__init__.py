"""Transparent session refresh for async HTTP clients."""

from .version import __version__
from .core import (
    PipelineSettings,
    RefreshApiError,
    RefreshLoopError,
    RefreshOutcome,
    SessionClient,
    SessionGuardError,
    TransportError,
    UninitializedError,
)

__all__ = [
    "__version__",
    "PipelineSettings",
    "RefreshApiError",
    "RefreshLoopError",
    "RefreshOutcome",
    "SessionClient",
    "SessionGuardError",
    "TransportError",
    "UninitializedError",
]
