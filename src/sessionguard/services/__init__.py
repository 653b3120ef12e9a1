"""Collaborators used by the request pipeline."""

from .audit_logger import AuditLogger
from .transport import HttpxTransport, Transport

__all__ = [
    "AuditLogger",
    "HttpxTransport",
    "Transport",
]
