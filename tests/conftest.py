from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from sessionguard.core.pipeline import SessionClient
from sessionguard.data.storage import MemoryStorage
from sessionguard.services.transport import HttpxTransport


REFRESH_URL = "https://api.example.com/auth/refresh"


@pytest.fixture
def make_client() -> Callable[..., SessionClient]:
    """Factory for initialised clients whose network is the given MockTransport handler."""

    def factory(handler, *, audit_logger=None, **options: Any) -> SessionClient:
        client = SessionClient(
            storage=MemoryStorage(),
            transport=HttpxTransport(transport=httpx.MockTransport(handler)),
            audit_logger=audit_logger,
        )
        client.init(refresh_endpoint=REFRESH_URL, **options)
        return client

    return factory
