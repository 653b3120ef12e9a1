"""JSON Lines audit trail of refresh exchanges."""

from __future__ import annotations

import asyncio
import datetime as dt
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from sessionguard.core.models import RefreshOutcome


AUDIT_LOG_ENV = "SESSIONGUARD_AUDIT_LOG"


class AuditLogger:
    """One line per refresh exchange: endpoint, HTTP status and outcome.

    Token values are never written.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        target = path or Path(os.getenv(AUDIT_LOG_ENV, "artifacts/sessionguard-audit.log"))
        target.parent.mkdir(parents=True, exist_ok=True)
        self._path = target
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def log_exchange(self, *, endpoint: str, status: Optional[int], outcome: RefreshOutcome) -> None:
        await self._write(
            {
                "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
                "event": "refresh.exchange",
                "payload": {"endpoint": endpoint, "status": status, "outcome": outcome.value},
            }
        )

    async def _write(self, record: Dict[str, Any]) -> None:
        async with self._lock:
            await asyncio.to_thread(self._append_line, record)

    def _append_line(self, record: Dict[str, Any]) -> None:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=True))
            fh.write("\n")
