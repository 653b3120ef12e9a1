"""Anti-forgery token persistence bound to a continuation token."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, StrictStr, ValidationError

from .storage import KeyValueStorage


ANTI_FORGERY_KEY = "sessionguard-anti-csrf"


class AntiForgeryRecord(BaseModel):
    """Stored anti-forgery token and the continuation token it was issued for."""

    value: StrictStr
    bound_to: StrictStr


class AntiForgeryStore:
    """Stores the anti-forgery token together with the session it belongs to.

    ``get`` only answers for the continuation token the value was stored
    against, so a token minted for an older session is never handed out.
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = ANTI_FORGERY_KEY) -> None:
        self._storage = storage
        self._key = key

    async def get(self, current_continuation: Optional[str]) -> Optional[str]:
        if current_continuation is None:
            return None
        raw = await self._storage.get_item(self._key)
        if raw is None:
            return None
        try:
            record = AntiForgeryRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise ValueError(f"Invalid anti-forgery token record: {exc}") from exc
        if record.bound_to != current_continuation:
            return None
        return record.value

    async def set(self, value: str, current_continuation: Optional[str]) -> None:
        if current_continuation is None:
            await self.clear()
            return
        record = AntiForgeryRecord(value=value, bound_to=current_continuation)
        await self._storage.set_item(self._key, record.model_dump_json())

    async def clear(self) -> None:
        await self._storage.remove_item(self._key)
