"""Session-continuation token persistence."""

from __future__ import annotations

from typing import Optional

from .storage import KeyValueStorage


TOMBSTONE = "remove"

CONTINUATION_KEY = "sessionguard-id-refresh-token"


class ContinuationTokenStore:
    """Holds the token identifying the current session generation.

    Setting the tombstone value erases the token; reads never return it.
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = CONTINUATION_KEY) -> None:
        self._storage = storage
        self._key = key

    async def get(self) -> Optional[str]:
        value = await self._storage.get_item(self._key)
        if value is None or value == TOMBSTONE:
            return None
        return value

    async def set(self, value: Optional[str]) -> None:
        if value is None or value == TOMBSTONE:
            await self._storage.remove_item(self._key)
        else:
            await self._storage.set_item(self._key, value)
