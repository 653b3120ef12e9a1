"""Key/value backends used by the token stores."""

from __future__ import annotations

import abc
import asyncio
import json
import os
from pathlib import Path
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken
from pydantic import StrictStr, TypeAdapter, ValidationError


STORE_KEY_ENV = "SESSIONGUARD_STORE_KEY"

_ITEMS = TypeAdapter(Dict[StrictStr, StrictStr])


class KeyValueStorage(abc.ABC):
    """Async string key/value storage."""

    @abc.abstractmethod
    async def get_item(self, key: str) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    async def set_item(self, key: str, value: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    @abc.abstractmethod
    async def remove_item(self, key: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """Process-local storage, mostly useful for tests and short-lived scripts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(KeyValueStorage):
    """JSON file persistence with optional Fernet encryption.

    The file is rewritten on every mutation so a crashed process never loses
    a token the server already rotated.
    """

    def __init__(self, path: Path, *, encryption_key: Optional[str] = None) -> None:
        self._path = path
        self._lock = asyncio.Lock()
        self._items: Dict[str, str] = {}
        self._fernet = self._init_fernet(encryption_key)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            self._load()

    def _init_fernet(self, key: Optional[str]) -> Optional[Fernet]:
        key = key or os.getenv(STORE_KEY_ENV)
        if not key:
            return None
        key_bytes = key.encode("utf-8") if isinstance(key, str) else key
        try:
            return Fernet(key_bytes)
        except Exception as exc:
            raise ValueError(f"Invalid {STORE_KEY_ENV} provided for FileStorage encryption") from exc

    def _load(self) -> None:
        raw = self._path.read_bytes()
        if not raw:
            return
        if self._fernet:
            try:
                raw = self._fernet.decrypt(raw)
            except InvalidToken as exc:
                raise ValueError("Unable to decrypt token storage with provided key") from exc
        try:
            self._items = _ITEMS.validate_json(raw)
        except ValidationError as exc:
            raise ValueError(f"Invalid token storage file {self._path}: {exc}") from exc

    def _dump(self) -> None:
        payload = json.dumps(self._items, indent=2).encode("utf-8")
        if self._fernet:
            payload = self._fernet.encrypt(payload)
        self._path.write_bytes(payload)

    async def get_item(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            self._items[key] = value
            await asyncio.to_thread(self._dump)

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            if key in self._items:
                del self._items[key]
                await asyncio.to_thread(self._dump)
