"""Persistence for session-continuation and anti-forgery tokens."""

from .anti_forgery import AntiForgeryStore
from .storage import FileStorage, KeyValueStorage, MemoryStorage
from .token_store import TOMBSTONE, ContinuationTokenStore

__all__ = [
    "AntiForgeryStore",
    "ContinuationTokenStore",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "TOMBSTONE",
]
