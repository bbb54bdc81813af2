"""Key/value backends for the cache engine.

This module provides:
- AsyncStorage: Abstract base class the engine consumes
- SyncWrapper: Adapter from a synchronous store to AsyncStorage
- MemoryStorage: In-memory store with an optional quota
- FileStorage: Directory-backed store with an optional quota
"""

from storage_lru.storage.base import (
    AsyncStorage,
    QuotaExceededError,
    StorageError,
    SyncStorage,
)
from storage_lru.storage.file_storage import FileStorage
from storage_lru.storage.memory import MemoryStorage
from storage_lru.storage.sync_wrapper import SyncWrapper

__all__ = [
    "AsyncStorage",
    "FileStorage",
    "MemoryStorage",
    "QuotaExceededError",
    "StorageError",
    "SyncStorage",
    "SyncWrapper",
]
