"""storage-lru: an expiring, self-purging LRU cache over any key/value store."""

from storage_lru.codec import FormatError, ParseError, RecordCodec
from storage_lru.engine import StorageLRU
from storage_lru.errors import (
    CacheControlError,
    DeserializeError,
    DisabledError,
    ErrorCode,
    InvalidKeyError,
    NotEnoughSpaceError,
    RevalidateError,
    SerializeError,
    StorageLRUError,
)
from storage_lru.eviction import default_purge_comparator, purge_comparator_at
from storage_lru.models import CacheStats, GetResult, LRUOptions, MetaRecord
from storage_lru.revalidators import HttpRevalidator
from storage_lru.storage import (
    AsyncStorage,
    FileStorage,
    MemoryStorage,
    StorageError,
    SyncWrapper,
)

__all__ = [
    # Engine
    "StorageLRU",
    "LRUOptions",
    "CacheStats",
    "GetResult",
    "MetaRecord",
    "default_purge_comparator",
    "purge_comparator_at",
    "HttpRevalidator",
    # Codec
    "FormatError",
    "ParseError",
    "RecordCodec",
    # Storage
    "AsyncStorage",
    "FileStorage",
    "MemoryStorage",
    "StorageError",
    "SyncWrapper",
    # Errors
    "CacheControlError",
    "DeserializeError",
    "DisabledError",
    "ErrorCode",
    "InvalidKeyError",
    "NotEnoughSpaceError",
    "RevalidateError",
    "SerializeError",
    "StorageLRUError",
]
