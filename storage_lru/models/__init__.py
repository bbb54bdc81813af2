"""Pydantic models for storage-lru."""

from storage_lru.models.common import now_in_sec
from storage_lru.models.model_cache_control import CacheControl, parse_cache_control
from storage_lru.models.model_meta import MetaPatch, MetaRecord, ParsedRecord
from storage_lru.models.model_options import (
    LRUOptions,
    PurgeComparator,
    PurgedFn,
    RevalidateFn,
)
from storage_lru.models.model_stats import CacheStats, DiskUsage, GetResult

__all__ = [
    # Metadata models
    "MetaPatch",
    "MetaRecord",
    "ParsedRecord",
    # Cache control
    "CacheControl",
    "parse_cache_control",
    # Configuration
    "LRUOptions",
    "PurgeComparator",
    "PurgedFn",
    "RevalidateFn",
    # Statistics
    "CacheStats",
    "DiskUsage",
    "GetResult",
    # Helpers
    "now_in_sec",
]
