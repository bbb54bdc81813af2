"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from storage_lru.engine import StorageLRU
from storage_lru.models.common import now_in_sec
from storage_lru.storage.memory import MemoryStorage
from storage_lru.storage.sync_wrapper import SyncWrapper

PREFIX = "TEST_"


def generate_items(key_prefix: str, records: list[dict[str, Any]]) -> dict[str, str]:
    """Build raw backend payloads with timestamps relative to now.

    Each record takes ``key``, ``value`` and either ``bad=True`` or
    ``access_delta``/``expires_delta``/``stale`` plus optional ``max_age`` and
    ``priority``.
    """
    now = now_in_sec()
    items: dict[str, str] = {}
    for i, record in enumerate(records):
        key = key_prefix + str(record.get("key", i))
        if record.get("bad"):
            items[key] = "noMetaJunk" + record["value"]
            continue
        fields = [
            "1",
            now + record["access_delta"],
            now + record["expires_delta"],
            record.get("max_age", 600),
            record["stale"],
            record.get("priority", 3),
        ]
        items[key] = "[" + ":".join(str(f) for f in fields) + "]" + record["value"]
    return items


SAMPLE_RECORDS: list[dict[str, Any]] = [
    {
        "key": "fresh-lastAccessed",
        "expires_delta": 60,
        "stale": 0,
        "access_delta": -30,
        "value": "expires in 1min, stale=0, last accessed 30secs ago",
    },
    {
        "key": "fresh",
        "expires_delta": 60,
        "stale": 0,
        "access_delta": -300,
        "value": "expires in 1min, stale=0, last accessed 5mins ago",
    },
    {
        "key": "fresh-lastAccessed-biggerrecord",
        "expires_delta": 60,
        "stale": 0,
        "access_delta": -30,
        "value": "expires in 1min, stale=0, last accessed 30secs ago, blahblahblah",
    },
    {
        "key": "stale-lowpriority",
        "expires_delta": -60,
        "stale": 300,
        "access_delta": -600,
        "priority": 5,
        "value": "expired 1min ago, stale=5, last accessed 10mins ago, priority=5",
    },
    {
        "key": "stale",
        "expires_delta": -60,
        "stale": 300,
        "access_delta": -600,
        "value": "expired 1min ago, stale=5, last accessed 10mins ago",
    },
    {
        "key": "trulyStale",
        "expires_delta": -60,
        "stale": 0,
        "access_delta": -30,
        "value": "expired 1min ago, stale=0, last accessed 30secs ago",
    },
    {
        "key": "bad",
        "bad": True,
        "value": "invalid format",
    },
]

# Purge order of SAMPLE_RECORDS under the default comparator
EXPECTED_PURGE_ORDER = [
    "bad",
    "trulyStale",
    "stale-lowpriority",
    "stale",
    "fresh",
    "fresh-lastAccessed-biggerrecord",
    "fresh-lastAccessed",
]


@pytest.fixture
def sample_items() -> dict[str, str]:
    """Raw payloads for the sample records under the TEST_ prefix."""
    return generate_items(PREFIX, SAMPLE_RECORDS)


@pytest.fixture
def memory_store(sample_items: dict[str, str]) -> MemoryStorage:
    """In-memory store seeded with the sample records."""
    return MemoryStorage(sample_items)


@pytest.fixture
def storage(memory_store: MemoryStorage) -> SyncWrapper:
    """Async view over the seeded memory store."""
    return SyncWrapper(memory_store)


@pytest.fixture
def lru(storage: SyncWrapper) -> StorageLRU:
    """Cache engine over the sample records."""
    return StorageLRU(storage, key_prefix=PREFIX)
