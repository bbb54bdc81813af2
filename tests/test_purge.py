"""Tests for StorageLRU.purge, keys and stats."""

from unittest.mock import patch

import pytest
from conftest import EXPECTED_PURGE_ORDER, PREFIX, SAMPLE_RECORDS, generate_items

from storage_lru.engine import StorageLRU
from storage_lru.errors import NotEnoughSpaceError
from storage_lru.models.model_meta import MetaRecord
from storage_lru.models.model_options import LRUOptions
from storage_lru.storage.memory import MemoryStorage
from storage_lru.storage.sync_wrapper import SyncWrapper


def _make_lru(store: MemoryStorage, purged: list[str], **overrides) -> StorageLRU:
    return StorageLRU(SyncWrapper(store), key_prefix=PREFIX, purged_fn=purged.extend, **overrides)


class TestPurge:
    """Tests for eviction order and the amount of space freed."""

    @pytest.mark.asyncio
    async def test_purge_everything(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged)

        with pytest.raises(NotEnoughSpaceError) as exc_info:
            await lru.purge(10000)
        await lru.join()

        assert exc_info.value.code == 6
        assert purged == EXPECTED_PURGE_ORDER
        assert memory_store.data == {}
        assert len(lru.index) == 0

    @pytest.mark.asyncio
    async def test_purge_single_record(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged)

        await lru.purge(3)
        await lru.join()

        assert purged == ["bad"]
        assert "TEST_bad" not in memory_store.data
        assert len(memory_store) == len(SAMPLE_RECORDS) - 1

    @pytest.mark.asyncio
    async def test_purge_two_records(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged)

        await lru.purge(50)
        await lru.join()

        assert purged == ["bad", "trulyStale"]

    @pytest.mark.asyncio
    async def test_purge_factor_zero(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged, purge_factor=0)

        await lru.purge(24)
        await lru.join()

        assert purged == ["bad"]

    @pytest.mark.asyncio
    async def test_succeeds_when_only_headroom_is_missing(self) -> None:
        # 24 chars freed against a target of 40, of which 20 is headroom
        store = MemoryStorage(generate_items(PREFIX, [SAMPLE_RECORDS[-1]]))
        purged: list[str] = []
        lru = _make_lru(store, purged)

        await lru.purge(20)
        await lru.join()

        assert purged == ["bad"]

    @pytest.mark.asyncio
    async def test_default_order_reads_clock_once_per_sort(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged)

        with patch("storage_lru.eviction.now_in_sec", side_effect=AssertionError):
            with pytest.raises(NotEnoughSpaceError):
                await lru.purge(10000)
        await lru.join()

        assert purged == EXPECTED_PURGE_ORDER

    @pytest.mark.asyncio
    async def test_purged_fn_called_once(self, memory_store: MemoryStorage) -> None:
        calls: list[list[str]] = []
        lru = StorageLRU(SyncWrapper(memory_store), key_prefix=PREFIX, purged_fn=calls.append)

        await lru.purge(50)
        await lru.join()

        assert calls == [["bad", "trulyStale"]]

    @pytest.mark.asyncio
    async def test_async_purged_fn(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []

        async def on_purged(keys: list[str]) -> None:
            purged.extend(keys)

        lru = StorageLRU(SyncWrapper(memory_store), key_prefix=PREFIX, purged_fn=on_purged)
        await lru.purge(3)
        await lru.join()

        assert purged == ["bad"]

    @pytest.mark.asyncio
    async def test_purged_fn_failure_is_contained(self, memory_store: MemoryStorage) -> None:
        def on_purged(keys: list[str]) -> None:
            raise RuntimeError("listener broke")

        lru = StorageLRU(SyncWrapper(memory_store), key_prefix=PREFIX, purged_fn=on_purged)
        await lru.purge(3)
        await lru.join()

        assert "TEST_bad" not in memory_store.data

    @pytest.mark.asyncio
    async def test_nothing_purged_does_not_notify(self) -> None:
        calls: list[list[str]] = []
        lru = StorageLRU(SyncWrapper(MemoryStorage()), purged_fn=calls.append)

        with pytest.raises(NotEnoughSpaceError):
            await lru.purge(10)
        await lru.join()

        assert calls == []

    @pytest.mark.asyncio
    async def test_attempts_widen_the_index(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged, purge_load_increase=2)

        with pytest.raises(NotEnoughSpaceError):
            await lru.purge(10000)
        await lru.join()

        # First attempt sees 2 keys, second sees the next 4
        assert purged == [
            "fresh",
            "fresh-lastAccessed",
            "trulyStale",
            "stale-lowpriority",
            "stale",
            "fresh-lastAccessed-biggerrecord",
        ]
        assert list(memory_store.data) == ["TEST_bad"]

    @pytest.mark.asyncio
    async def test_single_attempt(self, memory_store: MemoryStorage) -> None:
        purged: list[str] = []
        lru = _make_lru(memory_store, purged, purge_load_increase=2, max_purge_attempts=1)

        with pytest.raises(NotEnoughSpaceError):
            await lru.purge(10000)
        await lru.join()

        assert purged == ["fresh", "fresh-lastAccessed"]

    @pytest.mark.asyncio
    async def test_custom_comparator(self, memory_store: MemoryStorage) -> None:
        def reverse_key_order(m1: MetaRecord, m2: MetaRecord) -> int:
            return (m1.key < m2.key) - (m1.key > m2.key)

        purged: list[str] = []
        lru = _make_lru(memory_store, purged, purge_comparator=reverse_key_order)

        await lru.purge(3)
        await lru.join()

        assert purged == ["trulyStale"]

    @pytest.mark.asyncio
    async def test_ignores_other_namespaces(self, sample_items: dict[str, str]) -> None:
        other = generate_items("OTHER_", SAMPLE_RECORDS)
        store = MemoryStorage({**other, **sample_items})
        purged: list[str] = []
        lru = _make_lru(store, purged)

        with pytest.raises(NotEnoughSpaceError):
            await lru.purge(10000)
        await lru.join()

        assert purged == EXPECTED_PURGE_ORDER
        assert sorted(store.data) == sorted(other)


class TestKeysAndStats:
    """Tests for key enumeration, disk usage and option handling."""

    @pytest.mark.asyncio
    async def test_keys(self, lru: StorageLRU) -> None:
        keys = await lru.keys(100)
        assert keys == [r["key"] for r in SAMPLE_RECORDS]

    @pytest.mark.asyncio
    async def test_keys_limit(self, lru: StorageLRU) -> None:
        assert await lru.keys(2) == ["fresh-lastAccessed", "fresh"]

    @pytest.mark.asyncio
    async def test_keys_filters_prefix(self, sample_items: dict[str, str]) -> None:
        store = MemoryStorage({"OTHER_x": "[1:0:0:0:0:3]x", **sample_items})
        lru = StorageLRU(SyncWrapper(store), key_prefix=PREFIX)
        keys = await lru.keys(100)
        assert "OTHER_x" not in keys
        assert "x" not in keys
        assert len(keys) == len(SAMPLE_RECORDS)

    @pytest.mark.asyncio
    async def test_disk_usage(self, lru: StorageLRU, memory_store: MemoryStorage) -> None:
        assert lru.stats().du is None
        assert lru.stats(du=True).du.count == 0

        added = await lru.load_index(100)

        du = lru.stats(du=True).du
        assert added == len(SAMPLE_RECORDS)
        assert du.count == len(SAMPLE_RECORDS)
        assert du.size == sum(len(v) for v in memory_store.data.values())
        assert await lru.load_index(100) == 0

    def test_option_overrides(self, storage) -> None:
        base = LRUOptions(key_prefix="A_", purge_factor=2)
        lru = StorageLRU(storage, base, purge_factor=0.5)
        assert lru.options.key_prefix == "A_"
        assert lru.options.purge_factor == 0.5
        assert base.purge_factor == 2

    def test_default_options(self, storage) -> None:
        lru = StorageLRU(storage)
        assert lru.options.recheck_delay == -1
        assert lru.options.key_prefix == ""
        assert lru.options.max_purge_attempts == 2
        assert lru.options.purge_load_increase == 500
        assert lru.enabled is True

    @pytest.mark.asyncio
    async def test_context_manager_waits_for_background_work(
        self, memory_store: MemoryStorage
    ) -> None:
        purged: list[str] = []
        async with _make_lru(memory_store, purged) as lru:
            await lru.purge(3)
        assert purged == ["bad"]
