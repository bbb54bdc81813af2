"""LRU cache engine over an asynchronous key/value backend.

StorageLRU layers max-age expiry, stale-while-revalidate and priority-aware
purging on top of a backend that can only get, set, remove and enumerate
keys. Metadata travels inside each stored value (see RecordCodec), and an
in-memory MetaIndex mirrors it for the keys seen so far.

Write path:
    set_item -> backend write
      -> on failure with an empty backend: disable the cache
      -> on failure otherwise: purge, then retry the write once

Read path:
    get_item -> backend read -> decode
      -> truly stale: remove and report a miss
      -> otherwise: bump access time (best effort), revalidate if stale
"""

import asyncio
import inspect
import json
import logging
import math
from types import TracebackType
from typing import Any

from storage_lru.codec.record_codec import FormatError, ParseError, RecordCodec
from storage_lru.consts import DEFAULT_PRIORITY
from storage_lru.errors import (
    CacheControlError,
    DeserializeError,
    DisabledError,
    InvalidKeyError,
    NotEnoughSpaceError,
    RevalidateError,
    SerializeError,
)
from storage_lru.eviction import purge_comparator_at
from storage_lru.index.meta_index import MetaIndex
from storage_lru.models.common import now_in_sec
from storage_lru.models.model_cache_control import parse_cache_control
from storage_lru.models.model_meta import MetaRecord
from storage_lru.models.model_options import LRUOptions
from storage_lru.models.model_stats import CacheStats, GetResult
from storage_lru.stats import Stats
from storage_lru.storage.base import AsyncStorage, StorageError

logger = logging.getLogger(__name__)


class StorageLRU:
    """Expiring, self-purging cache on top of an AsyncStorage.

    A single instance owns its index and counters. Two instances sharing a
    backend and key prefix will not see each other's index updates.
    """

    def __init__(
        self,
        storage: AsyncStorage,
        options: LRUOptions | None = None,
        **overrides: Any,
    ):
        """Initialize StorageLRU.

        Args:
            storage: Backend holding the serialized records.
            options: Engine configuration. Defaults to LRUOptions().
            **overrides: Individual LRUOptions fields, applied on top of ``options``.
        """
        if options is None:
            options = LRUOptions(**overrides)
        elif overrides:
            options = LRUOptions(**{**dict(options), **overrides})

        self.options = options
        self._storage = storage
        self._codec = RecordCodec()
        self._purge_comparator = options.purge_comparator
        self._revalidate_fn = options.revalidate_fn
        self._index = MetaIndex(storage, self._codec, key_prefix=options.key_prefix)
        self._stats = Stats(self._index)
        self._enabled = True
        self._recheck_handle: asyncio.TimerHandle | None = None
        self._background: set[asyncio.Task] = set()

    async def __aenter__(self) -> "StorageLRU":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.join()
        self.close()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def index(self) -> MetaIndex:
        return self._index

    def stats(self, du: bool = False) -> CacheStats:
        """Report hit/miss/stale/error/revalidate counters.

        Args:
            du: Include count and size of the records indexed so far.
        """
        return self._stats.snapshot(du=du)

    def _prefix(self, key: str) -> str:
        return self.options.key_prefix + key

    def _deprefix(self, prefixed_key: str) -> str:
        prefix = self.options.key_prefix
        return prefixed_key[len(prefix) :] if prefix else prefixed_key

    def _serialize(self, value: Any, meta: MetaRecord, as_json: bool) -> str:
        if as_json:
            try:
                value = json.dumps(value, separators=(",", ":"))
            except (TypeError, ValueError) as e:
                raise SerializeError(str(e)) from e
        elif not isinstance(value, str):
            raise SerializeError(f"expected str value, got {type(value).__name__}")
        try:
            return self._codec.format(meta, value)
        except FormatError as e:
            raise SerializeError(str(e)) from e

    async def keys(self, limit: int) -> list[str]:
        """List unprefixed keys of this cache among the first ``limit`` backend keys."""
        keys = await self._storage.keys(limit)
        prefix = self.options.key_prefix
        return [self._deprefix(k) for k in keys if k.startswith(prefix)]

    async def load_index(self, limit: int) -> int:
        """Index up to ``limit`` backend keys ahead of time.

        Returns:
            Number of records added to the index.
        """
        return await self._index.populate(limit)

    async def get_item(self, key: str, as_json: bool = False) -> GetResult | None:
        """Read an item.

        Expired items still inside their stale-while-revalidate window are
        returned with ``is_stale=True`` and refreshed in the background when a
        revalidate function is configured.

        Args:
            key: Item key, without prefix.
            as_json: Decode the stored value as JSON.

        Returns:
            GetResult on a hit, None on a miss.

        Raises:
            InvalidKeyError: If key is empty.
            DeserializeError: If the stored payload cannot be decoded.
        """
        if not key:
            raise InvalidKeyError(key)

        prefixed_key = self._prefix(key)
        try:
            raw = await self._storage.get_item(prefixed_key)
        except StorageError as e:
            logger.warning(f"Read failed for key={key}, treating as miss: {e}")
            raw = None

        if not raw:
            self._stats.miss += 1
            self._index.remove(prefixed_key)
            logger.debug(f"Cache miss for key={key}")
            return None

        try:
            parsed = self._codec.parse(raw, key=prefixed_key)
            value = json.loads(parsed.value) if as_json else parsed.value
        except (ParseError, json.JSONDecodeError) as e:
            self._stats.error += 1
            raise DeserializeError(str(e)) from e

        now = now_in_sec()
        if parsed.meta.is_truly_stale(now):
            self._stats.miss += 1
            logger.debug(f"Cache miss for key={key} (truly stale)")
            try:
                await self.remove_item(key)
            except InvalidKeyError as e:
                logger.warning(f"Could not remove truly stale key={key}: {e.message}")
            return None

        self._stats.hit += 1
        bumped = parsed.meta.model_copy(update={"access": now})
        serialized = self._codec.format(bumped, parsed.value)
        try:
            await self._storage.set_item(prefixed_key, serialized)
        except StorageError as e:
            logger.warning(f"Access time update failed for key={key}: {e}")
        # Index follows the bump even when the write-back failed
        meta = self._index.update(
            prefixed_key, bumped.model_copy(update={"size": len(serialized)}).to_patch()
        )

        is_stale = meta.is_expired(now)
        if is_stale:
            self._stats.stale += 1
            logger.debug(f"Serving stale value for key={key}")
            self._schedule_revalidation(key, meta, as_json)
        return GetResult(value=value, is_stale=is_stale)

    def _schedule_revalidation(self, key: str, meta: MetaRecord, as_json: bool) -> None:
        if self._revalidate_fn is None:
            return
        self._track(asyncio.create_task(self._run_revalidation(key, meta, as_json)))

    async def _run_revalidation(self, key: str, meta: MetaRecord, as_json: bool) -> None:
        try:
            await self._revalidate(key, meta, as_json)
        except RevalidateError as e:
            logger.warning(f"Revalidation failed for key={key}: {e.message}")
        else:
            logger.debug(f"Revalidated key={key}")

    async def _revalidate(self, key: str, meta: MetaRecord, as_json: bool = False) -> None:
        """Refetch a stale item through revalidate_fn and store it.

        The refreshed record keeps access, max_age, stale and priority from
        ``meta``; only expires and size change.

        Raises:
            RevalidateError: If revalidate_fn failed or the result could not be stored.
        """
        if self._revalidate_fn is None:
            return

        try:
            value = await self._revalidate_fn(key)
        except Exception as e:
            self._stats.revalidate_failure += 1
            raise RevalidateError(str(e)) from e

        fresh = MetaRecord(
            key=meta.key,
            access=meta.access,
            max_age=meta.max_age,
            expires=now_in_sec() + meta.max_age,
            stale=meta.stale,
            priority=meta.priority,
        )
        try:
            serialized = self._serialize(value, fresh, as_json)
            await self._storage.set_item(meta.key, serialized)
        except (SerializeError, StorageError) as e:
            self._stats.revalidate_failure += 1
            raise RevalidateError(str(e)) from e

        self._index.update(meta.key, fresh.model_copy(update={"size": len(serialized)}).to_patch())
        self._stats.revalidate_success += 1

    async def set_item(
        self,
        key: str,
        value: Any,
        cache_control: str | None,
        as_json: bool = False,
        priority: int | None = None,
    ) -> None:
        """Store an item.

        Args:
            key: Item key, without prefix.
            value: A string, or any JSON-serializable value when ``as_json``.
            cache_control: Cache-Control style string; needs a positive max-age,
                e.g. ``"max-age=300,stale-while-revalidate=600"``.
            as_json: JSON-encode the value before storing.
            priority: Purge precedence, 1 is the most important. Defaults to 3.

        Raises:
            InvalidKeyError: If key is empty.
            DisabledError: If the backend is refusing all writes.
            CacheControlError: On no-cache, no-store or a missing/non-positive max-age.
            SerializeError: If the value cannot be encoded.
            NotEnoughSpaceError: If purging could not make room.
        """
        if not key:
            raise InvalidKeyError(key)
        if not self._enabled:
            raise DisabledError()

        cache_control_info = parse_cache_control(cache_control)
        if not cache_control_info.cacheable:
            raise CacheControlError(cache_control)

        now = now_in_sec()
        prefixed_key = self._prefix(key)
        meta = MetaRecord(
            key=prefixed_key,
            access=now,
            expires=now + cache_control_info.max_age,
            max_age=cache_control_info.max_age,
            stale=cache_control_info.stale_while_revalidate,
            priority=priority or DEFAULT_PRIORITY,
        )
        serialized = self._serialize(value, meta, as_json)

        try:
            await self._storage.set_item(prefixed_key, serialized)
        except StorageError as e:
            logger.info(f"Write failed for key={key}: {e}")
            await self._recover_and_retry(prefixed_key, serialized)

        self._index.update(prefixed_key, meta.model_copy(update={"size": len(serialized)}).to_patch())
        logger.debug(f"Stored key={key} ({len(serialized)} chars)")

    async def _has_any_key(self) -> bool:
        try:
            return len(await self._storage.keys(1)) > 0
        except StorageError as e:
            logger.warning(f"Key probe failed: {e}")
            return False

    async def _recover_and_retry(self, prefixed_key: str, serialized: str) -> None:
        # An empty backend that refuses writes is unavailable, not full
        if not await self._has_any_key():
            self._mark_as_disabled()
            raise DisabledError()

        await self.purge(len(serialized))
        try:
            await self._storage.set_item(prefixed_key, serialized)
        except StorageError as e:
            raise NotEnoughSpaceError(str(e)) from e

    async def remove_item(self, key: str) -> None:
        """Remove an item from the backend and the index.

        Raises:
            InvalidKeyError: If key is empty or the backend refused the removal.
        """
        if not key:
            raise InvalidKeyError(key)
        prefixed_key = self._prefix(key)
        try:
            await self._storage.remove_item(prefixed_key)
        except StorageError as e:
            raise InvalidKeyError(str(e)) from e
        self._index.remove(prefixed_key)

    def _mark_as_disabled(self) -> None:
        """Disable writes, re-enabling after recheck_delay when configured.

        The re-enable is optimistic: the next failing write disables again.
        """
        self._enabled = False
        if self._recheck_handle is not None:
            self._recheck_handle.cancel()
            self._recheck_handle = None

        delay = self.options.recheck_delay
        if delay >= 0:
            loop = asyncio.get_running_loop()
            self._recheck_handle = loop.call_later(delay, self._re_enable)
            logger.info(f"Storage unavailable, cache disabled; rechecking in {delay}s")
        else:
            logger.info("Storage unavailable, cache disabled")

    def _re_enable(self) -> None:
        self._recheck_handle = None
        self._enabled = True
        logger.info("Cache re-enabled")

    async def purge(self, space_needed: int) -> None:
        """Evict records until ``space_needed`` plus headroom is freed.

        Each attempt widens the index by purge_load_increase keys per attempt
        number, re-sorts it, and removes the most evictable records one by one,
        stopping as soon as enough space is freed. Purged keys are reported to
        purged_fn once, after the current call returns.

        Args:
            space_needed: Characters needed. The target is
                ``space_needed * (1 + purge_factor)``.

        Raises:
            NotEnoughSpaceError: If less than ``space_needed`` could be freed.
        """
        padding = math.floor(space_needed * self.options.purge_factor + 0.5)
        remaining = space_needed + padding
        purged: list[str] = []

        for attempt in range(1, self.options.max_purge_attempts + 1):
            if remaining <= 0:
                break
            limit = self._index.count + attempt * self.options.purge_load_increase
            try:
                await self._index.populate(limit)
            except StorageError as e:
                logger.warning(f"Could not grow index on purge attempt {attempt}: {e}")
            self._index.sort(self._purge_comparator or purge_comparator_at(now_in_sec()))
            remaining = await self._evict(remaining, purged)

        if purged:
            logger.info(f"Purged {len(purged)} items for {space_needed} chars")
            self._notify_purged(purged)

        if remaining > padding:
            raise NotEnoughSpaceError(f"still need {remaining - padding}")

    async def _evict(self, remaining: int, purged: list[str]) -> int:
        for record in self._index.records():
            if remaining <= 0:
                break
            try:
                await self._storage.remove_item(record.key)
            except StorageError as e:
                logger.warning(f"Could not purge key={record.key}: {e}")
                continue
            self._index.remove(record.key)
            purged.append(self._deprefix(record.key))
            remaining -= record.size
        return remaining

    def _notify_purged(self, purged: list[str]) -> None:
        if self.options.purged_fn is None:
            return
        self._track(asyncio.create_task(self._run_purged_fn(list(purged))))

    async def _run_purged_fn(self, purged: list[str]) -> None:
        try:
            result = self.options.purged_fn(purged)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("purged_fn raised")

    def _track(self, task: asyncio.Task) -> None:
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def join(self) -> None:
        """Wait for pending revalidations and purge notifications."""
        while self._background:
            await asyncio.gather(*list(self._background))

    def close(self) -> None:
        """Cancel a pending re-enable timer."""
        if self._recheck_handle is not None:
            self._recheck_handle.cancel()
            self._recheck_handle = None
