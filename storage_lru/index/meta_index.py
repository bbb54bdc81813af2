"""Lazily populated metadata index.

The backend only offers get/set/remove and ordered key enumeration, so the
index starts empty and grows: every get/set records the key it touched, and
populate() pulls in further keys when a purge needs a wider view. The index
is a cache of derived state. The stored payload is always authoritative.
"""

import asyncio
import functools
import logging

from storage_lru.codec.record_codec import ParseError, RecordCodec
from storage_lru.models.model_meta import MetaPatch, MetaRecord
from storage_lru.models.model_options import PurgeComparator
from storage_lru.models.model_stats import DiskUsage
from storage_lru.storage.base import AsyncStorage, StorageError

logger = logging.getLogger(__name__)


class MetaIndex:
    """Map of backend key to MetaRecord, kept in a sortable order."""

    def __init__(self, storage: AsyncStorage, codec: RecordCodec, key_prefix: str = ""):
        self._storage = storage
        self._codec = codec
        self.key_prefix = key_prefix
        self._records: dict[str, MetaRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    @property
    def count(self) -> int:
        return len(self._records)

    def record_for(self, key: str, raw: str) -> MetaRecord:
        """Build the record for a stored payload. Unparseable payloads become bad records."""
        try:
            return self._codec.parse(raw, key=key).meta
        except ParseError as e:
            logger.debug(f"Bad record for key={key}: {e}")
            return MetaRecord(key=key, size=len(raw), bad=True)

    async def _fetch(self, key: str) -> str | None:
        try:
            return await self._storage.get_item(key)
        except StorageError as e:
            logger.warning(f"Skipping key={key} while indexing: {e}")
            return None

    async def populate(self, limit: int) -> int:
        """Index backend keys not seen yet among the first ``limit`` keys.

        Values are fetched concurrently and the call returns once every fetch
        has completed. Not safe to run concurrently with itself.

        Args:
            limit: Total number of backend keys to enumerate.

        Returns:
            Number of records added.

        Raises:
            StorageError: If the backend could not enumerate its keys.
        """
        keys = await self._storage.keys(limit)
        pending = [k for k in keys if k not in self._records and k.startswith(self.key_prefix)]
        if not pending:
            return 0

        raws = await asyncio.gather(*(self._fetch(key) for key in pending))
        added = 0
        for key, raw in zip(pending, raws):
            # A concurrent get/set may have indexed the key with fresher data
            if raw is None or key in self._records:
                continue
            self._records[key] = self.record_for(key, raw)
            added += 1
        logger.debug(f"Indexed {added} of {len(keys)} enumerated keys")
        return added

    def get(self, key: str) -> MetaRecord | None:
        return self._records.get(key)

    def update(self, key: str, patch: MetaPatch) -> MetaRecord:
        """Merge a patch into the record for ``key``, creating it if needed."""
        current = self._records.get(key) or MetaRecord(key=key)
        record = current.apply(patch)
        self._records[key] = record
        return record

    def remove(self, key: str) -> None:
        self._records.pop(key, None)

    def sort(self, comparator: PurgeComparator) -> None:
        """Reorder the index, most evictable record first."""
        ordered = sorted(self._records.values(), key=functools.cmp_to_key(comparator))
        self._records = {record.key: record for record in ordered}

    def records(self) -> list[MetaRecord]:
        """Records in current index order."""
        return list(self._records.values())

    def du(self) -> DiskUsage:
        return DiskUsage(
            count=len(self._records),
            size=sum(record.size for record in self._records.values()),
        )
