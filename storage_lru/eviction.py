"""Purge ordering.

Records sort most-evictable first. The default order breaks ties in this
sequence:

1. bad records (unparseable payloads)
2. truly stale records (past the stale-while-revalidate window)
3. less important priority (larger number) first
4. least recently accessed
5. larger serialized size
"""

from storage_lru.models.common import now_in_sec
from storage_lru.models.model_meta import MetaRecord
from storage_lru.models.model_options import PurgeComparator


def eviction_key(record: MetaRecord, now: int) -> tuple[bool, bool, int, int, int]:
    """Sort key placing the record that should be purged first lowest."""
    return (
        not record.bad,
        not record.is_truly_stale(now),
        -record.priority,
        record.access,
        -record.size,
    )


def purge_comparator_at(now: int) -> PurgeComparator:
    """Default comparator with staleness judged against a fixed ``now``.

    Build one per sort so every comparison in it sees the same clock.
    """

    def compare(meta1: MetaRecord, meta2: MetaRecord) -> int:
        key1 = eviction_key(meta1, now)
        key2 = eviction_key(meta2, now)
        return (key1 > key2) - (key1 < key2)

    return compare


def default_purge_comparator(meta1: MetaRecord, meta2: MetaRecord) -> int:
    """cmp-style comparator, negative when ``meta1`` is purged first.

    Reads the clock on every call. Sorting code should use purge_comparator_at.
    """
    return purge_comparator_at(now_in_sec())(meta1, meta2)
