"""Cache outcome counters."""

from storage_lru.index.meta_index import MetaIndex
from storage_lru.models.model_stats import CacheStats


class Stats:
    """Monotonic counters, one increment per terminal read/revalidate outcome."""

    def __init__(self, index: MetaIndex):
        self.hit = 0
        self.miss = 0
        self.stale = 0
        self.error = 0
        self.revalidate_success = 0
        self.revalidate_failure = 0
        self._index = index

    def snapshot(self, du: bool = False) -> CacheStats:
        """Return a read-only copy of the counters.

        Args:
            du: Include count and size of the indexed records.
        """
        return CacheStats(
            hit=self.hit,
            miss=self.miss,
            stale=self.stale,
            error=self.error,
            revalidate_success=self.revalidate_success,
            revalidate_failure=self.revalidate_failure,
            du=self._index.du() if du else None,
        )
