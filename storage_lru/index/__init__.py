"""In-memory metadata index over stored records."""

from storage_lru.index.meta_index import MetaIndex

__all__ = ["MetaIndex"]
