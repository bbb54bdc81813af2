"""Engine configuration."""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, Field

from storage_lru.consts import (
    DEFAULT_KEY_PREFIX,
    DEFAULT_MAX_PURGE_ATTEMPTS,
    DEFAULT_PURGE_FACTOR,
    DEFAULT_PURGE_LOAD_INCREASE,
    DEFAULT_RECHECK_DELAY,
)
from storage_lru.models.model_meta import MetaRecord

PurgedFn = Callable[[list[str]], Any]
PurgeComparator = Callable[[MetaRecord, MetaRecord], int]
RevalidateFn = Callable[[str], Awaitable[Any]]


class LRUOptions(BaseModel):
    """Options accepted by StorageLRU.

    ``purge_comparator`` follows ``functools.cmp_to_key`` conventions: a
    negative result means the first record is purged before the second.
    ``revalidate_fn`` receives the unprefixed key and returns the fresh value
    or raises.
    """

    recheck_delay: float = Field(
        default=DEFAULT_RECHECK_DELAY,
        description="Seconds before a disabled cache re-enables itself, negative to never",
    )
    key_prefix: str = Field(default=DEFAULT_KEY_PREFIX, description="Namespace for backend keys")
    purge_factor: float = Field(
        default=DEFAULT_PURGE_FACTOR, ge=0.0, description="Extra space purged, as a multiple"
    )
    max_purge_attempts: int = Field(default=DEFAULT_MAX_PURGE_ATTEMPTS, ge=1)
    purge_load_increase: int = Field(default=DEFAULT_PURGE_LOAD_INCREASE, ge=1)
    purged_fn: PurgedFn | None = Field(default=None, description="Notified of purged keys")
    purge_comparator: PurgeComparator | None = Field(default=None)
    revalidate_fn: RevalidateFn | None = Field(default=None)
