"""Statistics and read result models."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field


class DiskUsage(BaseModel):
    """Item count and total serialized size of the indexed records."""

    count: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)


class CacheStats(BaseModel):
    """Snapshot of the cache outcome counters."""

    hit: int = Field(default=0, ge=0, description="Reads served from the cache")
    miss: int = Field(default=0, ge=0, description="Absent or truly stale reads")
    stale: int = Field(default=0, ge=0, description="Hits served inside the stale window")
    error: int = Field(default=0, ge=0, description="Reads that failed to deserialize")
    revalidate_success: int = Field(default=0, ge=0)
    revalidate_failure: int = Field(default=0, ge=0)
    du: DiskUsage | None = Field(default=None, description="Present when requested")


@dataclass
class GetResult:
    """Value returned by a cache hit."""

    value: Any
    is_stale: bool = False
