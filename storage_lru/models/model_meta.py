"""Per-item metadata models.

A MetaRecord is never mutated. Updates go through a MetaPatch and produce a
new record, so a record handed to a comparator cannot change underneath it.
"""

from pydantic import BaseModel, ConfigDict, Field

from storage_lru.consts import CUR_VERSION


class MetaPatch(BaseModel):
    """Partial metadata update. Only fields that are set get merged."""

    access: int | None = Field(default=None, description="Last access, epoch seconds")
    expires: int | None = Field(default=None, description="Absolute expiry, epoch seconds")
    max_age: int | None = Field(default=None, description="Freshness window in seconds")
    stale: int | None = Field(default=None, description="Stale-while-revalidate window")
    priority: int | None = Field(default=None, description="Purge precedence, 1 is highest")
    size: int | None = Field(default=None, ge=0, description="Serialized record length")
    version: str | None = Field(default=None, description="Record format version")


class MetaRecord(BaseModel):
    """Metadata for one stored item, keyed by its prefixed backend key.

    Bad records (unparseable payloads) only carry ``key`` and ``size``; their
    timing and priority fields stay at 0.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Backend key, including any key prefix")
    access: int = Field(default=0, description="Last access, epoch seconds")
    expires: int = Field(default=0, description="Absolute expiry, epoch seconds")
    max_age: int = Field(default=0, description="Freshness window in seconds")
    stale: int = Field(default=0, description="Stale-while-revalidate window in seconds")
    priority: int = Field(default=0, description="Purge precedence, 1 is highest")
    size: int = Field(default=0, ge=0, description="Serialized record length")
    bad: bool = Field(default=False, description="Payload could not be parsed")
    version: str = Field(default=CUR_VERSION, description="Record format version")

    def is_expired(self, now: int) -> bool:
        """Past max-age, possibly still servable inside the stale window."""
        return now >= self.expires

    def is_truly_stale(self, now: int) -> bool:
        """Past both max-age and the stale-while-revalidate window."""
        return now >= self.expires + self.stale

    def apply(self, patch: MetaPatch) -> "MetaRecord":
        """Return a copy with the patch merged in and ``bad`` cleared."""
        changes = patch.model_dump(exclude_none=True)
        changes["bad"] = False
        return self.model_copy(update=changes)

    def to_patch(self) -> MetaPatch:
        """Return every timing field of this record as a patch."""
        return MetaPatch(
            access=self.access,
            expires=self.expires,
            max_age=self.max_age,
            stale=self.stale,
            priority=self.priority,
            size=self.size,
            version=self.version,
        )


class ParsedRecord(BaseModel):
    """A decoded backend payload."""

    meta: MetaRecord
    value: str
