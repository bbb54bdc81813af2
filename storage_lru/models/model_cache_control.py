"""Cache-Control header parsing.

Only the directives the cache acts on are kept: ``max-age``,
``stale-while-revalidate``, ``no-cache`` and ``no-store``. Unknown
directives are ignored.
"""

import re

from pydantic import BaseModel, Field

from storage_lru.consts import MAX_AGE, NO_CACHE, NO_STORE, STALE_WHILE_REVALIDATE

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _to_seconds(raw: str) -> int:
    """Parse the leading integer of a directive value, 0 if there is none."""
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else 0


class CacheControl(BaseModel):
    """Parsed cache control directives for a single set_item call."""

    max_age: int | None = Field(default=None, description="max-age in seconds")
    stale_while_revalidate: int = Field(default=0, description="Stale window in seconds")
    no_cache: bool = Field(default=False)
    no_store: bool = Field(default=False)

    @property
    def cacheable(self) -> bool:
        """True when the item may be stored."""
        if self.no_cache or self.no_store:
            return False
        return self.max_age is not None and self.max_age > 0


def parse_cache_control(header: str | None) -> CacheControl:
    """Parse a Cache-Control style string.

    Directives are comma separated, either ``token`` or ``token=value``, and
    matched case-insensitively.

    Args:
        header: e.g. ``"max-age=300,stale-while-revalidate=60"``.

    Returns:
        CacheControl with the recognised directives.
    """
    directives: dict[str, str | bool] = {}
    if header:
        for part in header.lower().split(","):
            pieces = part.split("=")
            if len(pieces) == 2:
                directives[pieces[0].strip()] = pieces[1].strip()
            elif len(pieces) == 1 and pieces[0].strip():
                directives[pieces[0].strip()] = True

    max_age = directives.get(MAX_AGE)
    stale = directives.get(STALE_WHILE_REVALIDATE)
    return CacheControl(
        max_age=_to_seconds(max_age) if isinstance(max_age, str) else None,
        stale_while_revalidate=_to_seconds(stale) if isinstance(stale, str) else 0,
        no_cache=NO_CACHE in directives,
        no_store=NO_STORE in directives,
    )
