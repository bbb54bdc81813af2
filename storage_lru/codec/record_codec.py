"""Record codec: metadata header plus raw value in a single string.

Stored format::

    [<version>:<access>:<expires>:<max_age>:<stale>:<priority>]<value>

The header ends at the first ``]``. The value is stored verbatim, so it may
itself contain ``]`` characters.
"""

import re

from storage_lru.consts import CUR_VERSION, META_FIELD_COUNT
from storage_lru.models.model_meta import MetaRecord, ParsedRecord

_INTEGER = re.compile(r"[+-]?[0-9]+")


class FormatError(ValueError):
    """Metadata does not satisfy the record invariants."""


class ParseError(ValueError):
    """A stored payload is not a valid record."""


def _valid(access: int, expires: int, max_age: int, stale: int, priority: int) -> bool:
    return access > 0 and expires > 0 and max_age > 0 and stale >= 0 and priority > 0


class RecordCodec:
    """Stateless encoder/decoder for stored records."""

    def format(self, meta: MetaRecord, value: str) -> str:
        """Serialize metadata and value into one string.

        Raises:
            FormatError: If any timing or priority field is out of range.
        """
        if meta is None or not _valid(
            meta.access, meta.expires, meta.max_age, meta.stale, meta.priority
        ):
            raise FormatError("invalid meta")
        header = ":".join(
            str(field)
            for field in (
                CUR_VERSION,
                meta.access,
                meta.expires,
                meta.max_age,
                meta.stale,
                meta.priority,
            )
        )
        return f"[{header}]{value}"

    def parse(self, raw: str | None, key: str = "") -> ParsedRecord:
        """Decode a stored payload.

        Args:
            raw: The string read from the backend.
            key: Backend key to stamp on the returned metadata.

        Raises:
            ParseError: On a missing header, wrong field count, or bad field values.
        """
        pos = raw.find("]") if raw and raw.startswith("[") else -1
        if pos <= 0:
            raise ParseError("missing meta")

        fields = raw[1:pos].split(":")
        if len(fields) != META_FIELD_COUNT:
            raise ParseError("invalid number of meta fields")

        if not all(_INTEGER.fullmatch(f) for f in fields[1:]):
            raise ParseError("invalid meta fields")
        access, expires, max_age, stale, priority = (int(f) for f in fields[1:])
        if not _valid(access, expires, max_age, stale, priority):
            raise ParseError("invalid meta fields")

        meta = MetaRecord(
            key=key,
            version=fields[0],
            access=access,
            expires=expires,
            max_age=max_age,
            stale=stale,
            priority=priority,
            size=len(raw),
        )
        return ParsedRecord(meta=meta, value=raw[pos + 1 :])
