"""Error taxonomy for cache operations.

Every error raised by the engine carries a numeric code so callers can
branch on it without matching exception classes:

    1 disabled, 2 cannot deserialize, 3 cannot serialize, 4 bad cacheControl,
    5 invalid key, 6 not enough space, 7 revalidate failed
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric codes for cache errors."""

    DISABLED = 1
    DESERIALIZE = 2
    SERIALIZE = 3
    CACHE_CONTROL = 4
    INVALID_KEY = 5
    NOT_ENOUGH_SPACE = 6
    REVALIDATE = 7


class StorageLRUError(Exception):
    """Base class for errors raised by StorageLRU."""

    code: ErrorCode
    base_message: str = "storage lru error"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        self.message = f"{self.base_message}: {detail}" if detail else self.base_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, int | str]:
        """Return the error as a plain {code, message} mapping."""
        return {"code": int(self.code), "message": self.message}


class DisabledError(StorageLRUError):
    code = ErrorCode.DISABLED
    base_message = "disabled"


class DeserializeError(StorageLRUError):
    code = ErrorCode.DESERIALIZE
    base_message = "cannot deserialize"


class SerializeError(StorageLRUError):
    code = ErrorCode.SERIALIZE
    base_message = "cannot serialize"


class CacheControlError(StorageLRUError):
    code = ErrorCode.CACHE_CONTROL
    base_message = "bad cacheControl"


class InvalidKeyError(StorageLRUError):
    code = ErrorCode.INVALID_KEY
    base_message = "invalid key"


class NotEnoughSpaceError(StorageLRUError):
    code = ErrorCode.NOT_ENOUGH_SPACE
    base_message = "not enough space"


class RevalidateError(StorageLRUError):
    code = ErrorCode.REVALIDATE
    base_message = "revalidate failed"
