"""In-memory synchronous store."""

from storage_lru.storage.base import QuotaExceededError


class MemoryStorage:
    """Insertion-ordered in-memory store with an optional character quota.

    Behaves like a browser localStorage: the quota counts key plus value
    characters, and a disabled store refuses every write, as private browsing
    modes do.
    """

    def __init__(
        self,
        data: dict[str, str] | None = None,
        max_chars: int | None = None,
        disabled: bool = False,
    ):
        """Initialize MemoryStorage.

        Args:
            data: Initial contents, copied.
            max_chars: Quota in characters. None means unlimited.
            disabled: Refuse all writes.
        """
        self.data: dict[str, str] = dict(data or {})
        self.max_chars = max_chars
        self.disabled = disabled

    def __len__(self) -> int:
        return len(self.data)

    @property
    def used_chars(self) -> int:
        return sum(len(k) + len(v) for k, v in self.data.items())

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.disabled:
            raise QuotaExceededError("storage is disabled")
        if self.max_chars is not None:
            current = self.data.get(key)
            freed = len(key) + len(current) if current is not None else 0
            if self.used_chars - freed + len(key) + len(value) > self.max_chars:
                raise QuotaExceededError(f"quota of {self.max_chars} chars exceeded")
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)

    def key(self, index: int) -> str | None:
        if 0 <= index < len(self.data):
            return list(self.data)[index]
        return None

    def keys(self, limit: int) -> list[str]:
        return list(self.data)[: max(limit, 0)]

    def clear(self) -> None:
        self.data.clear()
