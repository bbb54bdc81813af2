"""Storage interfaces consumed by the cache engine.

The engine only ever talks to an AsyncStorage. Synchronous key/value stores
(localStorage-like objects) implement SyncStorage and are adapted with
SyncWrapper.
"""

from abc import ABC, abstractmethod
from typing import Protocol


class StorageError(Exception):
    """A backend operation failed. The reason is opaque to the engine."""


class QuotaExceededError(StorageError):
    """A write was refused because the backend is full or disabled."""


class AsyncStorage(ABC):
    """Abstract asynchronous key/value store.

    Implementations never assume the engine indexes their records; the only
    bulk primitive is ordered key enumeration.
    """

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Get the raw value stored under a key.

        Args:
            key: Backend key.

        Returns:
            The stored string, or None if the key does not exist.

        Raises:
            StorageError: If the backend could not be read.
        """
        ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store a raw value.

        Args:
            key: Backend key.
            value: String to store.

        Raises:
            StorageError: If the write was refused.
        """
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error.

        Raises:
            StorageError: If the backend refused the removal.
        """
        ...

    @abstractmethod
    async def keys(self, limit: int) -> list[str]:
        """List existing keys in backend order.

        Args:
            limit: Total number of keys wanted, not an offset. Repeated calls
                with a growing limit page through the keyspace.

        Returns:
            At most ``limit`` keys, in an order that is stable between calls.
        """
        ...


class SyncStorage(Protocol):
    """localStorage-like synchronous store.

    Stores may also offer ``keys(limit)`` returning the first ``limit`` keys in
    one call. SyncWrapper prefers it over ``limit`` separate ``key(index)`` calls.
    """

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def key(self, index: int) -> str | None: ...

    def __len__(self) -> int: ...
