"""Adapter from a synchronous store to AsyncStorage."""

from storage_lru.storage.base import AsyncStorage, StorageError, SyncStorage


class SyncWrapper(AsyncStorage):
    """Expose a synchronous localStorage-like store as an AsyncStorage.

    Any exception raised by the wrapped store is re-raised as StorageError so
    the engine sees a uniform failure signal.
    """

    def __init__(self, store: SyncStorage):
        self.store = store

    def __len__(self) -> int:
        return len(self.store)

    async def get_item(self, key: str) -> str | None:
        try:
            return self.store.get_item(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"get_item({key!r}) failed: {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        try:
            self.store.set_item(key, value)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"set_item({key!r}) failed: {e}") from e

    async def remove_item(self, key: str) -> None:
        try:
            self.store.remove_item(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"remove_item({key!r}) failed: {e}") from e

    async def keys(self, limit: int) -> list[str]:
        bulk_keys = getattr(self.store, "keys", None)
        try:
            if callable(bulk_keys):
                keys = bulk_keys(limit)
            else:
                count = min(limit, len(self.store))
                keys = [self.store.key(i) for i in range(count)]
        except Exception as e:
            raise StorageError(f"keys({limit}) failed: {e}") from e
        return [k for k in keys if k is not None]
