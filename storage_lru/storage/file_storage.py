"""File-based synchronous store.

Stores each key as a JSON file in a single directory. Key order follows
first insertion and survives restarts, so repeated key enumeration pages
through the store consistently.
"""

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

from storage_lru.storage.base import QuotaExceededError, StorageError

logger = logging.getLogger(__name__)


class FileStorage:
    """Directory-backed localStorage-like store with an optional quota.

    Directory structure:
        {data_dir}/
        ├── {hash}.json   {"seq": 0, "key": "...", "value": "..."}
        └── {hash}.json

    ``seq`` records insertion order and is kept when a key is overwritten.
    """

    def __init__(self, data_dir: Path | str, max_chars: int | None = None):
        """Initialize FileStorage.

        Args:
            data_dir: Directory for entry files. Created on first write.
            max_chars: Quota over key plus value characters. None means unlimited.
        """
        self.data_dir = Path(data_dir)
        self.max_chars = max_chars

    def _hash_key(self, key: str) -> str:
        """Generate a safe filename from a key using SHA-256 hash."""
        return hashlib.sha256(key.encode()).hexdigest()[:16]

    def _entry_path(self, key: str) -> Path:
        return self.data_dir / f"{self._hash_key(key)}.json"

    def _read(self, path: Path) -> dict[str, Any] | None:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read storage entry {path.name}: {e}")
            return None

    def _entries(self) -> list[dict[str, Any]]:
        """All readable entries in insertion order."""
        if not self.data_dir.exists():
            return []
        entries = [
            entry
            for path in self.data_dir.glob("*.json")
            if (entry := self._read(path)) is not None and "key" in entry
        ]
        entries.sort(key=lambda e: e.get("seq", 0))
        return entries

    def __len__(self) -> int:
        return len(self._entries())

    @property
    def used_chars(self) -> int:
        return sum(len(e["key"]) + len(e.get("value", "")) for e in self._entries())

    def get_item(self, key: str) -> str | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        entry = self._read(path)
        if entry is None:
            raise StorageError(f"unreadable entry for key={key}")
        return entry.get("value")

    def set_item(self, key: str, value: str) -> None:
        entries = self._entries()
        existing = next((e for e in entries if e["key"] == key), None)

        if self.max_chars is not None:
            used = sum(len(e["key"]) + len(e.get("value", "")) for e in entries)
            if existing is not None:
                used -= len(key) + len(existing.get("value", ""))
            if used + len(key) + len(value) > self.max_chars:
                raise QuotaExceededError(f"quota of {self.max_chars} chars exceeded")

        if existing is not None:
            seq = existing.get("seq", 0)
        else:
            seq = max((e.get("seq", 0) for e in entries), default=-1) + 1

        self.data_dir.mkdir(parents=True, exist_ok=True)
        entry = {"seq": seq, "key": key, "value": value}
        self._entry_path(key).write_text(json.dumps(entry), encoding="utf-8")
        logger.debug(f"Stored key={key} ({len(value)} chars)")

    def remove_item(self, key: str) -> None:
        path = self._entry_path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed key={key}")

    def key(self, index: int) -> str | None:
        entries = self._entries()
        if 0 <= index < len(entries):
            return entries[index]["key"]
        return None

    def keys(self, limit: int) -> list[str]:
        """First ``limit`` keys in insertion order, from a single directory scan."""
        return [e["key"] for e in self._entries()[: max(limit, 0)]]

    def clear(self) -> int:
        """Remove every entry written by this store.

        JSON files without a ``key`` field are left in place.

        Returns:
            Number of entries removed.
        """
        count = 0
        if self.data_dir.exists():
            for path in self.data_dir.glob("*.json"):
                entry = self._read(path)
                if entry is None or "key" not in entry:
                    continue
                path.unlink()
                count += 1
        logger.info(f"Cleared {count} entries from {self.data_dir}")
        return count
