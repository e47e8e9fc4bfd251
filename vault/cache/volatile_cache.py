"""In-process fallback backend. Entries do not survive a restart."""

import threading
from typing import Any, Optional, Dict

from .base import CacheBackend, CacheStats, VaultEntry, DEFAULT_LIFESPAN


class VolatileCacheBackend(CacheBackend):
    """Dictionary of entries held in process memory.

    Always available, which makes it the fallback for every other backend.
    Expired entries are still returned by ``fetch`` until ``clear_expired``
    purges them.
    """

    def __init__(self, name: str = "volatile", **options: Any):
        # Options are accepted for a uniform constructor signature and ignored.
        super().__init__(name)
        self._data: Dict[str, VaultEntry] = {}
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return True

    def fetch(self, key: str) -> Optional[VaultEntry]:
        with self._lock:
            return self._record_lookup(self._data.get(key))

    def store(self, key: str, entry: VaultEntry, lifespan: int = DEFAULT_LIFESPAN) -> None:
        with self._lock:
            self._data[key] = entry

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data = {}

    def clear_expired(self) -> int:
        """Remove expired entries."""
        with self._lock:
            expired_keys = [
                key for key, entry in self._data.items() if entry.is_expired()
            ]

            for key in expired_keys:
                del self._data[key]

            return len(expired_keys)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get_stats(self) -> Dict[str, Any]:
        """Get volatile backend statistics."""
        with self._lock:
            entries = list(self._data.values())

        stats = CacheStats()
        stats.hits = self.hits
        stats.misses = self.misses
        stats.errors = self.errors
        stats.size = len(entries)

        if entries:
            stats.oldest_entry = min(entry.created_at for entry in entries)
            stats.newest_entry = max(entry.created_at for entry in entries)

        return {**stats.to_dict(), "backend": self.name}

    def close(self) -> None:
        self.clear()
