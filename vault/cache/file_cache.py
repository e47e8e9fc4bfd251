"""File-based durable backend: one pickle file per key."""

import hashlib
import os
import pickle
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional, Dict

from vault.utils.logger import log_backend_unavailable, log_error, log_warning
from .base import CacheBackend, CacheStats, VaultEntry, DEFAULT_LIFESPAN

DEFAULT_CACHE_DIR = ".vault_cache"


class FileCacheBackend(CacheBackend):
    """Persistent backend for a single host.

    Entries survive process restarts. Each key maps to
    ``<cache_dir>/entry_<md5(key)>.pkl``; writes go through a temporary file
    and ``os.replace`` so readers never observe a partial entry.
    """

    def __init__(self, cache_dir: str = DEFAULT_CACHE_DIR, name: str = "file"):
        super().__init__(name)
        self.cache_dir = Path(cache_dir)
        self._lock = threading.Lock()
        self._available = False

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._record_error()
            log_backend_unavailable(
                self.name, "cache directory cannot be created",
                cache_dir=str(self.cache_dir), error=str(e),
            )
            return

        if not os.access(self.cache_dir, os.W_OK):
            log_backend_unavailable(
                self.name, "cache directory is not writable",
                cache_dir=str(self.cache_dir),
            )
            return

        self._available = True

    def _get_file_path(self, key: str) -> Path:
        """Get file path for cache key."""
        key_hash = hashlib.md5(key.encode(), usedforsecurity=False).hexdigest()
        return self.cache_dir / f"entry_{key_hash}.pkl"

    def _entry_files(self):
        return self.cache_dir.glob("entry_*.pkl")

    def _load(self, file_path: Path) -> Optional[VaultEntry]:
        """Read an entry file. Missing or unreadable files yield None."""
        try:
            with open(file_path, "rb") as f:
                entry = pickle.load(f)  # nosec B301
        except FileNotFoundError:
            return None
        except Exception as e:
            self._record_error()
            log_warning("Unreadable vault entry file", file=file_path.name, error=str(e))
            return None

        return entry if isinstance(entry, VaultEntry) else None

    def is_available(self) -> bool:
        return self._available

    def fetch(self, key: str) -> Optional[VaultEntry]:
        if not self._available:
            self._record_miss()
            return None

        with self._lock:
            return self._record_lookup(self._load(self._get_file_path(key)))

    def store(self, key: str, entry: VaultEntry, lifespan: int = DEFAULT_LIFESPAN) -> None:
        if not self._available:
            return

        file_path = self._get_file_path(key)
        tmp_name = None
        with self._lock:
            try:
                fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp_", suffix=".pkl")
                with os.fdopen(fd, "wb") as f:
                    pickle.dump(entry, f)
                os.replace(tmp_name, file_path)
            except Exception as e:
                self._record_error()
                log_error("File store failed", key=key[:50], error=str(e))
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

    def _unlink(self, file_path: Path) -> bool:
        """Delete an entry file, logging instead of raising on failure."""
        try:
            file_path.unlink(missing_ok=True)
            return True
        except OSError as e:
            self._record_error()
            log_error("File remove failed", file=file_path.name, error=str(e))
            return False

    def remove(self, key: str) -> None:
        if not self._available:
            return

        with self._lock:
            self._unlink(self._get_file_path(key))

    def clear(self) -> None:
        if not self._available:
            return

        with self._lock:
            for file_path in list(self._entry_files()):
                self._unlink(file_path)

    def clear_expired(self) -> int:
        """Remove expired and unreadable entry files."""
        if not self._available:
            return 0

        removed_count = 0
        with self._lock:
            for file_path in list(self._entry_files()):
                entry = self._load(file_path)
                if entry is None or entry.is_expired():
                    if self._unlink(file_path):
                        removed_count += 1

        return removed_count

    def get_stats(self) -> Dict[str, Any]:
        """Get file backend statistics."""
        stats = CacheStats()
        stats.hits = self.hits
        stats.misses = self.misses
        stats.errors = self.errors

        disk_usage = 0
        if self._available:
            files = list(self._entry_files())
            stats.size = len(files)
            for file_path in files:
                try:
                    disk_usage += file_path.stat().st_size
                except OSError:
                    # Removed since the directory was listed
                    stats.size -= 1

        return {
            **stats.to_dict(),
            "backend": self.name,
            "cache_dir": str(self.cache_dir),
            "disk_usage_bytes": disk_usage,
        }
