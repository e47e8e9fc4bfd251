"""Redis-backed shared backend.

Entries are pickled and stored as opaque blobs; Redis applies the lifespan
natively, so expired entries are never read back and ``clear_expired`` has
nothing to do.
"""

import pickle
from typing import Any, Optional, Dict

from vault.utils.logger import (
    log_backend_unavailable,
    log_debug,
    log_error,
    log_warning,
    sanitize_text,
)
from .base import CacheBackend, VaultEntry, DEFAULT_LIFESPAN

try:
    import redis
    REDIS_AVAILABLE = True
except ImportError:
    redis = None
    REDIS_AVAILABLE = False

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class RedisCacheBackend(CacheBackend):
    """Backend delegating to a Redis server shared between processes.

    Availability is decided once, at construction: the redis package must be
    importable and the server must answer PING. When either check fails a
    diagnostic is logged and ``is_available`` reports False, so the vault
    falls back to the volatile backend.

    Args:
        url: Redis connection URL.
        key_prefix: Prefix for every key written by this backend.
        socket_timeout: Connect/read timeout in seconds.
        client: Pre-built client to use instead of connecting to url.
    """

    def __init__(self, url: str = DEFAULT_REDIS_URL, key_prefix: str = "vault:",
                 socket_timeout: float = 1.0, client: Optional[Any] = None,
                 name: str = "redis"):
        super().__init__(name)
        self.url = url
        self.key_prefix = key_prefix
        self._client = None
        self._available = False

        if not REDIS_AVAILABLE:
            log_backend_unavailable(self.name, "the redis package is not installed")
            return

        try:
            if client is not None:
                self._client = client
            else:
                self._client = redis.from_url(
                    url,
                    socket_timeout=socket_timeout,
                    socket_connect_timeout=socket_timeout,
                    decode_responses=False,
                )
            self._client.ping()
            self._available = True
        except Exception as e:
            self._record_error()
            log_backend_unavailable(
                self.name, "server is not reachable", url=url, error=str(e)
            )

    def _make_key(self, key: str) -> str:
        """Create Redis key with prefix."""
        return f"{self.key_prefix}{key}"

    def is_available(self) -> bool:
        return self._available

    def fetch(self, key: str) -> Optional[VaultEntry]:
        if not self._available:
            self._record_miss()
            return None

        redis_key = self._make_key(key)
        try:
            data = self._client.get(redis_key)
        except Exception as e:
            self._record_error()
            log_error("Redis fetch failed", key=key[:50], error=str(e))
            return None

        if data is None:
            return self._record_lookup(None)

        try:
            entry = pickle.loads(data)  # nosec B301
        except Exception as e:
            entry = None
            log_warning("Discarding unreadable Redis entry", key=key[:50], error=str(e))

        if not isinstance(entry, VaultEntry):
            self._record_error()
            self.remove(key)
            return None

        return self._record_lookup(entry)

    def store(self, key: str, entry: VaultEntry, lifespan: int = DEFAULT_LIFESPAN) -> None:
        if not self._available:
            return

        if lifespan <= 0:
            # Already expired; make sure no older value survives.
            self.remove(key)
            return

        try:
            self._client.set(
                self._make_key(key), pickle.dumps(entry), px=int(lifespan * 1000)
            )
        except Exception as e:
            self._record_error()
            log_error("Redis store failed", key=key[:50], error=str(e))

    def remove(self, key: str) -> None:
        if not self._available:
            return

        try:
            self._client.delete(self._make_key(key))
        except Exception as e:
            self._record_error()
            log_error("Redis remove failed", key=key[:50], error=str(e))

    def clear(self) -> None:
        """Delete every key under this backend's prefix."""
        if not self._available:
            return

        try:
            batch = []
            for redis_key in self._client.scan_iter(match=f"{self.key_prefix}*", count=100):
                batch.append(redis_key)
                if len(batch) >= 100:
                    self._client.delete(*batch)
                    batch = []
            if batch:
                self._client.delete(*batch)
        except Exception as e:
            self._record_error()
            log_error("Redis clear failed", key_prefix=self.key_prefix, error=str(e))

    def clear_expired(self) -> int:
        """Redis removes expired keys on its own."""
        return 0

    def get_stats(self) -> Dict[str, Any]:
        """Get Redis backend statistics."""
        return {
            **super().get_stats(),
            "redis_url": sanitize_text(self.url),
            "connected": self._available,
            "key_prefix": self.key_prefix,
        }

    def close(self) -> None:
        """Close the Redis connection pool."""
        if self._client is None:
            return

        try:
            self._client.close()
        except Exception as e:
            log_debug("Error closing Redis client", error=str(e))
        finally:
            self._client = None
            self._available = False
