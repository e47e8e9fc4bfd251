"""Expiring entries and the abstract contract for vault backends."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Dict

DEFAULT_LIFESPAN = 3600  # 1 hour


@dataclass(frozen=True)
class VaultEntry:
    """A stored value together with its creation time and lifespan.

    Entries are immutable: storing a key again creates a new entry. Removing
    expired entries is the backend's job (see ``CacheBackend.clear_expired``).
    """

    payload: Any
    lifespan: int = DEFAULT_LIFESPAN
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.lifespan < 0:
            raise ValueError(f"lifespan must be >= 0, got {self.lifespan}")

    def expires_at(self) -> float:
        """Timestamp at which this entry expires."""
        return self.created_at + self.lifespan

    def is_expired(self) -> bool:
        """Check if the entry has expired.

        The boundary is inclusive, so an entry with a lifespan of 0 is
        expired as soon as it is created.
        """
        return time.time() >= self.expires_at()

    def remaining(self) -> float:
        """Seconds left before expiry, never negative."""
        return max(0.0, self.expires_at() - time.time())


class CacheBackend(ABC):
    """Abstract base class for vault backends.

    ``fetch`` returns ``None`` for keys that were never stored (including
    the empty key); ``remove`` of an unknown key is a no-op.
    """

    def __init__(self, name: str):
        self.name = name
        self.hits = 0
        self.misses = 0
        self.errors = 0

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this backend can be used in the current process."""
        pass

    @abstractmethod
    def fetch(self, key: str) -> Optional[VaultEntry]:
        """Get the entry stored under key, or None."""
        pass

    @abstractmethod
    def store(self, key: str, entry: VaultEntry, lifespan: int = DEFAULT_LIFESPAN) -> None:
        """Store entry under key.

        lifespan is passed alongside the entry so backends with native
        expiration can hand it to the underlying service.
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key from the backend."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""
        pass

    @abstractmethod
    def clear_expired(self) -> int:
        """Remove expired entries and return count removed."""
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Get backend statistics."""
        stats = CacheStats()
        stats.hits = self.hits
        stats.misses = self.misses
        stats.errors = self.errors
        return {**stats.to_dict(), "backend": self.name}

    def close(self) -> None:
        """Release resources held by the backend."""
        pass

    def _record_hit(self) -> None:
        self.hits += 1

    def _record_miss(self) -> None:
        self.misses += 1

    def _record_error(self) -> None:
        self.errors += 1

    def _record_lookup(self, entry: Optional[VaultEntry]) -> Optional[VaultEntry]:
        """Count a fetch result as a hit or a miss and pass it through."""
        if entry is None:
            self._record_miss()
        else:
            self._record_hit()
        return entry

    def get_hit_rate(self) -> float:
        """Calculate hit rate percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


class CacheStats:
    """Cache statistics data structure."""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.errors = 0
        self.size = None
        self.oldest_entry: Optional[float] = None
        self.newest_entry: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "hit_rate_percent": self.hit_rate,
            "size": self.size,
            "oldest_entry": _isoformat(self.oldest_entry),
            "newest_entry": _isoformat(self.newest_entry),
        }

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0


def _isoformat(timestamp: Optional[float]) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp).isoformat()
