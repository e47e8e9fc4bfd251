"""Vault storage backends and the facade selecting between them.

Backends:
- Redis: shared between processes, expiry enforced by the server
- File: persistent, single host
- Volatile: in-process, always available, used as the fallback

``Vault`` picks the active backend and falls back to the volatile one when
the requested backend cannot be used.
"""

from .base import CacheBackend, CacheStats, VaultEntry, DEFAULT_LIFESPAN
from .manager import Vault, register_backend, resolve_backend, available_backends
from .redis_cache import RedisCacheBackend, REDIS_AVAILABLE
from .file_cache import FileCacheBackend
from .volatile_cache import VolatileCacheBackend

__all__ = [
    "CacheBackend",
    "CacheStats",
    "VaultEntry",
    "DEFAULT_LIFESPAN",
    "Vault",
    "register_backend",
    "resolve_backend",
    "available_backends",
    "RedisCacheBackend",
    "REDIS_AVAILABLE",
    "FileCacheBackend",
    "VolatileCacheBackend",
]
