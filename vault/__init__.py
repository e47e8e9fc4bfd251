"""Vault - a simple caching library.

Usage:
    import vault

    vault.setup("redis", url="redis://localhost:6379/0")
    vault.store("key", {"some": "value"}, lifespan=600)
    vault.fetch("key")

Without ``setup`` the volatile in-process backend is used.
"""

from .cache import (
    CacheBackend,
    DEFAULT_LIFESPAN,
    FileCacheBackend,
    RedisCacheBackend,
    Vault,
    VaultEntry,
    VolatileCacheBackend,
    register_backend,
)
from .cache.manager import (
    clear,
    clear_expired,
    configure,
    fetch,
    get_expires,
    get_last_modified,
    get_vault,
    remove,
    reset_vault,
    setup,
    store,
)
from .config import VaultConfig, get_config, reload_config

__version__ = "0.2.0"

__all__ = [
    "Vault",
    "VaultEntry",
    "VaultConfig",
    "CacheBackend",
    "VolatileCacheBackend",
    "RedisCacheBackend",
    "FileCacheBackend",
    "DEFAULT_LIFESPAN",
    "register_backend",
    "get_vault",
    "reset_vault",
    "configure",
    "setup",
    "fetch",
    "store",
    "remove",
    "clear",
    "clear_expired",
    "get_last_modified",
    "get_expires",
    "get_config",
    "reload_config",
]
