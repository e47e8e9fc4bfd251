"""Vault facade: backend selection with fallback to the volatile backend."""

from typing import Any, Optional, Dict, Type

from vault.utils.logger import log_info, log_warning, log_debug, logger
from .base import CacheBackend, VaultEntry, DEFAULT_LIFESPAN
from .file_cache import FileCacheBackend
from .redis_cache import RedisCacheBackend
from .volatile_cache import VolatileCacheBackend


_BACKENDS: Dict[str, Type[CacheBackend]] = {
    "volatile": VolatileCacheBackend,
    "memory": VolatileCacheBackend,
    "redis": RedisCacheBackend,
    "file": FileCacheBackend,
}


def register_backend(name: str, backend_class: Type[CacheBackend]) -> None:
    """Make a backend class selectable by name in ``Vault.setup``."""
    if not (isinstance(backend_class, type) and issubclass(backend_class, CacheBackend)):
        raise TypeError(f"{backend_class!r} is not a CacheBackend subclass")
    _BACKENDS[name.lower()] = backend_class


def resolve_backend(name: str) -> Optional[Type[CacheBackend]]:
    """Look up a backend class by its short identifier (case-insensitive)."""
    return _BACKENDS.get(name.strip().lower())


def available_backends() -> list:
    """Registered backend identifiers."""
    return sorted(_BACKENDS)


class Vault:
    """Key-value store over exactly one active backend.

    The vault starts uninitialized. ``setup`` installs a backend, falling
    back to ``VolatileCacheBackend`` when the requested one is not available.
    Any operation on an uninitialized vault installs the volatile backend
    first, so setup is never required.

    Values are wrapped in ``VaultEntry`` on the way in and unwrapped on the
    way out. Expiry is left to the backend: ``fetch`` does not look at
    ``is_expired``.
    """

    def __init__(self, backend: Optional[CacheBackend] = None, default_lifespan: int = DEFAULT_LIFESPAN):
        self._backend = backend
        self.default_lifespan = default_lifespan

    @classmethod
    def from_config(cls, config=None) -> "Vault":
        """Create a vault set up from ``VaultConfig`` (global config by default)."""
        if config is None:
            from vault.config import get_config
            config = get_config()

        logger.setLevel(config.log_level)
        for issue in config.validate_configuration():
            log_warning("Vault configuration issue", issue=issue)

        vault = cls(default_lifespan=config.default_lifespan)
        vault.setup(config.backend, **config.backend_options())
        return vault

    def setup(self, backend_type: str = "redis", **options: Any) -> Optional[CacheBackend]:
        """Select the active backend.

        Args:
            backend_type: Registered identifier, e.g. "redis", "file", "volatile"
            **options: Passed to the backend constructor

        Returns:
            The backend now active, or None if backend_type is unknown. An
            unknown type leaves the vault unchanged.
        """
        backend_class = resolve_backend(backend_type)
        if backend_class is None:
            log_warning("Unknown vault backend type, setup ignored",
                        backend_type=backend_type, known=available_backends())
            return None

        backend = self._create_backend(backend_class, options)
        if backend is None or not backend.is_available():
            if backend is not None:
                backend.close()
            log_warning("Falling back to volatile backend", requested=backend_type)
            backend = VolatileCacheBackend()

        self._install(backend)
        log_info("Vault backend selected", requested=backend_type, active=backend.name)
        return backend

    def _create_backend(self, backend_class: Type[CacheBackend],
                        options: Dict[str, Any]) -> Optional[CacheBackend]:
        try:
            return backend_class(**options)
        except Exception as e:
            log_warning("Failed to create vault backend",
                        backend=backend_class.__name__, error=str(e))
            return None

    def _install(self, backend: CacheBackend) -> None:
        previous, self._backend = self._backend, backend
        if previous is not None and previous is not backend:
            previous.close()

    @property
    def is_initialized(self) -> bool:
        return self._backend is not None

    @property
    def backend(self) -> CacheBackend:
        """The active backend, installing the volatile default if needed."""
        if self._backend is None:
            log_debug("Vault used before setup, using volatile backend")
            self._backend = VolatileCacheBackend()
        return self._backend

    def fetch(self, key: str) -> Optional[Any]:
        """Fetch a value, or None if not present."""
        entry = self.backend.fetch(key)
        return entry.payload if entry is not None else None

    def store(self, key: str, value: Any, lifespan: Optional[int] = None) -> None:
        """Store a value for lifespan seconds (``default_lifespan`` when omitted)."""
        if lifespan is None:
            lifespan = self.default_lifespan
        self.backend.store(key, VaultEntry(value, lifespan), lifespan)

    def remove(self, key: str) -> None:
        """Remove a single value. Unknown keys are ignored."""
        self.backend.remove(key)

    def clear(self) -> None:
        """Clear _all_ stored values."""
        self.backend.clear()

    def clear_expired(self) -> int:
        """Purge expired entries from the active backend."""
        return self.backend.clear_expired()

    def get_last_modified(self, key: str) -> Optional[float]:
        """Timestamp the value under key was stored at, or None if not present."""
        entry = self.backend.fetch(key)
        return entry.created_at if entry is not None else None

    def get_expires(self, key: str) -> Optional[float]:
        """Timestamp the value under key expires at, or None if not present."""
        entry = self.backend.fetch(key)
        return entry.expires_at() if entry is not None else None

    def get_stats(self) -> Dict[str, Any]:
        """Statistics of the active backend."""
        if self._backend is None:
            return {"status": "not_initialized"}
        return {**self._backend.get_stats(), "active_backend": self._backend.name}

    def close(self) -> None:
        """Close the active backend and return to the uninitialized state."""
        if self._backend is not None:
            self._backend.close()
            self._backend = None

    def __repr__(self) -> str:
        return f"<Vault backend={self._backend!r}>"


# Process-wide vault (lazy loading)
_vault: Optional[Vault] = None


def get_vault() -> Vault:
    """Get the process-wide vault instance."""
    global _vault
    if _vault is None:
        _vault = Vault()
    return _vault


def reset_vault() -> None:
    """Close the process-wide vault and forget it."""
    global _vault
    if _vault is not None:
        _vault.close()
    _vault = None


def configure(config=None) -> Vault:
    """Replace the process-wide vault with one set up from configuration."""
    global _vault
    reset_vault()
    _vault = Vault.from_config(config)
    return _vault


def setup(backend_type: str = "redis", **options: Any) -> Optional[CacheBackend]:
    return get_vault().setup(backend_type, **options)


def fetch(key: str) -> Optional[Any]:
    return get_vault().fetch(key)


def store(key: str, value: Any, lifespan: Optional[int] = None) -> None:
    get_vault().store(key, value, lifespan)


def remove(key: str) -> None:
    get_vault().remove(key)


def clear() -> None:
    get_vault().clear()


def clear_expired() -> int:
    return get_vault().clear_expired()


def get_last_modified(key: str) -> Optional[float]:
    return get_vault().get_last_modified(key)


def get_expires(key: str) -> Optional[float]:
    return get_vault().get_expires(key)
