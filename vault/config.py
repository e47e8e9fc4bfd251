"""Configuration management using Pydantic BaseSettings.

Settings are read from ``VAULT_*`` environment variables (or a ``.env``
file) and select which backend the process-wide vault is set up with.
"""
from typing import Any, Dict, List
from pydantic import Field, validator
from pydantic_settings import BaseSettings


KNOWN_BACKENDS = ("volatile", "memory", "redis", "file")


class VaultConfig(BaseSettings):
    """Vault backend selection and backend options."""

    backend: str = Field("volatile", description="Backend type: volatile, redis, file")
    default_lifespan: int = Field(3600, ge=0, description="Lifespan in seconds when none is given")

    # Redis backend
    redis_url: str = Field("redis://localhost:6379/0", description="Redis connection URL")
    redis_key_prefix: str = Field("vault:", description="Prefix for keys written to Redis")
    redis_socket_timeout: float = Field(1.0, gt=0, le=30, description="Redis connect/read timeout in seconds")

    # File backend
    file_cache_dir: str = Field(".vault_cache", description="Directory for the file backend")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    model_config = {
        "env_prefix": "VAULT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @validator('backend')
    def normalize_backend(cls, v):
        return v.strip().lower()

    @validator('log_level')
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    def backend_options(self) -> Dict[str, Any]:
        """Constructor options for the selected backend."""
        if self.backend == "redis":
            return {
                "url": self.redis_url,
                "key_prefix": self.redis_key_prefix,
                "socket_timeout": self.redis_socket_timeout,
            }
        if self.backend == "file":
            return {"cache_dir": self.file_cache_dir}
        return {}

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if self.backend not in KNOWN_BACKENDS:
            issues.append(f"VAULT_BACKEND must be one of: {', '.join(KNOWN_BACKENDS)}")

        if self.backend == "redis" and not self.redis_url.startswith(("redis://", "rediss://", "unix://")):
            issues.append("VAULT_REDIS_URL must be a valid Redis URL (redis://...)")

        if self.default_lifespan == 0:
            issues.append("VAULT_DEFAULT_LIFESPAN=0 makes every entry expire immediately")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from vault.utils.logger import log_info

        log_info("Vault configuration loaded",
                 backend=self.backend,
                 default_lifespan=self.default_lifespan,
                 redis_url=self.redis_url,
                 file_cache_dir=self.file_cache_dir,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> VaultConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = VaultConfig()
    return _config


def reload_config() -> VaultConfig:
    """Reload configuration from environment variables."""
    global _config
    _config = VaultConfig()
    return _config
