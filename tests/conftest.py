"""Pytest configuration and fixtures for vault tests."""

import os
import logging
import fnmatch
import pytest
from unittest.mock import Mock

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vault.cache.manager import Vault, reset_vault


@pytest.fixture(autouse=True)
def fresh_global_vault():
    """Every test starts with an uninitialized process-wide vault."""
    reset_vault()
    yield
    reset_vault()


@pytest.fixture(autouse=True)
def restore_vault_log_level():
    """``Vault.from_config`` sets the vault logger level; undo it after each test."""
    vault_logger = logging.getLogger("vault")
    level = vault_logger.level
    yield
    vault_logger.setLevel(level)


@pytest.fixture
def vault():
    """A fresh, uninitialized vault instance."""
    instance = Vault()
    yield instance
    instance.close()


@pytest.fixture
def fake_redis():
    """Mock Redis client backed by a dict.

    Records the TTL passed to ``set`` in ``fake_redis.ttls`` (milliseconds)
    instead of expiring anything.
    """
    data = {}
    ttls = {}

    def _set(key, value, px=None, ex=None):
        data[key] = value
        ttls[key] = px if px is not None else (ex * 1000 if ex is not None else None)
        return True

    def _delete(*keys):
        removed = 0
        for key in keys:
            if key in data:
                del data[key]
                ttls.pop(key, None)
                removed += 1
        return removed

    def _scan_iter(match="*", count=None):
        return iter([key for key in list(data) if fnmatch.fnmatchcase(key, match)])

    client = Mock()
    client.ping.return_value = True
    client.get.side_effect = lambda key: data.get(key)
    client.set.side_effect = _set
    client.delete.side_effect = _delete
    client.scan_iter.side_effect = _scan_iter
    client.data = data
    client.ttls = ttls
    return client


@pytest.fixture
def cache_dir(tmp_path):
    """Directory for file backend tests."""
    path = tmp_path / "vault_cache"
    return str(path)


@pytest.fixture
def temp_env():
    """Temporary VAULT_* environment variables for testing."""
    original_env = os.environ.copy()

    test_env = {
        "VAULT_BACKEND": "file",
        "VAULT_DEFAULT_LIFESPAN": "600",
        "VAULT_FILE_CACHE_DIR": ".vault_test_cache",
        "VAULT_LOG_LEVEL": "debug",
    }

    os.environ.update(test_env)

    yield test_env

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def cache_test_data():
    """Common payloads for vault tests."""
    return {
        "simple_string": "test_value",
        "simple_dict": {"key": "value", "number": 42},
        "complex_dict": {
            "nested": {"data": [1, 2, 3]},
            "timestamp": "2025-12-09T10:30:00Z",
            "boolean": True,
            "float": 3.14159,
        },
        "list_data": [1, "two", {"three": 3}],
        "unicode_data": "Test with üñîçödé characters 🚀",
        "empty_string": "",
        "zero": 0,
    }
