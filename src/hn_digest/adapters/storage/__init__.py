"""Item store backends."""

from hn_digest.adapters.storage.sqlite_store import SQLiteItemStore
from hn_digest.adapters.storage.yaml_store import YAMLItemStore
from hn_digest.config import StorageConfig
from hn_digest.core.errors import ConfigurationError
from hn_digest.core.interfaces import ItemStore


def build_store(config: StorageConfig) -> ItemStore:
    """Create the configured store backend."""
    if config.backend == "sqlite":
        return SQLiteItemStore(config.path)
    if config.backend == "yaml":
        return YAMLItemStore(config.path)
    raise ConfigurationError(f"Unknown storage backend: {config.backend}. Available: sqlite, yaml")


__all__ = ["SQLiteItemStore", "YAMLItemStore", "build_store"]
