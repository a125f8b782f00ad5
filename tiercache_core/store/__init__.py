"""Store module - Durable storage backends."""

from tiercache_core.store.backend import (
    DurableStore,
    StorageConfig,
    StorageStats,
)
from tiercache_core.store.memory import MemoryStore
from tiercache_core.store.file import FileStore
from tiercache_core.store.redis import RedisStore, RedisConfig

__all__ = [
    "DurableStore",
    "StorageConfig",
    "StorageStats",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
]
