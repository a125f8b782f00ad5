"""TierCache - Two-Tier Record Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A memory + durable cache for records fetched from a remote service:
- Memory tier in front of a durable blob store (memory, file, Redis)
- Read-through population from the durable tier
- Durable-first writes, nothing half-written becomes visible
- Per-call cache policies (cache only, reload, reload if expired, ...)
- Soft reset (memory only) and hard reset (both tiers)
- Reset generations that discard stale background refreshes

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        TierCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │   Objects   │  │ ObjectTypes │  │   Layouts   │   TYPED     │
    │  │  accessor   │  │  accessor   │  │  accessor   │   ACCESS    │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │   CachePolicy  │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │              Cache Coordinator                 │   CORE      │
    │  │   read / write / remove / soft & hard reset    │             │
    │  └──────────┬─────────────────────────┬──────────┘             │
    │             │                         │                         │
    │  ┌──────────┴──────────┐   ┌──────────┴──────────────────┐     │
    │  │    Memory Cache     │   │       Durable Store          │     │
    │  │  (cache_type, key)  │   │  ┌────────┐┌──────┐┌───────┐ │     │
    │  │   -> CacheEntry     │   │  │ Memory ││ File ││ Redis │ │     │
    │  └─────────────────────┘   │  └────────┘└──────┘└───────┘ │     │
    │                            └──────────────────────────────┘     │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from tiercache_core import CacheCoordinator, CachePolicy, FileStore, ObjectAccessor

    with CacheCoordinator(FileStore("/var/cache/app")) as coordinator:
        objects = ObjectAccessor(coordinator)
        result = objects.load(
            "recent_objects_", "mru_for_global",
            CachePolicy.RELOAD_IF_EXPIRED_AND_RETURN_CACHE_DATA,
            fetch=remote.recent_objects,
            refresh_interval=3600,
        )

        coordinator.soft_reset()   # memory only
        coordinator.hard_reset()   # memory and durable
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from tiercache_core.errors import (
    CacheError,
    DeserializationError,
    PersistenceError,
    PersistenceWriteFailure,
    PersistenceRemoveFailure,
    PersistenceWipeFailure,
    RemoteFetchFailure,
)
from tiercache_core.cache.entry import CacheEntry, EntryMetadata
from tiercache_core.cache.memory import MemoryCache
from tiercache_core.cache.policy import CachePolicy, LoadResult
from tiercache_core.cache.coordinator import (
    CacheCoordinator,
    CoordinatorConfig,
    CoordinatorStats,
)
from tiercache_core.cache.accessors import (
    TypedAccessor,
    ObjectAccessor,
    ObjectTypeAccessor,
    LayoutAccessor,
    RecordCache,
)
from tiercache_core.models.records import (
    Record,
    SObject,
    SObjectType,
    SObjectTypeLayout,
)
from tiercache_core.store.backend import (
    DurableStore,
    StorageConfig,
    StorageStats,
)
from tiercache_core.store.memory import MemoryStore
from tiercache_core.store.file import FileStore
from tiercache_core.store.redis import RedisStore, RedisConfig
from tiercache_core.protocol.serializer import (
    Serializer,
    CompressionType,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
)
from tiercache_core.loader.metadata import MetadataLoader, RemoteSource

__all__ = [
    # Errors
    "CacheError",
    "DeserializationError",
    "PersistenceError",
    "PersistenceWriteFailure",
    "PersistenceRemoveFailure",
    "PersistenceWipeFailure",
    "RemoteFetchFailure",
    # Cache
    "CacheEntry",
    "EntryMetadata",
    "MemoryCache",
    "CachePolicy",
    "LoadResult",
    "CacheCoordinator",
    "CoordinatorConfig",
    "CoordinatorStats",
    "TypedAccessor",
    "ObjectAccessor",
    "ObjectTypeAccessor",
    "LayoutAccessor",
    "RecordCache",
    # Records
    "Record",
    "SObject",
    "SObjectType",
    "SObjectTypeLayout",
    # Storage
    "DurableStore",
    "StorageConfig",
    "StorageStats",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
    # Protocol
    "Serializer",
    "CompressionType",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    # Loader
    "MetadataLoader",
    "RemoteSource",
]
