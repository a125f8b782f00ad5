"""Cache module - Two-tier cache coordination.

This module provides the coordinator, its memory tier and the typed
record accessors built on top of it.
"""

from tiercache_core.cache.entry import (
    CacheEntry,
    EntryMetadata,
    make_store_key,
)
from tiercache_core.cache.memory import MemoryCache
from tiercache_core.cache.codec import EntryCodec
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

__all__ = [
    "CacheEntry",
    "EntryMetadata",
    "make_store_key",
    "MemoryCache",
    "EntryCodec",
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
]
