"""TierCache Metadata Loader - Policy-Driven Remote Loading.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The loader owns remote fetching and cache keys. The coordinator decides,
through the typed accessors, whether a fetch is needed at all.
"""

from __future__ import annotations

import functools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from tiercache_core.cache.accessors import (
    LayoutAccessor,
    ObjectAccessor,
    ObjectTypeAccessor,
)
from tiercache_core.cache.coordinator import CacheCoordinator
from tiercache_core.cache.policy import CachePolicy, LoadResult
from tiercache_core.models.records import SObject, SObjectType, SObjectTypeLayout

logger = logging.getLogger(__name__)

MRU_CACHE_TYPE = "recent_objects_"
METADATA_CACHE_TYPE = "metadata_"
LAYOUT_CACHE_TYPE = "layout_"
MRU_BY_OBJECT_TYPE_CACHE_KEY = "mru_for_{}"
ALL_OBJECTS_CACHE_KEY = "all_objects"
OBJECT_BY_TYPE_CACHE_KEY = "object_{}"
OBJECT_LAYOUT_BY_TYPE_CACHE_KEY = "object_layout_{}"
RECORD_TYPE_GLOBAL = "global"

DEFAULT_REFRESH_INTERVAL = 24 * 60 * 60.0

ChangeListener = Callable[[str, str, list], None]


class RemoteSource(ABC):
    """Remote service the loader fetches from.

    Implementations raise on failure (typically RemoteFetchFailure).
    """

    @abstractmethod
    def fetch_mru_objects(self, object_type: Optional[str], limit: int) -> List[SObject]:
        """Fetch most recently used records, globally or for one type."""
        pass

    @abstractmethod
    def fetch_object_types(self) -> List[SObjectType]:
        """Fetch metadata for all entity types."""
        pass

    @abstractmethod
    def fetch_object_type(self, name: str) -> SObjectType:
        """Fetch metadata for one entity type."""
        pass

    @abstractmethod
    def fetch_object_type_layout(self, object_type: SObjectType) -> SObjectTypeLayout:
        """Fetch the search layout of an entity type."""
        pass


class MetadataLoader:
    """Loads records and metadata through the cache.

    Example:
        loader = MetadataLoader(coordinator, source)
        loader.on_change(lambda cache_type, key, records: refresh_ui())
        objects = loader.load_mru_objects(
            None, 25, CachePolicy.RELOAD_AND_RETURN_CACHE_DATA
        )
    """

    def __init__(
        self,
        coordinator: CacheCoordinator,
        source: RemoteSource,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
    ):
        """Initialize loader.

        Args:
            coordinator: Cache coordinator
            source: Remote source
            refresh_interval: Default maximum cache age in seconds
        """
        self.coordinator = coordinator
        self.source = source
        self.refresh_interval = refresh_interval

        self.objects = ObjectAccessor(coordinator)
        self.object_types = ObjectTypeAccessor(coordinator)
        self.layouts = LayoutAccessor(coordinator)

        self._listeners: List[ChangeListener] = []

    def on_change(self, listener: ChangeListener) -> "MetadataLoader":
        """Register a listener for freshly fetched data.

        Args:
            listener: Function(cache_type, cache_key, records)

        Returns:
            Self for chaining
        """
        self._listeners.append(listener)
        return self

    def load_mru_objects(
        self,
        object_type: Optional[str],
        limit: int,
        policy: CachePolicy,
        refresh_interval: Optional[float] = None,
    ) -> List[SObject]:
        """Load most recently used records.

        Args:
            object_type: Entity type, or None for all types
            limit: Maximum records to fetch
            policy: Cache policy
            refresh_interval: Maximum cache age, defaults to the loader's

        Returns:
            Records, empty if nothing is available
        """
        cache_key = MRU_BY_OBJECT_TYPE_CACHE_KEY.format(object_type or RECORD_TYPE_GLOBAL)
        result = self._load(
            self.objects,
            MRU_CACHE_TYPE,
            cache_key,
            policy,
            lambda: self.source.fetch_mru_objects(object_type, limit),
            refresh_interval,
        )
        return result.records or []

    def load_all_object_types(
        self,
        policy: CachePolicy,
        refresh_interval: Optional[float] = None,
    ) -> List[SObjectType]:
        """Load metadata for all entity types."""
        result = self._load(
            self.object_types,
            METADATA_CACHE_TYPE,
            ALL_OBJECTS_CACHE_KEY,
            policy,
            self.source.fetch_object_types,
            refresh_interval,
        )
        return result.records or []

    def load_object_type(
        self,
        name: str,
        policy: CachePolicy,
        refresh_interval: Optional[float] = None,
    ) -> Optional[SObjectType]:
        """Load metadata for one entity type.

        A cache-only read that misses falls back to the cached list of
        all entity types.
        """
        result = self._load(
            self.object_types,
            METADATA_CACHE_TYPE,
            OBJECT_BY_TYPE_CACHE_KEY.format(name),
            policy,
            lambda: [self.source.fetch_object_type(name)],
            refresh_interval,
        )
        if result.records:
            return result.records[0]

        if policy is CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH:
            all_types = self.object_types.read(METADATA_CACHE_TYPE, ALL_OBJECTS_CACHE_KEY) or []
            for object_type in all_types:
                if object_type.name == name:
                    return object_type
        return None

    def load_object_type_layout(
        self,
        object_type: SObjectType,
        policy: CachePolicy,
        refresh_interval: Optional[float] = None,
    ) -> Optional[SObjectTypeLayout]:
        """Load the search layout of an entity type."""
        result = self._load(
            self.layouts,
            LAYOUT_CACHE_TYPE,
            OBJECT_LAYOUT_BY_TYPE_CACHE_KEY.format(object_type.name),
            policy,
            lambda: [self.source.fetch_object_type_layout(object_type)],
            refresh_interval,
        )
        return result.records[0] if result.records else None

    def _load(self, accessor, cache_type, cache_key, policy, fetch, refresh_interval) -> LoadResult:
        if refresh_interval is None:
            refresh_interval = self.refresh_interval

        result = accessor.load(
            cache_type,
            cache_key,
            policy,
            fetch,
            refresh_interval=refresh_interval,
            on_refresh=functools.partial(self._notify, cache_type, cache_key),
        )
        if result.is_fresh:
            self._notify(cache_type, cache_key, result.records)
        return result

    def _notify(self, cache_type: str, cache_key: str, records: list) -> None:
        logger.debug(f"Fresh data for {cache_type}{cache_key}: {len(records)} records")
        for listener in self._listeners:
            listener(cache_type, cache_key, records)


__all__ = [
    "MetadataLoader",
    "RemoteSource",
    "MRU_CACHE_TYPE",
    "METADATA_CACHE_TYPE",
    "LAYOUT_CACHE_TYPE",
    "MRU_BY_OBJECT_TYPE_CACHE_KEY",
    "ALL_OBJECTS_CACHE_KEY",
    "OBJECT_BY_TYPE_CACHE_KEY",
    "OBJECT_LAYOUT_BY_TYPE_CACHE_KEY",
    "RECORD_TYPE_GLOBAL",
    "DEFAULT_REFRESH_INTERVAL",
]
