"""TierCache Accessors - Typed Record Access and Cache Policies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import (
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from tiercache_core.cache.coordinator import CacheCoordinator
from tiercache_core.cache.entry import CacheEntry
from tiercache_core.cache.policy import CachePolicy, LoadResult
from tiercache_core.errors import (
    DeserializationError,
    PersistenceError,
    PersistenceWriteFailure,
)
from tiercache_core.models.records import (
    Record,
    SObject,
    SObjectType,
    SObjectTypeLayout,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)

Fetcher = Callable[[], Sequence[T]]
RefreshCallback = Callable[[List[T]], None]

# One handler per policy, checked for completeness below
_POLICY_HANDLERS: Dict[CachePolicy, str] = {
    CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH: "_return_cache_data_without_refresh",
    CachePolicy.INVALIDATE_CACHE_AND_RELOAD: "_invalidate_cache_and_reload",
    CachePolicy.RELOAD_AND_RETURN_CACHE_DATA: "_reload_and_return_cache_data",
    CachePolicy.RETURN_CACHE_DATA_AND_RELOAD: "_return_cache_data_and_reload",
    CachePolicy.RELOAD_IF_EXPIRED_AND_RETURN_CACHE_DATA: "_reload_if_expired",
}

_unhandled = set(CachePolicy) - set(_POLICY_HANDLERS)
if _unhandled:
    raise RuntimeError(f"Cache policies without a handler: {sorted(p.name for p in _unhandled)}")


class TypedAccessor(Generic[T]):
    """Reads and writes one record kind through the coordinator.

    ``read``/``write`` are raw accessors. ``load`` applies a CachePolicy
    on behalf of a loader, deciding between cached data and ``fetch``.

    Example:
        objects = ObjectAccessor(coordinator)
        result = objects.load(
            "recent_objects_", "mru_for_global",
            CachePolicy.RELOAD_IF_EXPIRED_AND_RETURN_CACHE_DATA,
            fetch=lambda: remote.recent_objects(),
            refresh_interval=86400,
        )
        if result.is_fresh:
            notify_listeners(result.records)
    """

    record_type: Type[T]

    def __init__(
        self,
        coordinator: CacheCoordinator,
        record_type: Optional[Type[T]] = None,
    ):
        """Initialize accessor.

        Args:
            coordinator: Cache coordinator
            record_type: Record class, defaults to the class attribute
        """
        self.coordinator = coordinator
        if record_type is not None:
            self.record_type = record_type

    def read(self, cache_type: str, cache_key: str) -> Optional[List[T]]:
        """Read cached records.

        Returns:
            Records in write order, or None if nothing is cached

        Raises:
            DeserializationError: If the cached payload does not match
                the record type
        """
        entry = self.coordinator.read_raw(cache_type, cache_key)
        if entry is None:
            return None
        return self._decode(entry)

    def read_entry(
        self,
        cache_type: str,
        cache_key: str,
    ) -> Optional[Tuple[List[T], float]]:
        """Read cached records with their last write time.

        Returns:
            (records, last_write_time) or None if nothing is cached

        Raises:
            DeserializationError: If the cached payload does not match
                the record type
        """
        entry = self.coordinator.read_raw(cache_type, cache_key)
        if entry is None:
            return None
        return self._decode(entry), entry.last_write_time

    def write(
        self,
        cache_type: str,
        cache_key: str,
        records: Sequence[T],
        generation: Optional[int] = None,
    ) -> bool:
        """Write records to both tiers.

        Returns:
            True if written, False if discarded for a stale generation

        Raises:
            PersistenceWriteFailure: If the durable write fails
        """
        payloads = [record.to_dict() for record in records]
        return self.coordinator.write_raw(cache_type, cache_key, payloads, generation)

    def remove(self, cache_type: str, cache_key: str) -> None:
        self.coordinator.remove_cache(cache_type, cache_key)

    def load(
        self,
        cache_type: str,
        cache_key: str,
        policy: CachePolicy,
        fetch: Fetcher,
        refresh_interval: Optional[float] = None,
        on_refresh: Optional[RefreshCallback] = None,
    ) -> LoadResult[T]:
        """Load records according to a cache policy.

        Args:
            cache_type: Cache type
            cache_key: Cache key
            policy: Cache policy
            fetch: Remote fetch, returns the fresh records
            refresh_interval: Maximum age in seconds for interval policies
            on_refresh: Called with records written by a background refresh

        Returns:
            LoadResult with the records and where they came from

        Raises:
            Exception: The fetch error, when no cached fallback exists
        """
        handler = getattr(self, _POLICY_HANDLERS[policy])
        return handler(cache_type, cache_key, fetch, refresh_interval, on_refresh)

    def _return_cache_data_without_refresh(
        self, cache_type, cache_key, fetch, refresh_interval, on_refresh
    ) -> LoadResult[T]:
        _, cached = self._read_cached(cache_type, cache_key)
        return LoadResult(records=cached, from_cache=True)

    def _invalidate_cache_and_reload(
        self, cache_type, cache_key, fetch, refresh_interval, on_refresh
    ) -> LoadResult[T]:
        self.remove(cache_type, cache_key)
        return self._fetch_and_store(cache_type, cache_key, fetch)

    def _reload_and_return_cache_data(
        self, cache_type, cache_key, fetch, refresh_interval, on_refresh
    ) -> LoadResult[T]:
        generation = self.coordinator.generation
        try:
            records = list(fetch())
        except Exception as e:
            _, cached = self._read_cached(cache_type, cache_key)
            if cached is None:
                raise
            logger.warning(f"Fetch for {cache_type}{cache_key} failed, serving cache: {e}")
            return LoadResult(records=cached, from_cache=True)

        persisted = self._store(cache_type, cache_key, records, generation)
        return LoadResult(records=records, from_cache=False, persisted=persisted)

    def _return_cache_data_and_reload(
        self, cache_type, cache_key, fetch, refresh_interval, on_refresh
    ) -> LoadResult[T]:
        _, cached = self._read_cached(cache_type, cache_key)
        if not cached:
            return self._fetch_and_store(cache_type, cache_key, fetch)

        self.coordinator.submit_background(
            self._refresh,
            cache_type,
            cache_key,
            fetch,
            self.coordinator.generation,
            on_refresh,
        )
        return LoadResult(records=cached, from_cache=True)

    def _reload_if_expired(
        self, cache_type, cache_key, fetch, refresh_interval, on_refresh
    ) -> LoadResult[T]:
        entry, cached = self._read_cached(cache_type, cache_key)
        if cached and not self.coordinator.is_expired(entry, refresh_interval):
            return LoadResult(records=cached, from_cache=True)

        try:
            return self._fetch_and_store(cache_type, cache_key, fetch)
        except Exception as e:
            if cached is None:
                raise
            logger.warning(f"Fetch for {cache_type}{cache_key} failed, serving stale cache: {e}")
            return LoadResult(records=cached, from_cache=True)

    def _refresh(
        self,
        cache_type: str,
        cache_key: str,
        fetch: Fetcher,
        generation: int,
        on_refresh: Optional[RefreshCallback],
    ) -> None:
        records = list(fetch())
        if self._store(cache_type, cache_key, records, generation) and on_refresh:
            on_refresh(records)

    def _fetch_and_store(
        self,
        cache_type: str,
        cache_key: str,
        fetch: Fetcher,
    ) -> LoadResult[T]:
        generation = self.coordinator.generation
        records = list(fetch())
        persisted = self._store(cache_type, cache_key, records, generation)
        return LoadResult(records=records, from_cache=False, persisted=persisted)

    def _store(
        self,
        cache_type: str,
        cache_key: str,
        records: List[T],
        generation: int,
    ) -> bool:
        try:
            return self.write(cache_type, cache_key, records, generation)
        except PersistenceWriteFailure as e:
            logger.warning(f"Serving {cache_type}{cache_key} without caching: {e}")
            return False

    def _read_cached(
        self,
        cache_type: str,
        cache_key: str,
    ) -> Tuple[Optional[CacheEntry], Optional[List[T]]]:
        entry = self.coordinator.read_raw(cache_type, cache_key)
        if entry is None:
            return None, None
        try:
            return entry, self._decode(entry)
        except DeserializationError as e:
            logger.warning(f"Evicting unreadable {cache_type}{cache_key}: {e}")
            try:
                self.coordinator.remove_cache(cache_type, cache_key)
            except PersistenceError as remove_error:
                logger.error(f"Could not evict {cache_type}{cache_key}: {remove_error}")
            return None, None

    def _decode(self, entry: CacheEntry) -> List[T]:
        try:
            return [self.record_type.from_dict(payload) for payload in entry.records]
        except DeserializationError as e:
            e.cache_type, e.cache_key = entry.cache_type, entry.cache_key
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DeserializationError(
                f"Cached payload is not a {self.record_type.__name__}: {e}",
                cache_type=entry.cache_type,
                cache_key=entry.cache_key,
            ) from e


class ObjectAccessor(TypedAccessor[SObject]):
    """Accessor for data records."""

    record_type = SObject


class ObjectTypeAccessor(TypedAccessor[SObjectType]):
    """Accessor for entity type metadata."""

    record_type = SObjectType


class LayoutAccessor(TypedAccessor[SObjectTypeLayout]):
    """Accessor for entity type layouts."""

    record_type = SObjectTypeLayout


class RecordCache:
    """Per-kind read/write helpers over one coordinator.

    Example:
        cache = RecordCache(coordinator)
        cache.write_objects("recent_objects_", "mru_for_global", objects)
        cache.read_objects("recent_objects_", "mru_for_global")
    """

    def __init__(self, coordinator: CacheCoordinator):
        self.coordinator = coordinator
        self.objects = ObjectAccessor(coordinator)
        self.object_types = ObjectTypeAccessor(coordinator)
        self.layouts = LayoutAccessor(coordinator)

    def read_objects(self, cache_type: str, cache_key: str) -> Optional[List[SObject]]:
        return self.objects.read(cache_type, cache_key)

    def write_objects(self, cache_type: str, cache_key: str, records: Sequence[SObject]) -> bool:
        return self.objects.write(cache_type, cache_key, records)

    def read_object_types(self, cache_type: str, cache_key: str) -> Optional[List[SObjectType]]:
        return self.object_types.read(cache_type, cache_key)

    def write_object_types(
        self, cache_type: str, cache_key: str, records: Sequence[SObjectType]
    ) -> bool:
        return self.object_types.write(cache_type, cache_key, records)

    def read_object_layouts(
        self, cache_type: str, cache_key: str
    ) -> Optional[List[SObjectTypeLayout]]:
        return self.layouts.read(cache_type, cache_key)

    def write_object_layouts(
        self, cache_type: str, cache_key: str, records: Sequence[SObjectTypeLayout]
    ) -> bool:
        return self.layouts.write(cache_type, cache_key, records)

    def remove_cache(self, cache_type: str, cache_key: str) -> None:
        self.coordinator.remove_cache(cache_type, cache_key)

    def soft_reset(self) -> int:
        return self.coordinator.soft_reset()

    def hard_reset(self) -> None:
        self.coordinator.hard_reset()


__all__ = [
    "TypedAccessor",
    "ObjectAccessor",
    "ObjectTypeAccessor",
    "LayoutAccessor",
    "RecordCache",
    "Fetcher",
]
