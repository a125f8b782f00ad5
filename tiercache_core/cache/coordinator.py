"""TierCache Coordinator - Two-Tier Cache Consistency.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from tiercache_core.cache.codec import EntryCodec
from tiercache_core.cache.entry import CacheEntry, EntryMetadata, make_store_key
from tiercache_core.cache.memory import MemoryCache
from tiercache_core.errors import (
    DeserializationError,
    PersistenceRemoveFailure,
    PersistenceWipeFailure,
    PersistenceWriteFailure,
)
from tiercache_core.protocol.serializer import CompressionType, get_serializer
from tiercache_core.store.backend import DurableStore

logger = logging.getLogger(__name__)


@dataclass
class CoordinatorConfig:
    """Coordinator configuration.

    Attributes:
        name: Coordinator name, used in logs and thread names
        namespace: Durable store namespace owned by this cache
        serializer: Serializer format for durable blobs
        compression: Compression for large blobs
        compression_threshold: Bytes threshold for compression
        background_workers: Threads for background refreshes
    """

    name: str = "tiercache"
    namespace: str = "tiercache"
    serializer: str = "json"
    compression: CompressionType = CompressionType.NONE
    compression_threshold: int = 1024
    background_workers: int = 2


@dataclass
class CoordinatorStats:
    """Coordinator statistics.

    Attributes:
        memory_hits: Reads served from the memory tier
        durable_hits: Reads served from the durable tier
        misses: Reads that found nothing
        corrupt_reads: Durable blobs discarded as unreadable
        writes: Successful writes
        write_failures: Writes rejected by the durable store
        discarded_writes: Writes dropped for a stale generation
        removals: Explicit removals
        soft_resets: Memory-only resets
        hard_resets: Full resets
        started_at: When the coordinator was created
    """

    memory_hits: int = 0
    durable_hits: int = 0
    misses: int = 0
    corrupt_reads: int = 0
    writes: int = 0
    write_failures: int = 0
    discarded_writes: int = 0
    removals: int = 0
    soft_resets: int = 0
    hard_resets: int = 0
    started_at: Optional[datetime] = field(default_factory=datetime.now)

    @property
    def hits(self) -> int:
        return self.memory_hits + self.durable_hits

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset counters."""
        self.memory_hits = 0
        self.durable_hits = 0
        self.misses = 0
        self.corrupt_reads = 0
        self.writes = 0
        self.write_failures = 0
        self.discarded_writes = 0
        self.removals = 0
        self.soft_resets = 0
        self.hard_resets = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "memory_hits": self.memory_hits,
            "durable_hits": self.durable_hits,
            "misses": self.misses,
            "corrupt_reads": self.corrupt_reads,
            "writes": self.writes,
            "write_failures": self.write_failures,
            "discarded_writes": self.discarded_writes,
            "removals": self.removals,
            "soft_resets": self.soft_resets,
            "hard_resets": self.hard_resets,
            "hit_rate": self.hit_rate,
        }


class CacheCoordinator:
    """Single authority for reads, writes, removals and resets.

    Keeps a memory tier in front of a durable store and guarantees the
    two never disagree about absence once an operation has returned.

    Concurrency:
    - Memory hits are lock-free.
    - Read-through population, writes, removals and hard resets run
      under one lock, so a populate can never resurrect an entry that
      is being removed or wiped.
    - Every hard reset bumps ``generation``. Writes tagged with an older
      generation are discarded.

    Example:
        with CacheCoordinator(FileStore("/var/cache/app")) as cache:
            cache.write_raw("metadata_", "all_objects", [{"name": "Account"}])
            entry = cache.read_raw("metadata_", "all_objects")
            cache.hard_reset()
    """

    def __init__(
        self,
        store: DurableStore,
        config: Optional[CoordinatorConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize coordinator.

        Args:
            store: Durable store
            config: Coordinator configuration
            clock: Time source in epoch seconds
        """
        self.config = config or CoordinatorConfig()
        self._store = store
        self._clock = clock
        self._memory = MemoryCache()
        self._codec = EntryCodec(
            serializer=get_serializer(self.config.serializer),
            compression=self.config.compression,
            compression_threshold=self.config.compression_threshold,
        )

        self._lock = threading.RLock()
        self._generation = 0
        self._stats = CoordinatorStats()
        self._stats_lock = threading.Lock()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._closed = False

    @property
    def store(self) -> DurableStore:
        return self._store

    @property
    def memory(self) -> MemoryCache:
        return self._memory

    @property
    def generation(self) -> int:
        """Current reset generation."""
        return self._generation

    def now(self) -> float:
        """Current time according to the coordinator clock."""
        return self._clock()

    def init(self) -> "CacheCoordinator":
        """Start the background worker pool."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.background_workers,
                    thread_name_prefix=f"TierCache-{self.config.name}",
                )
                self._closed = False
                logger.info(f"Cache coordinator {self.config.name} started")
        return self

    def close(self, wait: bool = True) -> None:
        """Stop the background worker pool.

        Args:
            wait: Wait for in-flight background tasks
        """
        with self._lock:
            executor = self._executor
            self._executor = None
            self._closed = True

        if executor is not None:
            executor.shutdown(wait=wait)
        self._store.close()
        logger.info(f"Cache coordinator {self.config.name} stopped")

    def read_raw(self, cache_type: str, cache_key: str) -> Optional[CacheEntry]:
        """Read an entry, memory first, then durable.

        A durable hit is copied into memory before returning. Durable read
        failures and unreadable blobs count as misses. Callers get a copy, so
        changing it never alters the cached entry.

        Args:
            cache_type: Cache type
            cache_key: Cache key

        Returns:
            CacheEntry or None
        """
        entry = self._memory.get(cache_type, cache_key)
        if entry is not None:
            self._count("memory_hits")
            return entry.clone()

        with self._lock:
            entry = self._memory.get(cache_type, cache_key)
            if entry is not None:
                self._count("memory_hits")
                return entry.clone()

            entry = self._read_durable(cache_type, cache_key)
            if entry is None:
                self._count("misses")
                return None

            self._memory.put(entry)
            self._count("durable_hits")
            logger.debug(f"Loaded {cache_type}{cache_key} from durable store")
            return entry.clone()

    def write_raw(
        self,
        cache_type: str,
        cache_key: str,
        records: Sequence[Dict[str, Any]],
        generation: Optional[int] = None,
    ) -> bool:
        """Write records to the durable store, then to memory.

        Args:
            cache_type: Cache type
            cache_key: Cache key
            records: Record payloads, in order
            generation: Generation the data was fetched under. A write from
                an older generation is discarded.

        Returns:
            True if written, False if discarded as stale

        Raises:
            PersistenceWriteFailure: If the durable write fails. Memory is
                left unchanged.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                self._count("discarded_writes")
                logger.warning(
                    f"Discarding write to {cache_type}{cache_key} from "
                    f"generation {generation} (current {self._generation})"
                )
                return False

            previous = self._memory.get(cache_type, cache_key)
            entry = CacheEntry(
                cache_type=cache_type,
                cache_key=cache_key,
                records=list(records),
                metadata=EntryMetadata(
                    last_write_time=self._clock(),
                    version=previous.metadata.version + 1 if previous else 1,
                    generation=self._generation,
                ),
            )

            try:
                data = self._codec.encode(entry)
                # Memory holds exactly what the durable tier will return
                stored = self._codec.decode(data)
            except Exception as e:
                self._count("write_failures")
                raise PersistenceWriteFailure(
                    f"Cannot serialize {cache_type}{cache_key}: {e}",
                    cache_type=cache_type,
                    cache_key=cache_key,
                ) from e

            if not self._put_durable(entry.store_key, data):
                self._count("write_failures")
                raise PersistenceWriteFailure(
                    f"Durable write failed for {cache_type}{cache_key}",
                    cache_type=cache_type,
                    cache_key=cache_key,
                )

            self._memory.put(stored)
            self._count("writes")
            logger.debug(
                f"Wrote {len(stored.records)} records to {cache_type}{cache_key}"
            )
            return True

    def remove_cache(self, cache_type: str, cache_key: str) -> None:
        """Remove an entry from both tiers.

        The durable removal is attempted even when memory holds nothing.

        Raises:
            PersistenceRemoveFailure: If the durable removal fails. The
                memory entry is kept so both tiers still agree.
        """
        store_key = make_store_key(cache_type, cache_key)

        with self._lock:
            try:
                removed = self._store.remove(self.config.namespace, store_key)
            except Exception as e:
                logger.error(f"Durable remove error for {cache_type}{cache_key}: {e}")
                removed = False

            if not removed:
                raise PersistenceRemoveFailure(
                    f"Durable remove failed for {cache_type}{cache_key}",
                    cache_type=cache_type,
                    cache_key=cache_key,
                )

            self._memory.remove(cache_type, cache_key)
            self._count("removals")
            logger.debug(f"Removed {cache_type}{cache_key}")

    def soft_reset(self) -> int:
        """Clear the memory tier only.

        Returns:
            Number of memory entries cleared
        """
        count = self._memory.clear()
        self._count("soft_resets")
        logger.info(f"Soft reset of {self.config.name}: {count} memory entries cleared")
        return count

    def hard_reset(self) -> None:
        """Wipe the durable namespace, then clear memory.

        Runs under the coordinator lock and starts a new generation, so
        no read or in-flight background write can bring back pre-reset
        data. Memory is cleared even if the wipe fails.

        Raises:
            PersistenceWipeFailure: If the durable wipe fails. Retry the
                reset before trusting an empty cache.
        """
        with self._lock:
            self._generation += 1
            try:
                wiped = self._store.wipe_namespace(self.config.namespace)
            except Exception as e:
                logger.error(f"Durable wipe error for {self.config.namespace}: {e}")
                wiped = False

            count = self._memory.clear()
            self._count("hard_resets")

            if not wiped:
                raise PersistenceWipeFailure(
                    f"Durable wipe of namespace {self.config.namespace!r} failed"
                )

        logger.info(
            f"Hard reset of {self.config.name}: {count} memory entries cleared, "
            f"generation {self._generation}"
        )

    def is_expired(
        self,
        entry: Optional[CacheEntry],
        refresh_interval: Optional[float],
    ) -> bool:
        """Check an entry against a refresh interval.

        Args:
            entry: Cache entry, None counts as expired
            refresh_interval: Maximum age in seconds, None for no limit

        Returns:
            True if the entry is absent or older than the interval
        """
        if entry is None:
            return True
        return entry.is_expired(refresh_interval, now=self._clock())

    def submit_background(
        self,
        fn: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Optional[Future]:
        """Run a fire-and-forget task on the worker pool.

        Task errors are logged, never raised to the caller.

        Returns:
            Future, or None if the coordinator is closed
        """
        with self._lock:
            if self._closed:
                logger.warning(f"Coordinator {self.config.name} closed, task skipped")
                return None
            if self._executor is None:
                self.init()
            executor = self._executor

        def run():
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                logger.error(f"Background task failed: {e}")
                return None

        return executor.submit(run)

    def keys(self, cache_type: Optional[str] = None) -> List[tuple]:
        """List (cache_type, cache_key) pairs held in memory."""
        return self._memory.keys(cache_type)

    def get_stats(self) -> CoordinatorStats:
        return self._stats

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats.reset()

    def _count(self, counter: str) -> None:
        # Memory hits and soft resets run outside the coordinator lock
        with self._stats_lock:
            setattr(self._stats, counter, getattr(self._stats, counter) + 1)

    def _read_durable(self, cache_type: str, cache_key: str) -> Optional[CacheEntry]:
        store_key = make_store_key(cache_type, cache_key)
        try:
            data = self._store.get(self.config.namespace, store_key)
        except Exception as e:
            logger.error(f"Durable read error for {cache_type}{cache_key}: {e}")
            return None

        if data is None:
            return None

        try:
            entry = self._codec.decode(data)
            if entry.cache_type != cache_type or entry.cache_key != cache_key:
                raise DeserializationError("Blob stored under the wrong key")
        except DeserializationError as e:
            self._count("corrupt_reads")
            logger.warning(f"Discarding unreadable entry {cache_type}{cache_key}: {e}")
            try:
                self._store.remove(self.config.namespace, store_key)
            except Exception as remove_error:
                logger.error(f"Could not evict {cache_type}{cache_key}: {remove_error}")
            return None

        return entry

    def _put_durable(self, store_key: str, data: bytes) -> bool:
        try:
            return bool(self._store.put(self.config.namespace, store_key, data))
        except Exception as e:
            logger.error(f"Durable write error for {store_key}: {e}")
            return False

    def __enter__(self) -> "CacheCoordinator":
        return self.init()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"CacheCoordinator(name={self.config.name!r}, "
            f"entries={len(self._memory)}, generation={self._generation})"
        )


__all__ = ["CacheCoordinator", "CoordinatorConfig", "CoordinatorStats"]
