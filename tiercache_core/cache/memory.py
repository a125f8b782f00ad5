"""TierCache Memory Cache - Process-Lifetime Memory Tier.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from tiercache_core.cache.entry import CacheEntry

logger = logging.getLogger(__name__)

MemoryKey = Tuple[str, str]


class MemoryCache:
    """In-memory tier mapping (cache_type, cache_key) to entries.

    Lookups are lock-free dictionary reads; mutations take the lock.
    Consistency with the durable tier is the coordinator's job.
    """

    def __init__(self):
        self._data: Dict[MemoryKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, cache_type: str, cache_key: str) -> Optional[CacheEntry]:
        return self._data.get((cache_type, cache_key))

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._data[(entry.cache_type, entry.cache_key)] = entry

    def remove(self, cache_type: str, cache_key: str) -> bool:
        with self._lock:
            return self._data.pop((cache_type, cache_key), None) is not None

    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number cleared
        """
        with self._lock:
            count = len(self._data)
            self._data.clear()
            return count

    def keys(self, cache_type: Optional[str] = None) -> List[MemoryKey]:
        with self._lock:
            if cache_type is None:
                return list(self._data.keys())
            return [k for k in self._data if k[0] == cache_type]

    def __contains__(self, key: MemoryKey) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryCache(entries={len(self._data)})"


__all__ = ["MemoryCache", "MemoryKey"]
