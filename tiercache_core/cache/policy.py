"""TierCache Policy - Caller Cache Directives.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class CachePolicy(Enum):
    """Cache-vs-remote directive for a single logical read."""

    RELOAD_AND_RETURN_CACHE_DATA = auto()             # Fetch; on failure serve cache
    RETURN_CACHE_DATA_AND_RELOAD = auto()             # Serve cache, refresh in background
    RETURN_CACHE_DATA_WITHOUT_REFRESH = auto()        # Serve cache only, never fetch
    RELOAD_IF_EXPIRED_AND_RETURN_CACHE_DATA = auto()  # Fetch when older than interval
    INVALIDATE_CACHE_AND_RELOAD = auto()              # Drop entry, then fetch

    @property
    def may_fetch(self) -> bool:
        """Whether the policy can trigger a remote fetch."""
        return self is not CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH


@dataclass
class LoadResult(Generic[T]):
    """Outcome of a policy-driven load.

    Attributes:
        records: Loaded records, None when nothing is cached and no fetch ran
        from_cache: True if records were served from the cache
        persisted: False if fresh records could not be written to the cache
    """

    records: Optional[List[T]]
    from_cache: bool
    persisted: bool = True

    @property
    def is_fresh(self) -> bool:
        """Whether records came from a remote fetch."""
        return not self.from_cache

    @property
    def is_empty(self) -> bool:
        return not self.records


__all__ = ["CachePolicy", "LoadResult"]
