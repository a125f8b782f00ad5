"""TierCache Entry - Cached Record Collection with Write Metadata.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import copy
import hashlib
import json
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from tiercache_core.errors import DeserializationError


def make_store_key(cache_type: str, cache_key: str) -> str:
    """Build the durable store key for a (cache_type, cache_key) pair.

    The cache type is length-prefixed so that distinct pairs never
    produce the same key.

    Args:
        cache_type: Cache type (family of results)
        cache_key: Cache key within the type

    Returns:
        Durable store key
    """
    return f"{len(cache_type)}:{cache_type}:{cache_key}"


def records_checksum(records: List[Dict[str, Any]]) -> str:
    """Calculate a checksum over record payloads."""
    canonical = json.dumps(records, sort_keys=True, default=str)
    return hashlib.md5(canonical.encode()).hexdigest()[:16]


@dataclass
class EntryMetadata:
    """Metadata for a cache entry.

    Attributes:
        last_write_time: When the entry was last written (epoch seconds)
        version: Number of writes seen for this key in this process
        generation: Coordinator generation the entry was written under
        checksum: Record checksum for integrity
    """

    last_write_time: float = field(default_factory=time.time)
    version: int = 1
    generation: int = 0
    checksum: Optional[str] = None

    def age_seconds(self, now: Optional[float] = None) -> float:
        """Get entry age in seconds."""
        if now is None:
            now = time.time()
        return now - self.last_write_time


@dataclass
class CacheEntry:
    """An ordered collection of records stored under (cache_type, cache_key).

    Attributes:
        cache_type: Family of cached results (e.g. "metadata_")
        cache_key: Result set within the family (e.g. "all_objects")
        records: Record payloads, in write order
        metadata: Write metadata
    """

    cache_type: str
    cache_key: str
    records: List[Dict[str, Any]] = field(default_factory=list)
    metadata: EntryMetadata = field(default_factory=EntryMetadata)

    def __post_init__(self):
        if self.metadata.checksum is None:
            self.metadata.checksum = records_checksum(self.records)

    @property
    def store_key(self) -> str:
        """Durable store key for this entry."""
        return make_store_key(self.cache_type, self.cache_key)

    @property
    def last_write_time(self) -> float:
        return self.metadata.last_write_time

    def is_expired(
        self,
        refresh_interval: Optional[float],
        now: Optional[float] = None,
    ) -> bool:
        """Check whether the entry is older than the refresh interval.

        Args:
            refresh_interval: Maximum age in seconds, None for no limit
            now: Current time, defaults to time.time()

        Returns:
            True if age exceeds the interval
        """
        if refresh_interval is None:
            return False
        return self.metadata.age_seconds(now) > refresh_interval

    def clone(self) -> "CacheEntry":
        """Copy the entry so changes to the copy never reach this one."""
        return CacheEntry(
            cache_type=self.cache_type,
            cache_key=self.cache_key,
            records=copy.deepcopy(self.records),
            metadata=replace(self.metadata),
        )

    def verify_integrity(self) -> bool:
        """Verify records against the stored checksum."""
        return records_checksum(self.records) == self.metadata.checksum

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "cache_type": self.cache_type,
            "cache_key": self.cache_key,
            "records": self.records,
            "metadata": {
                "last_write_time": self.metadata.last_write_time,
                "version": self.metadata.version,
                "generation": self.metadata.generation,
                "checksum": self.metadata.checksum,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from dictionary.

        Args:
            data: Dictionary data

        Returns:
            CacheEntry instance

        Raises:
            DeserializationError: If required fields are missing or malformed
        """
        try:
            meta = data.get("metadata", {})
            records = data["records"]
            if not isinstance(records, list) or not all(
                isinstance(r, dict) for r in records
            ):
                raise TypeError("records must be a list of mappings")

            metadata = EntryMetadata(
                last_write_time=float(meta["last_write_time"]),
                version=int(meta.get("version", 1)),
                generation=int(meta.get("generation", 0)),
                checksum=meta.get("checksum"),
            )
            entry = cls(
                cache_type=data["cache_type"],
                cache_key=data["cache_key"],
                records=records,
                metadata=metadata,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DeserializationError(f"Malformed cache entry: {e}") from e

        if not entry.verify_integrity():
            raise DeserializationError(
                "Cache entry checksum mismatch",
                cache_type=entry.cache_type,
                cache_key=entry.cache_key,
            )
        return entry

    def __repr__(self) -> str:
        return (
            f"CacheEntry(cache_type={self.cache_type!r}, "
            f"cache_key={self.cache_key!r}, records={len(self.records)})"
        )


__all__ = ["CacheEntry", "EntryMetadata", "make_store_key", "records_checksum"]
