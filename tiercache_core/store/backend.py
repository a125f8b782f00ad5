"""TierCache Durable Store - Abstract Blob Store Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Durable store configuration.

    Attributes:
        name: Backend name
        sync_writes: Flush writes to the medium before returning
    """

    name: str = "storage"
    sync_writes: bool = True


@dataclass
class StorageStats:
    """Durable store statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        wipes: Number of namespace wipes
        errors: Number of errors
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    wipes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class DurableStore(ABC):
    """Abstract key-value blob store keyed by (namespace, key).

    Implementations:
    - MemoryStore: In-process dictionary
    - FileStore: On-device files
    - RedisStore: Redis backend

    Failures are logged and recorded in stats. Reads degrade to None,
    writes, removes and wipes report False.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    def get(self, namespace: str, key: str) -> Optional[bytes]:
        """Get blob by key.

        Args:
            namespace: Store namespace
            key: Blob key

        Returns:
            Stored bytes or None
        """
        pass

    @abstractmethod
    def put(self, namespace: str, key: str, data: bytes) -> bool:
        """Store blob.

        Args:
            namespace: Store namespace
            key: Blob key
            data: Bytes to store

        Returns:
            True if successful
        """
        pass

    @abstractmethod
    def remove(self, namespace: str, key: str) -> bool:
        """Remove blob. Removing a missing key succeeds.

        Args:
            namespace: Store namespace
            key: Blob key

        Returns:
            True unless the removal failed
        """
        pass

    @abstractmethod
    def wipe_namespace(self, namespace: str) -> bool:
        """Remove every blob in a namespace.

        Args:
            namespace: Store namespace

        Returns:
            True if the namespace is now empty
        """
        pass

    @abstractmethod
    def keys(self, namespace: str) -> List[str]:
        """List keys in a namespace.

        Args:
            namespace: Store namespace

        Returns:
            List of keys
        """
        pass

    def exists(self, namespace: str, key: str) -> bool:
        """Check if key exists."""
        return self.get(namespace, key) is not None

    def get_stats(self) -> StorageStats:
        """Get storage statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = StorageStats()

    def close(self) -> None:
        """Release backend resources."""
        pass


__all__ = ["DurableStore", "StorageConfig", "StorageStats"]
