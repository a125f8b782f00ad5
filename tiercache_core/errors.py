"""TierCache Errors - Cache Error Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A cache miss is not an error: absent entries are returned as ``None``.
"""

from __future__ import annotations

from typing import Optional


class CacheError(Exception):
    """Base class for cache-related errors."""

    def __init__(
        self,
        message: str,
        cache_type: Optional[str] = None,
        cache_key: Optional[str] = None,
    ):
        super().__init__(message)
        self.cache_type = cache_type
        self.cache_key = cache_key


class DeserializationError(CacheError):
    """Raised when a stored payload does not match the expected schema."""
    pass


class PersistenceError(CacheError):
    """Base class for durable store failures."""
    pass


class PersistenceWriteFailure(PersistenceError):
    """Raised when a durable write fails. The memory tier is left unchanged."""
    pass


class PersistenceRemoveFailure(PersistenceError):
    """Raised when a durable remove fails. The memory tier is left unchanged."""
    pass


class PersistenceWipeFailure(PersistenceError):
    """Raised when the durable wipe of a hard reset fails.

    The reset must be retried before an empty cache can be trusted.
    """
    pass


class RemoteFetchFailure(CacheError):
    """Raised by loaders when a remote fetch fails."""
    pass


__all__ = [
    "CacheError",
    "DeserializationError",
    "PersistenceError",
    "PersistenceWriteFailure",
    "PersistenceRemoveFailure",
    "PersistenceWipeFailure",
    "RemoteFetchFailure",
]
