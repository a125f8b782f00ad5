"""Loader module - Remote loading through the cache."""

from tiercache_core.loader.metadata import (
    MetadataLoader,
    RemoteSource,
    MRU_CACHE_TYPE,
    METADATA_CACHE_TYPE,
    LAYOUT_CACHE_TYPE,
)

__all__ = [
    "MetadataLoader",
    "RemoteSource",
    "MRU_CACHE_TYPE",
    "METADATA_CACHE_TYPE",
    "LAYOUT_CACHE_TYPE",
]
