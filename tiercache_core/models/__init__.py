"""Models module - Record types held in the cache."""

from tiercache_core.models.records import (
    Record,
    SObject,
    SObjectType,
    SObjectTypeLayout,
)

__all__ = ["Record", "SObject", "SObjectType", "SObjectTypeLayout"]
