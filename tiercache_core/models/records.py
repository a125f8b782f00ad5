"""TierCache Records - Cached Domain Record Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type, TypeVar

from tiercache_core.errors import DeserializationError

R = TypeVar("R", bound="Record")


def _require(data: Dict[str, Any], key: str, kind: str) -> Any:
    if not isinstance(data, dict):
        raise DeserializationError(f"{kind} payload must be a mapping")
    if data.get(key) is None:
        raise DeserializationError(f"{kind} payload missing {key!r}")
    return data[key]


def _raw(data: Dict[str, Any], kind: str) -> Dict[str, Any]:
    raw = data.get("raw_data") or {}
    if not isinstance(raw, dict):
        raise DeserializationError(f"{kind} raw_data must be a mapping")
    return copy.deepcopy(raw)


class Record(ABC):
    """A record that can round-trip through the cache."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain payload."""
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls: Type[R], data: Dict[str, Any]) -> R:
        """Rebuild from a payload.

        Raises:
            DeserializationError: If the payload does not match
        """
        pass


@dataclass
class SObject(Record):
    """A data record (e.g. an Account or Contact row).

    Attributes:
        object_type: Entity type name
        object_id: Record id
        name: Display name
        raw_data: Full record as returned by the remote service
    """

    object_type: str
    object_id: str
    name: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "SObject":
        """Build from a remote record (``attributes.type``, ``Id``, ``Name``)."""
        attributes = raw.get("attributes") or {}
        return cls(
            object_type=attributes.get("type") or raw.get("type", ""),
            object_id=raw.get("Id") or raw.get("id", ""),
            name=raw.get("Name") or raw.get("name"),
            raw_data=dict(raw),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_type": self.object_type,
            "object_id": self.object_id,
            "name": self.name,
            "raw_data": self.raw_data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SObject":
        return cls(
            object_type=_require(data, "object_type", "SObject"),
            object_id=_require(data, "object_id", "SObject"),
            name=data.get("name"),
            raw_data=_raw(data, "SObject"),
        )


@dataclass
class SObjectType(Record):
    """Metadata describing an entity type.

    Attributes:
        name: API name
        label: Display label
        key_prefix: Id prefix of records of this type
        raw_data: Full describe payload
    """

    name: str
    label: Optional[str] = None
    key_prefix: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "SObjectType":
        return cls(
            name=raw.get("name", ""),
            label=raw.get("label"),
            key_prefix=raw.get("keyPrefix"),
            raw_data=dict(raw),
        )

    @property
    def is_searchable(self) -> bool:
        return bool(self.raw_data.get("searchable", False))

    @property
    def is_layoutable(self) -> bool:
        return bool(self.raw_data.get("layoutable", False))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "key_prefix": self.key_prefix,
            "raw_data": self.raw_data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SObjectType":
        return cls(
            name=_require(data, "name", "SObjectType"),
            label=data.get("label"),
            key_prefix=data.get("key_prefix"),
            raw_data=_raw(data, "SObjectType"),
        )


@dataclass
class SObjectTypeLayout(Record):
    """Search layout of an entity type.

    Attributes:
        object_type: Entity type name
        raw_data: Layout payload (columns, limits)
    """

    object_type: str
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def columns(self) -> list:
        return list(self.raw_data.get("searchColumns") or [])

    def to_dict(self) -> Dict[str, Any]:
        return {"object_type": self.object_type, "raw_data": self.raw_data}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SObjectTypeLayout":
        return cls(
            object_type=_require(data, "object_type", "SObjectTypeLayout"),
            raw_data=_raw(data, "SObjectTypeLayout"),
        )


__all__ = ["Record", "SObject", "SObjectType", "SObjectTypeLayout"]
