"""Protocol module - Serialization of cached entries."""

from tiercache_core.protocol.serializer import (
    Serializer,
    CompressionType,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
    get_serializer,
    register_serializer,
)

__all__ = [
    "Serializer",
    "CompressionType",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "get_serializer",
    "register_serializer",
]
