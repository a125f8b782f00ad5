"""TierCache Entry Codec - CacheEntry <-> Durable Blob.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Blob layout:
    magic (2 bytes, b"TC") | version (1) | compression (1) |
    format name length (1) | format name | payload
"""

from __future__ import annotations

import logging
from typing import Optional

from tiercache_core.cache.entry import CacheEntry
from tiercache_core.errors import DeserializationError
from tiercache_core.protocol.serializer import (
    CompressionType,
    Serializer,
    compress,
    decompress,
    get_serializer,
)

logger = logging.getLogger(__name__)

MAGIC = b"TC"
VERSION = 1
HEADER_SIZE = 5


class EntryCodec:
    """Encodes cache entries for the durable store.

    The serializer format is recorded in each blob, so entries written
    with one format stay readable after the default changes.
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        compression: CompressionType = CompressionType.NONE,
        compression_threshold: int = 1024,
    ):
        """Initialize codec.

        Args:
            serializer: Payload serializer, defaults to the registry default
            compression: Compression applied to large payloads
            compression_threshold: Payload size in bytes before compressing
        """
        self.serializer = serializer or get_serializer()
        self.compression = compression
        self.compression_threshold = compression_threshold

    def encode(self, entry: CacheEntry) -> bytes:
        """Encode an entry to bytes.

        Args:
            entry: Cache entry

        Returns:
            Blob bytes
        """
        payload = self.serializer.serialize(entry.to_dict())

        compression = CompressionType.NONE
        if (
            self.compression != CompressionType.NONE
            and len(payload) >= self.compression_threshold
        ):
            compressed = compress(payload, self.compression)
            if len(compressed) < len(payload):
                payload = compressed
                compression = self.compression

        fmt = self.serializer.format_name.encode("ascii")
        header = MAGIC + bytes([VERSION, compression.value, len(fmt)])
        return header + fmt + payload

    def decode(self, data: bytes) -> CacheEntry:
        """Decode bytes to an entry.

        Args:
            data: Blob bytes

        Returns:
            Cache entry

        Raises:
            DeserializationError: If the blob is unreadable
        """
        if len(data) < HEADER_SIZE or data[:2] != MAGIC:
            raise DeserializationError("Not a cache entry blob")
        if data[2] != VERSION:
            raise DeserializationError(f"Unsupported blob version {data[2]}")

        fmt_len = data[4]
        fmt_end = HEADER_SIZE + fmt_len
        try:
            compression = CompressionType(data[3])
            fmt = data[HEADER_SIZE:fmt_end].decode("ascii")
            serializer = (
                self.serializer
                if fmt == self.serializer.format_name
                else get_serializer(fmt)
            )
            payload = decompress(data[fmt_end:], compression)
            raw = serializer.deserialize(payload)
        except DeserializationError:
            raise
        except Exception as e:
            raise DeserializationError(f"Unreadable cache blob: {e}") from e

        return CacheEntry.from_dict(raw)


__all__ = ["EntryCodec", "MAGIC", "VERSION"]
