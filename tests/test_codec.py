"""Tests for serializers and the entry codec.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from tiercache_core.cache.codec import EntryCodec
from tiercache_core.cache.entry import CacheEntry, EntryMetadata, make_store_key
from tiercache_core.errors import DeserializationError
from tiercache_core.protocol.serializer import (
    CompressionType,
    JSONSerializer,
    MsgPackSerializer,
    PickleSerializer,
    get_serializer,
)


def make_entry(count=3):
    records = [{"id": f"001{i:03d}", "name": f"Acme {i}", "tags": ["a", "b"]} for i in range(count)]
    return CacheEntry(
        cache_type="recent_objects_",
        cache_key="mru_for_global",
        records=records,
        metadata=EntryMetadata(last_write_time=1_700_000_000.5, version=3),
    )


class TestEntryCodec:
    """Tests for EntryCodec."""

    @pytest.mark.parametrize(
        "serializer", [JSONSerializer(), PickleSerializer(), MsgPackSerializer()]
    )
    def test_formats(self, serializer):
        """Test every serializer preserves records and metadata."""
        entry = make_entry()
        codec = EntryCodec(serializer=serializer)

        decoded = codec.decode(codec.encode(entry))

        assert decoded.records == entry.records
        assert decoded.last_write_time == entry.last_write_time
        assert decoded.metadata.version == 3

    def test_format_is_recorded(self):
        """Test blobs stay readable after switching serializer."""
        blob = EntryCodec(serializer=PickleSerializer()).encode(make_entry())
        decoded = EntryCodec(serializer=JSONSerializer()).decode(blob)
        assert decoded.records == make_entry().records

    def test_compression(self):
        entry = make_entry(200)
        plain = EntryCodec().encode(entry)
        codec = EntryCodec(compression=CompressionType.GZIP, compression_threshold=64)
        compressed = codec.encode(entry)

        assert len(compressed) < len(plain)
        assert codec.decode(compressed).records == entry.records

    def test_small_payload_not_compressed(self):
        codec = EntryCodec(compression=CompressionType.ZLIB, compression_threshold=10 ** 6)
        blob = codec.encode(make_entry(1))
        assert blob[3] == CompressionType.NONE.value

    def test_garbage_rejected(self):
        with pytest.raises(DeserializationError):
            EntryCodec().decode(b"garbage")

    def test_truncated_blob_rejected(self):
        blob = EntryCodec().encode(make_entry())
        with pytest.raises(DeserializationError):
            EntryCodec().decode(blob[: len(blob) // 2])

    def test_tampered_records_rejected(self):
        """Test checksum mismatch is detected."""
        blob = EntryCodec().encode(make_entry())
        tampered = blob.replace(b"Acme 1", b"Acme 9")
        with pytest.raises(DeserializationError):
            EntryCodec().decode(tampered)


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_store_key_is_unambiguous(self):
        assert make_store_key("a", "bc") != make_store_key("ab", "c")

    def test_from_dict_rejects_bad_records(self):
        data = make_entry().to_dict()
        data["records"] = "not a list"
        with pytest.raises(DeserializationError):
            CacheEntry.from_dict(data)

    def test_from_dict_rejects_missing_fields(self):
        with pytest.raises(DeserializationError):
            CacheEntry.from_dict({"records": []})

    def test_expiry(self):
        entry = make_entry()
        written = entry.last_write_time
        assert not entry.is_expired(60, now=written + 60)
        assert entry.is_expired(60, now=written + 61)


def test_default_serializer_is_json():
    assert get_serializer().format_name == "json"


def test_unknown_format_names_available_ones():
    with pytest.raises(KeyError) as exc_info:
        get_serializer("yaml")
    assert "json, pickle, msgpack" in str(exc_info.value)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
