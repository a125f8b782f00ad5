"""Tests for typed accessors and cache policies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading

import pytest

from tiercache_core.cache.accessors import (
    LayoutAccessor,
    ObjectAccessor,
    ObjectTypeAccessor,
    RecordCache,
)
from tiercache_core.cache.policy import CachePolicy
from tiercache_core.errors import DeserializationError, RemoteFetchFailure
from tiercache_core.models.records import SObject, SObjectType, SObjectTypeLayout

MRU = "recent_objects_"
GLOBAL_KEY = "mru_for_global"
INTERVAL = 60.0


def make_objects(count, prefix="001"):
    return [
        SObject(
            object_type="Account",
            object_id=f"{prefix}{i:03d}",
            name=f"Account {i}",
            raw_data={"Id": f"{prefix}{i:03d}", "Industry": "Energy"},
        )
        for i in range(count)
    ]


class FakeRemote:
    """Remote fetch that counts calls and can fail."""

    def __init__(self, records):
        self.records = records
        self.calls = 0
        self.error = None

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def objects(coordinator):
    return ObjectAccessor(coordinator)


class TestTypedAccess:
    """Tests for read / write."""

    def test_object_round_trip(self, objects):
        """Test objects read back equal and in order."""
        records = make_objects(5)
        objects.write(MRU, GLOBAL_KEY, records)

        assert objects.read(MRU, GLOBAL_KEY) == records

    def test_read_missing(self, objects):
        assert objects.read(MRU, GLOBAL_KEY) is None

    def test_empty_list_is_not_absent(self, objects):
        objects.write(MRU, GLOBAL_KEY, [])
        assert objects.read(MRU, GLOBAL_KEY) == []

    def test_changing_returned_record_leaves_cache(self, coordinator, objects):
        """Test edits to a returned record never reach either tier."""
        account = SObject(
            object_type="Account",
            object_id="001000",
            raw_data={"attributes": {"type": "Account"}},
        )
        objects.write(MRU, GLOBAL_KEY, [account])

        first = objects.read(MRU, GLOBAL_KEY)
        first[0].raw_data["attributes"]["type"] = "Changed"
        first.append(account)

        assert objects.read(MRU, GLOBAL_KEY) == [account]
        coordinator.soft_reset()
        assert objects.read(MRU, GLOBAL_KEY) == [account]

    def test_read_entry(self, objects, clock):
        """Test records come back with their last write time."""
        assert objects.read_entry(MRU, GLOBAL_KEY) is None

        objects.write(MRU, GLOBAL_KEY, make_objects(2))
        written = clock.now
        clock.advance(30)

        records, last_write_time = objects.read_entry(MRU, GLOBAL_KEY)
        assert records == make_objects(2)
        assert last_write_time == written

    def test_record_cache_kinds(self, coordinator):
        """Test every record kind round-trips."""
        cache = RecordCache(coordinator)
        types = [SObjectType(name="Account", label="Account", key_prefix="001")]
        layouts = [SObjectTypeLayout(object_type="Account", raw_data={"searchColumns": ["Name"]})]

        cache.write_objects(MRU, GLOBAL_KEY, make_objects(2))
        cache.write_object_types("metadata_", "all_objects", types)
        cache.write_object_layouts("layout_", "object_layout_Account", layouts)
        cache.soft_reset()

        assert cache.read_objects(MRU, GLOBAL_KEY) == make_objects(2)
        assert cache.read_object_types("metadata_", "all_objects") == types
        layout = cache.read_object_layouts("layout_", "object_layout_Account")[0]
        assert layout.columns == ["Name"]

        cache.hard_reset()
        assert cache.read_object_types("metadata_", "all_objects") is None

    def test_wrong_schema_raises(self, coordinator, objects):
        """Test mismatched payloads raise DeserializationError."""
        coordinator.write_raw(MRU, GLOBAL_KEY, [{"unexpected": True}])

        with pytest.raises(DeserializationError) as exc_info:
            objects.read(MRU, GLOBAL_KEY)
        assert exc_info.value.cache_key == GLOBAL_KEY

    def test_wrong_schema_is_miss_for_policies(self, coordinator, objects):
        """Test the policy layer evicts unreadable payloads."""
        coordinator.write_raw(MRU, GLOBAL_KEY, [{"unexpected": True}])

        result = objects.load(
            MRU, GLOBAL_KEY, CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH, FakeRemote([])
        )
        assert result.records is None
        assert coordinator.read_raw(MRU, GLOBAL_KEY) is None

    def test_layouts_and_types_accessors(self, coordinator):
        types = ObjectTypeAccessor(coordinator)
        layouts = LayoutAccessor(coordinator)
        types.write("metadata_", "object_Contact", [SObjectType(name="Contact")])
        layouts.write("layout_", "object_layout_Contact", [SObjectTypeLayout("Contact")])

        assert types.read("metadata_", "object_Contact")[0].name == "Contact"
        assert layouts.read("layout_", "object_layout_Contact")[0].object_type == "Contact"


class TestReturnCacheDataWithoutRefresh:
    """Tests for RETURN_CACHE_DATA_WITHOUT_REFRESH."""

    def test_empty_cache_never_fetches(self, objects):
        remote = FakeRemote(make_objects(3))

        result = objects.load(
            MRU, GLOBAL_KEY, CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH, remote
        )

        assert result.records is None
        assert result.from_cache
        assert remote.calls == 0

    def test_returns_cached_even_when_stale(self, objects, clock):
        records = make_objects(3)
        objects.write(MRU, GLOBAL_KEY, records)
        clock.advance(INTERVAL * 100)
        remote = FakeRemote(make_objects(1, prefix="002"))

        result = objects.load(
            MRU, GLOBAL_KEY, CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH, remote, INTERVAL
        )

        assert result.records == records
        assert remote.calls == 0


class TestReloadAndReturnCacheData:
    """Tests for RELOAD_AND_RETURN_CACHE_DATA."""

    def test_fetches_and_caches(self, objects):
        remote = FakeRemote(make_objects(4))

        result = objects.load(MRU, GLOBAL_KEY, CachePolicy.RELOAD_AND_RETURN_CACHE_DATA, remote)

        assert remote.calls == 1
        assert result.is_fresh
        assert result.persisted
        assert objects.read(MRU, GLOBAL_KEY) == make_objects(4)

    def test_fetch_failure_serves_cache(self, objects):
        records = make_objects(2)
        objects.write(MRU, GLOBAL_KEY, records)
        remote = FakeRemote([])
        remote.error = RemoteFetchFailure("offline")

        result = objects.load(MRU, GLOBAL_KEY, CachePolicy.RELOAD_AND_RETURN_CACHE_DATA, remote)

        assert result.records == records
        assert result.from_cache

    def test_fetch_failure_without_cache_raises(self, objects):
        remote = FakeRemote([])
        remote.error = RemoteFetchFailure("offline")

        with pytest.raises(RemoteFetchFailure):
            objects.load(MRU, GLOBAL_KEY, CachePolicy.RELOAD_AND_RETURN_CACHE_DATA, remote)

    def test_persistence_failure_serves_uncached(self, objects, store):
        """Test fresh data is returned even when it cannot be cached."""
        store.fail_put = True
        remote = FakeRemote(make_objects(2))

        result = objects.load(MRU, GLOBAL_KEY, CachePolicy.RELOAD_AND_RETURN_CACHE_DATA, remote)

        assert result.records == make_objects(2)
        assert not result.persisted
        assert objects.read(MRU, GLOBAL_KEY) is None


class TestInvalidateCacheAndReload:
    """Tests for INVALIDATE_CACHE_AND_RELOAD."""

    def test_replaces_cache(self, objects):
        objects.write(MRU, GLOBAL_KEY, make_objects(3))
        remote = FakeRemote(make_objects(1, prefix="002"))

        result = objects.load(MRU, GLOBAL_KEY, CachePolicy.INVALIDATE_CACHE_AND_RELOAD, remote)

        assert result.is_fresh
        assert objects.read(MRU, GLOBAL_KEY) == make_objects(1, prefix="002")

    def test_fetch_failure_leaves_cache_empty(self, objects):
        objects.write(MRU, GLOBAL_KEY, make_objects(3))
        remote = FakeRemote([])
        remote.error = RemoteFetchFailure("offline")

        with pytest.raises(RemoteFetchFailure):
            objects.load(MRU, GLOBAL_KEY, CachePolicy.INVALIDATE_CACHE_AND_RELOAD, remote)

        assert objects.read(MRU, GLOBAL_KEY) is None


class TestReloadIfExpired:
    """Tests for RELOAD_IF_EXPIRED_AND_RETURN_CACHE_DATA."""

    policy = CachePolicy.RELOAD_IF_EXPIRED_AND_RETURN_CACHE_DATA

    def test_fresh_entry_is_served(self, objects, clock):
        records = make_objects(2)
        objects.write(MRU, GLOBAL_KEY, records)
        clock.advance(INTERVAL)
        remote = FakeRemote(make_objects(1, prefix="002"))

        result = objects.load(MRU, GLOBAL_KEY, self.policy, remote, INTERVAL)

        assert remote.calls == 0
        assert result.from_cache
        assert result.records == records

    def test_expired_entry_is_reloaded(self, objects, clock):
        objects.write(MRU, GLOBAL_KEY, make_objects(2))
        clock.advance(INTERVAL + 1)
        remote = FakeRemote(make_objects(1, prefix="002"))

        result = objects.load(MRU, GLOBAL_KEY, self.policy, remote, INTERVAL)

        assert remote.calls == 1
        assert result.is_fresh
        assert objects.read(MRU, GLOBAL_KEY) == make_objects(1, prefix="002")

    def test_absent_entry_is_loaded(self, objects):
        remote = FakeRemote(make_objects(2))

        result = objects.load(MRU, GLOBAL_KEY, self.policy, remote, INTERVAL)

        assert remote.calls == 1
        assert result.records == make_objects(2)

    def test_expired_entry_survives_fetch_failure(self, objects, clock):
        records = make_objects(2)
        objects.write(MRU, GLOBAL_KEY, records)
        clock.advance(INTERVAL + 1)
        remote = FakeRemote([])
        remote.error = RemoteFetchFailure("offline")

        result = objects.load(MRU, GLOBAL_KEY, self.policy, remote, INTERVAL)

        assert result.from_cache
        assert result.records == records


class TestReturnCacheDataAndReload:
    """Tests for RETURN_CACHE_DATA_AND_RELOAD."""

    policy = CachePolicy.RETURN_CACHE_DATA_AND_RELOAD

    def test_returns_cache_then_refreshes(self, coordinator, objects):
        cached = make_objects(2)
        objects.write(MRU, GLOBAL_KEY, cached)
        remote = FakeRemote(make_objects(3, prefix="002"))
        refreshed = []

        result = objects.load(
            MRU, GLOBAL_KEY, self.policy, remote, on_refresh=refreshed.append
        )
        assert result.records == cached
        assert result.from_cache

        coordinator.close(wait=True)
        assert remote.calls == 1
        assert refreshed == [make_objects(3, prefix="002")]
        assert objects.read(MRU, GLOBAL_KEY) == make_objects(3, prefix="002")

    def test_empty_cache_fetches_synchronously(self, objects):
        remote = FakeRemote(make_objects(2))

        result = objects.load(MRU, GLOBAL_KEY, self.policy, remote)

        assert result.is_fresh
        assert result.records == make_objects(2)
        assert remote.calls == 1

    def test_refresh_does_not_block_caller(self, coordinator, objects):
        objects.write(MRU, GLOBAL_KEY, make_objects(1))
        release = threading.Event()

        def slow_fetch():
            release.wait(timeout=5)
            return make_objects(2, prefix="002")

        result = objects.load(MRU, GLOBAL_KEY, self.policy, slow_fetch)
        assert result.records == make_objects(1)

        release.set()
        coordinator.close(wait=True)

    def test_refresh_after_hard_reset_is_discarded(self, coordinator, objects):
        """Test an in-flight refresh cannot resurrect pre-reset data."""
        objects.write(MRU, GLOBAL_KEY, make_objects(1))
        started = threading.Event()
        release = threading.Event()

        def slow_fetch():
            started.set()
            release.wait(timeout=5)
            return make_objects(2, prefix="002")

        objects.load(MRU, GLOBAL_KEY, self.policy, slow_fetch)
        assert started.wait(timeout=5)

        coordinator.hard_reset()
        release.set()
        coordinator.close(wait=True)

        assert objects.read(MRU, GLOBAL_KEY) is None
        assert coordinator.get_stats().discarded_writes == 1


class TestPolicyDispatch:
    """Tests for policy coverage."""

    @pytest.mark.parametrize("policy", list(CachePolicy))
    def test_every_policy_loads(self, objects, policy):
        remote = FakeRemote(make_objects(1))
        result = objects.load(MRU, GLOBAL_KEY, policy, remote, INTERVAL)
        assert result.records is None or result.records == make_objects(1)

    def test_only_cache_policy_never_fetches(self):
        assert not CachePolicy.RETURN_CACHE_DATA_WITHOUT_REFRESH.may_fetch
        assert CachePolicy.RELOAD_AND_RETURN_CACHE_DATA.may_fetch


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
