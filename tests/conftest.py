"""Shared fixtures for TierCache tests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from tiercache_core.cache.coordinator import CacheCoordinator, CoordinatorConfig
from tiercache_core.store.memory import MemoryStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now=1_000_000.0):
        self.now = now

    def advance(self, seconds):
        self.now += seconds

    def __call__(self):
        return self.now


class FlakyStore(MemoryStore):
    """MemoryStore that fails on demand."""

    def __init__(self):
        super().__init__()
        self.fail_get = False
        self.fail_put = False
        self.fail_remove = False
        self.fail_wipe = False

    def get(self, namespace, key):
        if self.fail_get:
            raise IOError("disk unavailable")
        return super().get(namespace, key)

    def put(self, namespace, key, data):
        if self.fail_put:
            return False
        return super().put(namespace, key, data)

    def remove(self, namespace, key):
        if self.fail_remove:
            return False
        return super().remove(namespace, key)

    def wipe_namespace(self, namespace):
        if self.fail_wipe:
            raise IOError("disk unavailable")
        return super().wipe_namespace(namespace)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def coordinator(store, clock):
    coordinator = CacheCoordinator(store, CoordinatorConfig(name="test"), clock=clock)
    coordinator.init()
    yield coordinator
    coordinator.close()
