"""TierCache Memory Store - In-Process Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from tiercache_core.store.backend import DurableStore, StorageConfig

logger = logging.getLogger(__name__)


class MemoryStore(DurableStore):
    """In-process blob store.

    Survives soft resets of the coordinator but not the process. Useful
    for ephemeral sessions and tests.

    Example:
        store = MemoryStore()
        store.put("cache", "key", b"data")
        data = store.get("cache", "key")
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        super().__init__(config)
        self._data: Dict[str, Dict[str, bytes]] = {}
        self._lock = threading.RLock()

    def get(self, namespace: str, key: str) -> Optional[bytes]:
        with self._lock:
            self._stats.reads += 1
            return self._data.get(namespace, {}).get(key)

    def put(self, namespace: str, key: str, data: bytes) -> bool:
        with self._lock:
            self._data.setdefault(namespace, {})[key] = bytes(data)
            self._stats.writes += 1
            return True

    def remove(self, namespace: str, key: str) -> bool:
        with self._lock:
            if self._data.get(namespace, {}).pop(key, None) is not None:
                self._stats.deletes += 1
            return True

    def wipe_namespace(self, namespace: str) -> bool:
        with self._lock:
            self._data.pop(namespace, None)
            self._stats.wipes += 1
            return True

    def keys(self, namespace: str) -> List[str]:
        with self._lock:
            return list(self._data.get(namespace, {}).keys())

    def __repr__(self) -> str:
        return f"MemoryStore(namespaces={len(self._data)})"


__all__ = ["MemoryStore"]
