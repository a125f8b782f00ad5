"""TierCache File Store - On-Device Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import logging
import os
import pickle
import re
import shutil
import threading
from pathlib import Path
from typing import List, Optional

from tiercache_core.store.backend import DurableStore, StorageConfig

logger = logging.getLogger(__name__)

_NAMESPACE_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileStore(DurableStore):
    """File-based durable store.

    Persists blobs to disk so cached data survives restarts. Each
    namespace is a directory, sharded by key hash.

    Layout:
        <base_path>/<namespace>/<shard>/<sha256(key)>

    Features:
    - Atomic writes (temp file + rename)
    - Optional fsync per write
    - Namespace wipe in one rmtree

    Example:
        store = FileStore("/var/cache/myapp")
        store.put("cache", "key", b"data")
        data = store.get("cache", "key")
    """

    def __init__(
        self,
        base_path: str,
        config: Optional[StorageConfig] = None,
    ):
        """Initialize file store.

        Args:
            base_path: Base directory for cache files
            config: Storage configuration
        """
        super().__init__(config)
        self.base_path = Path(base_path)
        self._lock = threading.RLock()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _namespace_dir(self, namespace: str) -> Path:
        if not _NAMESPACE_RE.match(namespace):
            raise ValueError(f"Invalid namespace: {namespace!r}")
        return self.base_path / namespace

    def _get_path(self, namespace: str, key: str) -> Path:
        """Get file path for key.

        Args:
            namespace: Store namespace
            key: Blob key

        Returns:
            File path
        """
        # Hashed filename handles special characters in keys
        filename = hashlib.sha256(key.encode()).hexdigest()
        return self._namespace_dir(namespace) / filename[:2] / filename

    def get(self, namespace: str, key: str) -> Optional[bytes]:
        path = self._get_path(namespace, key)

        try:
            with self._lock:
                self._stats.reads += 1

                if not path.exists():
                    return None

                with open(path, "rb") as f:
                    record = pickle.load(f)

                return record["data"]

        except Exception as e:
            logger.error(f"Error reading {key}: {e}")
            self._stats.record_error(str(e))
            return None

    def put(self, namespace: str, key: str, data: bytes) -> bool:
        path = self._get_path(namespace, key)
        temp_path = path.with_suffix(".tmp")

        try:
            with self._lock:
                path.parent.mkdir(parents=True, exist_ok=True)

                with open(temp_path, "wb") as f:
                    pickle.dump({"key": key, "data": bytes(data)}, f)
                    if self.config.sync_writes:
                        f.flush()
                        os.fsync(f.fileno())

                os.replace(temp_path, path)
                self._stats.writes += 1
                return True

        except Exception as e:
            logger.error(f"Error writing {key}: {e}")
            self._stats.record_error(str(e))

            if temp_path.exists():
                temp_path.unlink()

            return False

    def remove(self, namespace: str, key: str) -> bool:
        path = self._get_path(namespace, key)

        try:
            with self._lock:
                if path.exists():
                    path.unlink()
                    self._stats.deletes += 1
                return True

        except Exception as e:
            logger.error(f"Error deleting {key}: {e}")
            self._stats.record_error(str(e))
            return False

    def wipe_namespace(self, namespace: str) -> bool:
        ns_dir = self._namespace_dir(namespace)

        try:
            with self._lock:
                if ns_dir.exists():
                    shutil.rmtree(ns_dir)
                self._stats.wipes += 1
                return True

        except Exception as e:
            logger.error(f"Error wiping namespace {namespace}: {e}")
            self._stats.record_error(str(e))
            return False

    def keys(self, namespace: str) -> List[str]:
        """List keys in a namespace.

        Reads every file to recover the original key, so this is
        expensive for large namespaces.
        """
        ns_dir = self._namespace_dir(namespace)
        keys = []

        with self._lock:
            if not ns_dir.exists():
                return keys
            for file_path in ns_dir.glob("*/*"):
                if not file_path.is_file() or file_path.suffix == ".tmp":
                    continue
                try:
                    with open(file_path, "rb") as f:
                        keys.append(pickle.load(f)["key"])
                except Exception as e:
                    logger.warning(f"Skipping unreadable cache file {file_path}: {e}")

        return keys

    def disk_usage(self, namespace: str) -> int:
        """Get total disk usage of a namespace in bytes."""
        ns_dir = self._namespace_dir(namespace)
        if not ns_dir.exists():
            return 0
        return sum(p.stat().st_size for p in ns_dir.glob("*/*") if p.is_file())

    def __repr__(self) -> str:
        return f"FileStore(path={self.base_path})"


__all__ = ["FileStore"]
