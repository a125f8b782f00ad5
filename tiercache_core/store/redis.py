"""TierCache Redis Store - Redis Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from tiercache_core.store.backend import DurableStore, StorageConfig

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
        scan_count: SCAN batch size for namespace wipes
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "tiercache:"
    scan_count: int = 100


class RedisStore(DurableStore):
    """Redis durable store.

    Keys are laid out as ``<prefix><namespace>:<key>`` so a namespace
    wipe is a prefix SCAN + DELETE.

    Example:
        store = RedisStore(RedisConfig(host="redis.local", port=6379))
        store.put("cache", "key", b"data")
        data = store.get("cache", "key")
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
    ):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built Redis client (skips pool creation)
        """
        super().__init__(config)
        self.config: RedisConfig = config or RedisConfig()
        self._client: Optional[Any] = client
        self._pool: Optional[Any] = None

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        try:
            import redis
        except ImportError:
            raise ImportError("Redis package not installed. Run: pip install redis")

        try:
            self._pool = redis.ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
                decode_responses=False,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            self._client.ping()
            logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
            return self._client

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def _namespace_prefix(self, namespace: str) -> str:
        return f"{self.config.prefix}{namespace}:"

    def _make_key(self, namespace: str, key: str) -> str:
        return f"{self._namespace_prefix(namespace)}{key}"

    def get(self, namespace: str, key: str) -> Optional[bytes]:
        try:
            client = self._ensure_connected()
            self._stats.reads += 1
            return client.get(self._make_key(namespace, key))

        except Exception as e:
            logger.error(f"Redis get error: {e}")
            self._stats.record_error(str(e))
            return None

    def put(self, namespace: str, key: str, data: bytes) -> bool:
        try:
            client = self._ensure_connected()
            client.set(self._make_key(namespace, key), data)
            self._stats.writes += 1
            return True

        except Exception as e:
            logger.error(f"Redis set error: {e}")
            self._stats.record_error(str(e))
            return False

    def remove(self, namespace: str, key: str) -> bool:
        try:
            client = self._ensure_connected()
            if client.delete(self._make_key(namespace, key)) > 0:
                self._stats.deletes += 1
            return True

        except Exception as e:
            logger.error(f"Redis delete error: {e}")
            self._stats.record_error(str(e))
            return False

    def _scan_namespace(self, client: Any, namespace: str):
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._namespace_prefix(namespace)) + "*"
        cursor = 0
        while True:
            cursor, batch = client.scan(cursor, match=pattern, count=self.config.scan_count)
            yield batch
            if cursor == 0:
                break

    def wipe_namespace(self, namespace: str) -> bool:
        try:
            client = self._ensure_connected()
            count = 0
            for batch in self._scan_namespace(client, namespace):
                if batch:
                    count += client.delete(*batch)
            self._stats.wipes += 1
            logger.debug(f"Wiped {count} Redis keys from namespace {namespace}")
            return True

        except Exception as e:
            logger.error(f"Redis wipe error: {e}")
            self._stats.record_error(str(e))
            return False

    def keys(self, namespace: str) -> List[str]:
        try:
            client = self._ensure_connected()
            prefix_len = len(self._namespace_prefix(namespace))
            keys = []
            for batch in self._scan_namespace(client, namespace):
                for key in batch:
                    key_str = key.decode() if isinstance(key, bytes) else key
                    keys.append(key_str[prefix_len:])
            return keys

        except Exception as e:
            logger.error(f"Redis keys error: {e}")
            return []

    def close(self) -> None:
        """Close Redis connection."""
        if self._pool:
            self._pool.disconnect()
            self._pool = None
            self._client = None

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig"]
