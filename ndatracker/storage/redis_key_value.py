"""
Redis-backed key-value medium.

Each key maps to one Redis string under the ``ndatracker:kv`` namespace.
The contract collection is small and always written whole, so a plain
SET/GET pair is all the medium needs.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..exceptions import StorageError
from ..utils.logging import log_event, track
from .key_value import KeyValueStore


class RedisKeyValueStore(KeyValueStore):
    """Key-value medium on a Redis server."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        client: Optional["redis.Redis"] = None,
    ):
        """
        Args:
            redis_url: Redis connection URL
            client: Pre-built client (used as-is, mostly for tests)
        """
        self.redis_url = redis_url
        self.redis_client: Optional[redis.Redis] = client
        self.key_prefix = "ndatracker:kv"

    @track(operation="redis_key_value_initialize", include_args=False)
    async def initialize(self) -> None:
        """
        Create the client if needed and verify connectivity.

        Raises:
            StorageError: If Redis is unreachable
        """
        try:
            if self.redis_client is None:
                self.redis_client = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=5,
                    retry_on_timeout=True,
                )
            await self.redis_client.ping()
        except (RedisError, OSError) as e:
            log_event(
                "redis_key_value_init_failed",
                {"redis_url": self.redis_url, "error": str(e)},
                level=logging.ERROR,
            )
            raise StorageError(f"Failed to connect to Redis: {e}") from e

        log_event(
            "redis_key_value_connected",
            {"redis_url": self.redis_url},
            level=logging.DEBUG,
        )

    def _client(self) -> "redis.Redis":
        if self.redis_client is None:
            raise StorageError("RedisKeyValueStore not initialized")
        return self.redis_client

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def read(self, key: str) -> Optional[str]:
        value = await self._client().get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def write(self, key: str, value: str) -> bool:
        try:
            return bool(await self._client().set(self._key(key), value))
        except RedisError as e:
            log_event(
                "redis_key_value_write_failed",
                {"key": key, "error": str(e)},
                level=logging.ERROR,
            )
            return False

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
