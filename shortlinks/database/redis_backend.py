"""Redis storage backend for short links."""

import logging
from typing import Optional

import redis.asyncio as redis

from ..exceptions import StorageError
from .base import StorageBackend


class RedisBackend(StorageBackend):
    """Stores blobs as plain Redis string values."""

    name = "redis"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: str = "shortlinks:",
        client: Optional[redis.Redis] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis backend.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            key_prefix: Prefix added to every storage key
            client: Optional pre-built client (takes precedence over redis_url)
            logger: Optional logger instance
        """
        if client is None and not redis_url:
            raise ValueError("RedisBackend needs a redis_url or a client")
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[redis.Redis] = client

    async def connect(self) -> None:
        """Connect to Redis."""
        if self.client is not None:
            return

        self.client = redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await self.client.ping()
        except redis.RedisError as e:
            raise StorageError(f"failed to connect to Redis at {self.redis_url}", original_error=e)
        self.logger.info("Connected to Redis")

    def get_storage_key(self, key: str) -> str:
        """Generate the Redis key for a storage key.

        Args:
            key: Storage key

        Returns:
            Redis key
        """
        return f"{self.key_prefix}{key}"

    async def load(self, key: str) -> Optional[str]:
        await self.connect()
        try:
            value = await self.client.get(self.get_storage_key(key))
        except redis.RedisError as e:
            raise StorageError(f"Redis get failed for {key}", original_error=e)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def save(self, key: str, blob: str) -> None:
        await self.connect()
        try:
            await self.client.set(self.get_storage_key(key), blob)
        except redis.RedisError as e:
            raise StorageError(f"Redis set failed for {key}", original_error=e)

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")

    async def health_check(self) -> bool:
        try:
            await self.connect()
            return bool(await self.client.ping())
        except (StorageError, redis.RedisError) as e:
            self.logger.error(f"Redis health check failed: {e}")
            return False
