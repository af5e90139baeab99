"""Redis client wrapper for Linfy counters."""

import logging
from typing import Optional

import redis.asyncio as redis


class RedisCache:
    """Redis connection used for expiring counters (rate limiting)."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: str = "linfy",
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            key_prefix: Namespace prepended to every key
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def increment(self, key: str, ttl_seconds: int) -> Optional[int]:
        """Increment a counter, starting its expiry on first use.

        Args:
            key: Cache key
            ttl_seconds: Lifetime of a freshly created counter

        Returns:
            New value or None if Redis is unavailable
        """
        if not self.enabled or not self.client:
            return None

        try:
            value = await self.client.incr(key)
            if value == 1:
                await self.client.expire(key, ttl_seconds)
            return value
        except redis.RedisError as e:
            self.logger.error(f"Cache increment error: {e}")
            return None

    async def ping(self) -> bool:
        """Whether Redis answers; True when Redis is not configured."""
        if self.redis_url is None:
            return True
        if not self.client:
            return False
        try:
            return bool(await self.client.ping())
        except redis.RedisError as e:
            self.logger.error(f"Cache ping error: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, *parts: str) -> str:
        """Generate a namespaced cache key.

        Returns:
            Cache key
        """
        return ":".join((self.key_prefix,) + tuple(parts))
