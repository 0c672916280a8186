"""Redis client for the auth rate-limit counters."""

from typing import Optional

import redis.asyncio as redis

from ..config import get_settings
from .logging import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Thin wrapper that degrades to a no-op when Redis is unreachable."""

    def __init__(self):
        self.settings = get_settings()
        self.redis: Optional[redis.Redis] = None

    @property
    def connected(self) -> bool:
        return self.redis is not None

    async def connect(self) -> None:
        """Connect to Redis."""
        try:
            self.redis = redis.from_url(
                self.settings.redis_url,
                max_connections=self.settings.redis_max_connections,
                decode_responses=True,
            )
            await self.redis.ping()
            logger.info("Connected to Redis", extra={"redis_url": self.settings.redis_url})
        except Exception:
            self.redis = None
            logger.error("Failed to connect to Redis", exc_info=True)
            raise

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Disconnected from Redis")

    async def ping(self) -> bool:
        if not self.redis:
            return False
        try:
            return bool(await self.redis.ping())
        except Exception:
            logger.warning("Redis ping failed", exc_info=True)
            return False

    async def increment_rate_limit(self, key: str, expire: int = 60) -> Optional[int]:
        """
        Increment a fixed-window counter and return its new value.

        The expiry is only set when the key is created so the window does not
        slide. Returns None when Redis is unavailable.
        """
        if not self.redis:
            return None
        try:
            count = int(await self.redis.incr(key))
            if count == 1:
                await self.redis.expire(key, expire)
            return count
        except Exception:
            logger.error("Rate limit counter error", extra={"key": key}, exc_info=True)
            return None


# Singleton instance
_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get Redis client singleton."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
