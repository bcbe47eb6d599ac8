"""Shared Redis client used for caching."""

import logging

import redis.asyncio as redis

from moderationdesk_api.config.redis import get_redis_settings

logger = logging.getLogger(__name__)


class RedisConnection:
    """Lazily creates one Redis client and closes it on shutdown."""

    def __init__(self):
        self._redis_client: redis.Redis | None = None
        self.settings = get_redis_settings()

    async def get_redis_client(self) -> redis.Redis:
        """Get or create the Redis client."""
        if self._redis_client is None:
            self._redis_client = redis.from_url(
                self.settings.redis_url,
                decode_responses=True,
                max_connections=self.settings.max_connections,
                retry_on_timeout=self.settings.retry_on_timeout,
                socket_timeout=self.settings.socket_timeout,
                socket_connect_timeout=self.settings.socket_connect_timeout,
            )
        return self._redis_client

    async def close(self) -> None:
        """Close the Redis client if one was created."""
        client, self._redis_client = self._redis_client, None
        if client is not None:
            await client.aclose()
            logger.info("Redis client closed")


# Global connection instance
redis_connection = RedisConnection()


async def get_redis_client() -> redis.Redis:
    """Get the shared Redis client."""
    return await redis_connection.get_redis_client()


async def close_redis_connections() -> None:
    """Close the shared Redis client."""
    await redis_connection.close()
