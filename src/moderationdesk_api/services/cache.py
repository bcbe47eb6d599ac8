"""Redis cache for resolved display names.

Entries are written with ``SETEX``, so Redis expires them on its own. The
cache only saves lookups: when Redis is unreachable every read is a miss
and writes are skipped.
"""

import logging

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from moderationdesk_api.config.redis import get_redis_settings
from moderationdesk_api.database.redis_connection import get_redis_client

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 10 * 60


class NameCache:
    """Display names keyed by namespace (profile, category, article) and id."""

    def __init__(
        self,
        ttl: int = DEFAULT_TTL_SECONDS,
        client_factory: Callable[[], Awaitable[Redis]] = get_redis_client,
        key_prefix: str | None = None,
    ):
        self.ttl = ttl
        self._client_factory = client_factory
        self.key_prefix = key_prefix or get_redis_settings().key_prefix

    def _key(self, namespace: str, item_id: str) -> str:
        return f"{self.key_prefix}:name:{namespace}:{item_id}"

    async def get_many(self, namespace: str, ids: Sequence[str]) -> dict[str, str]:
        """Return the cached names among ``ids``; missing ids are left out."""
        if not ids:
            return {}

        try:
            client = await self._client_factory()
            values = await client.mget([self._key(namespace, i) for i in ids])
        except RedisError as e:
            logger.warning(f"Name cache read failed for {namespace}: {e}")
            return {}

        return {
            item_id: value
            for item_id, value in zip(ids, values, strict=True)
            if value is not None
        }

    async def set_many(self, namespace: str, names: dict[str, str]) -> None:
        """Cache resolved names for ``ttl`` seconds."""
        if not names:
            return

        try:
            client = await self._client_factory()
            for item_id, name in names.items():
                await client.setex(self._key(namespace, item_id), self.ttl, name)
        except RedisError as e:
            logger.warning(f"Name cache write failed for {namespace}: {e}")

