"""asyncpg pool shared by every repository."""

import json
import logging

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import asyncpg

from asyncpg import Connection
from asyncpg import Pool

from moderationdesk_api.config.database import DatabaseSettings
from moderationdesk_api.config.database import get_database_settings
from moderationdesk_api.config.database import get_database_url

logger = logging.getLogger(__name__)

APPLICATION_NAME = "moderationdesk-api"


async def _init_connection(connection: Connection) -> None:
    """Decode json and jsonb columns, such as audit details, as Python objects."""
    for type_name in ("json", "jsonb"):
        await connection.set_type_codec(
            type_name, encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
        )


class Database:
    """Owns the connection pool for the lifetime of the app."""

    def __init__(self, settings: DatabaseSettings | None = None):
        self._pool: Pool | None = None
        self._settings = settings or get_database_settings()

    async def connect(self) -> None:
        """Open the pool; a second call is a no-op."""
        if self._pool is not None:
            logger.warning("Database pool already initialized")
            return

        try:
            self._pool = await asyncpg.create_pool(
                get_database_url(),
                min_size=self._settings.min_pool_size,
                max_size=self._settings.max_pool_size,
                timeout=self._settings.pool_timeout,
                command_timeout=self._settings.command_timeout,
                init=_init_connection,
                server_settings={
                    "application_name": APPLICATION_NAME,
                    "timezone": "UTC",
                },
            )
        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

        logger.info(
            f"Database pool ready ({self._settings.min_pool_size}-"
            f"{self._settings.max_pool_size} connections)"
        )

    async def disconnect(self) -> None:
        """Close the pool if it is open."""
        pool, self._pool = self._pool, None
        if pool is None:
            logger.warning("Database pool not initialized")
            return

        await pool.close()
        logger.info("Database pool closed")

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[Connection]:
        """Borrow a connection from the pool."""
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call connect() first.")

        async with self._pool.acquire() as connection:
            yield connection

    async def health_check(self) -> bool:
        """True when a pooled connection answers a trivial query."""
        if self._pool is None:
            return False

        try:
            async with self.get_connection() as connection:
                await connection.fetchval("SELECT 1")
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
        return True

    async def get_pool_stats(self) -> dict:
        """Pool sizing for the health endpoint."""
        if self._pool is None:
            return {"status": "not_initialized"}

        return {
            "status": "initialized",
            "size": self._pool.get_size(),
            "min_size": self._pool.get_min_size(),
            "max_size": self._pool.get_max_size(),
            "idle_size": self._pool.get_idle_size(),
        }


# Global database instance
db = Database()


async def init_database() -> None:
    """Open the global pool."""
    await db.connect()


async def close_database() -> None:
    """Close the global pool."""
    await db.disconnect()


@asynccontextmanager
async def get_db_connection() -> AsyncGenerator[Connection]:
    """Borrow a connection from the global pool."""
    async with db.get_connection() as connection:
        yield connection
