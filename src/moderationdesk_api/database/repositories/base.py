"""Base repository class for the Moderation Desk API."""

from abc import ABC
from abc import abstractmethod
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import Generic
from typing import TypeVar

from asyncpg import Record

from moderationdesk_api.database.connection import get_db_connection

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Base repository class with common database operations."""

    def __init__(self, table_name: str):
        self.table_name = table_name

    @abstractmethod
    def _record_to_model(self, record: Record) -> T:
        """Convert database record to model instance."""

    async def get_by_id(self, item_id: str) -> T | None:
        """Get a record by id."""
        query = f"SELECT * FROM {self.table_name} WHERE id = $1"  # nosec B608

        async with get_db_connection() as connection:
            record = await connection.fetchrow(query, item_id)
            return self._record_to_model(record) if record else None

    async def get_all(self, limit: int = 100, offset: int = 0) -> list[T]:
        """Get all records with pagination."""
        query = f"""
            SELECT * FROM {self.table_name}
            ORDER BY created_at DESC
            LIMIT $1 OFFSET $2
        """  # nosec B608

        async with get_db_connection() as connection:
            records = await connection.fetch(query, limit, offset)
            return [self._record_to_model(record) for record in records]

    async def count(
        self, where_clause: str = "", params: list[Any] | None = None
    ) -> int:
        """Count records with optional where clause."""
        if params is None:
            params = []

        query = f"SELECT COUNT(*) FROM {self.table_name}"  # nosec B608
        if where_clause:
            query += f" WHERE {where_clause}"

        async with get_db_connection() as connection:
            result = await connection.fetchval(query, *params)
            return result or 0

    async def exists(self, item_id: str) -> bool:
        """Check if a record exists by id."""
        query = f"SELECT EXISTS(SELECT 1 FROM {self.table_name} WHERE id = $1)"  # nosec B608

        async with get_db_connection() as connection:
            result = await connection.fetchval(query, item_id)
            return bool(result)

    async def find_by_ids(self, ids: Iterable[str]) -> list[T]:
        """Fetch every record whose id is in ``ids`` with a single query."""
        distinct_ids = list(dict.fromkeys(i for i in ids if i))
        if not distinct_ids:
            return []

        query = f"SELECT * FROM {self.table_name} WHERE id = ANY($1)"  # nosec B608

        async with get_db_connection() as connection:
            records = await connection.fetch(query, distinct_ids)
            return [self._record_to_model(record) for record in records]

    async def create_from_dict(self, data: dict[str, Any]) -> T:
        """Create a new record."""
        columns = list(data.keys())
        placeholders = [f"${i + 1}" for i in range(len(columns))]
        values = list(data.values())

        query = f"""
            INSERT INTO {self.table_name} ({", ".join(columns)})
            VALUES ({", ".join(placeholders)})
            RETURNING *
        """  # nosec B608

        async with get_db_connection() as connection:
            record = await connection.fetchrow(query, *values)
            if record is None:
                raise ValueError(f"Failed to create record in {self.table_name}")
            return self._record_to_model(record)

    async def update_where(
        self,
        item_id: str,
        data: dict[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> T | None:
        """Update a record by id, optionally only when columns hold expected values.

        ``updated_at`` is always set to the database clock and every value in
        ``data`` is passed as a query parameter. Returns ``None`` when no row
        matched the id and the expectations.
        """
        set_clauses = ["updated_at = NOW()"]
        values: list[Any] = []
        for column, value in data.items():
            values.append(value)
            set_clauses.append(f"{column} = ${len(values)}")

        values.append(item_id)
        conditions = [f"id = ${len(values)}"]
        for column, value in (expected or {}).items():
            values.append(value)
            conditions.append(f"{column} IS NOT DISTINCT FROM ${len(values)}")

        query = f"""
            UPDATE {self.table_name}
            SET {", ".join(set_clauses)}
            WHERE {" AND ".join(conditions)}
            RETURNING *
        """  # nosec B608

        async with get_db_connection() as connection:
            record = await connection.fetchrow(query, *values)
            return self._record_to_model(record) if record else None
