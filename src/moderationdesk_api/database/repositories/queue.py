"""Moderation queue repository for the Moderation Desk API."""

from datetime import datetime

from asyncpg import Record

from moderationdesk_api.database.connection import get_db_connection
from moderationdesk_api.database.models.base import ModerationStatus
from moderationdesk_api.database.models.queue import ModerationQueueItem
from moderationdesk_api.database.repositories.base import BaseRepository

OPEN_STATUSES = [ModerationStatus.PENDING.value, ModerationStatus.FLAGGED.value]


class ModerationQueueRepository(BaseRepository[ModerationQueueItem]):
    """Repository for the content moderation queue."""

    def __init__(self):
        super().__init__("content_moderation_queue")

    def _record_to_model(self, record: Record) -> ModerationQueueItem:
        """Convert database record to ModerationQueueItem model."""
        return ModerationQueueItem.model_validate(dict(record))

    async def get_open_items(self) -> list[ModerationQueueItem]:
        """Get every queue row still awaiting a decision, highest priority first."""
        query = """
            SELECT * FROM content_moderation_queue
            WHERE status IS NULL OR status = ANY($1)
            ORDER BY priority DESC NULLS LAST, created_at DESC
        """

        async with get_db_connection() as connection:
            records = await connection.fetch(query, OPEN_STATUSES)
            return [self._record_to_model(record) for record in records]

    async def get_created_since(self, since: datetime) -> list[ModerationQueueItem]:
        """Get every queue row created at or after ``since``."""
        query = """
            SELECT * FROM content_moderation_queue
            WHERE created_at >= $1
            ORDER BY created_at DESC
        """

        async with get_db_connection() as connection:
            records = await connection.fetch(query, since)
            return [self._record_to_model(record) for record in records]
