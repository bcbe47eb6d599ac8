"""Admin action repository for the Moderation Desk API."""

from asyncpg import Record

from moderationdesk_api.database.models.admin_action import AdminAction
from moderationdesk_api.database.models.admin_action import AdminActionCreate
from moderationdesk_api.database.repositories.base import BaseRepository


class AdminActionRepository(BaseRepository[AdminAction]):
    """Repository for the moderation audit trail."""

    def __init__(self):
        super().__init__("admin_actions")

    def _record_to_model(self, record: Record) -> AdminAction:
        """Convert database record to AdminAction model."""
        return AdminAction.model_validate(dict(record))

    async def create_action(self, action: AdminActionCreate) -> AdminAction:
        """Log a moderation action."""
        # details goes through the pool's jsonb codec
        data = action.model_dump(mode="json")
        data["created_at"] = action.created_at
        return await self.create_from_dict(data)

    async def get_recent_actions(
        self,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AdminAction]:
        """Get recent moderation actions."""
        return await self.get_all(limit=limit, offset=offset)

    async def get_actions_count(self) -> int:
        """Get total count of audit entries."""
        return await self.count()

