"""Audit trail for moderation actions.

Writing the trail is best effort with no delivery guarantee. The write is
awaited inline, so the entry exists by the time the action returns, but a
failed write is logged and swallowed and never undoes the action being
recorded.
"""

import logging

from typing import Any

from moderationdesk_api.database.models.admin_action import AdminAction
from moderationdesk_api.database.models.admin_action import AdminActionCreate
from moderationdesk_api.database.models.admin_action import AdminActionType
from moderationdesk_api.database.models.admin_action import AuditLogResponse
from moderationdesk_api.database.repositories.admin_action import (
    AdminActionRepository,
)

logger = logging.getLogger(__name__)


class AuditService:
    """Records and lists moderation actions."""

    def __init__(self, admin_action_repo: AdminActionRepository | None = None):
        self.admin_action_repo = admin_action_repo or AdminActionRepository()

    async def record(
        self,
        admin_id: str,
        action: AdminActionType,
        target_type: str,
        target_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AdminAction | None:
        """Append an audit entry; returns None when the write failed."""
        entry = AdminActionCreate(
            admin_id=admin_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=details or {},
        )

        try:
            return await self.admin_action_repo.create_action(entry)
        except Exception as e:
            logger.warning(
                f"Failed to log admin action {action.value} on "
                f"{target_type} {target_id}: {e}"
            )
            return None

    async def get_audit_log(self, limit: int = 50, offset: int = 0) -> AuditLogResponse:
        """Get the most recent audit entries."""
        actions = await self.admin_action_repo.get_recent_actions(
            limit=limit, offset=offset
        )
        total_count = await self.admin_action_repo.get_actions_count()

        return AuditLogResponse(
            actions=actions,
            total_count=total_count,
            limit=limit,
            offset=offset,
        )
