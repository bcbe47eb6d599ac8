"""Admin action audit trail model for the Moderation Desk API."""

import json

from datetime import UTC
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

from moderationdesk_api.database.models.base import BaseDBModel
from moderationdesk_api.database.models.base import ItemId


class AdminActionType(str, Enum):
    """Moderation actions recorded in the audit trail."""

    APPROVE = "approve"
    REJECT = "reject"
    FLAG = "flag"
    ASSIGN_MODERATOR = "assign_moderator"
    UPDATE_NOTES = "update_notes"
    BULK_APPROVE = "bulk_approve"
    BULK_REJECT = "bulk_reject"
    BULK_FLAG = "bulk_flag"


class AdminAction(BaseDBModel):
    """Track moderation actions for audit trail."""

    admin_id: ItemId
    action: str
    target_type: str
    target_id: ItemId | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @field_validator("details", mode="before")
    @classmethod
    def _decode_details(cls, value):
        # Text when read through a connection without the jsonb codec
        if value is None:
            return {}
        if isinstance(value, str):
            return json.loads(value)
        return value


class AdminActionCreate(BaseModel):
    """Model for creating audit entries."""

    admin_id: str
    action: AdminActionType
    target_type: str
    target_id: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AuditLogResponse(BaseModel):
    """Response model for audit log listing."""

    actions: list[AdminAction]
    total_count: int
    limit: int
    offset: int
