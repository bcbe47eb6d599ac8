"""Moderation queue models for the Moderation Desk API."""

from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import computed_field
from pydantic import field_validator

from moderationdesk_api.database.models.base import BaseDBModel
from moderationdesk_api.database.models.base import ItemId
from moderationdesk_api.database.models.base import ModerationStatus

UNASSIGNED = "Unassigned"
UNKNOWN_USER = "Unknown User"


class ModerationQueueItem(BaseDBModel):
    """Row of the content moderation queue with resolved display names."""

    content_id: ItemId
    content_type: str
    status: ModerationStatus = ModerationStatus.PENDING
    priority: int = Field(default=1, ge=1, le=5)
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    assigned_moderator_id: ItemId | None = None
    assigned_moderator_name: str = UNASSIGNED
    submitter_id: ItemId | None = None
    submitter_name: str = UNKNOWN_USER
    auto_flagged_reasons: list[str] = Field(default_factory=list)
    moderation_notes: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return ModerationStatus.PENDING if value is None else value

    @field_validator("priority", mode="before")
    @classmethod
    def _default_priority(cls, value):
        return 1 if value is None else value

    @field_validator("auto_flagged_reasons", mode="before")
    @classmethod
    def _default_reasons(cls, value):
        return [] if value is None else value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def auto_flagged(self) -> bool:
        return bool(self.auto_flagged_reasons)


class ModerationStats(BaseModel):
    """Aggregate statistics over the recent moderation window."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    flagged: int = 0
    high_priority: int = 0
    resolution_rate: int = 0
    avg_response_time: str = "N/A"

    model_config = ConfigDict(from_attributes=True)


class ModeratorSummary(BaseModel):
    """Moderator account offered in the assignment picker."""

    id: ItemId
    display_name: str

    model_config = ConfigDict(from_attributes=True)
