"""Request models for moderation endpoints."""

from datetime import datetime

from pydantic import BaseModel
from pydantic import Field

from moderationdesk_api.database.models.base import BulkAction
from moderationdesk_api.database.models.base import SubmissionKind


class ReviewRequest(BaseModel):
    """Approve or reject a submission."""

    comment: str | None = None


class BulkActionRequest(BaseModel):
    """Apply one action to several items."""

    action: BulkAction
    ids: list[str] = Field(default_factory=list)
    kind: SubmissionKind = SubmissionKind.PODCASTS
    comment: str | None = None


class AssignModeratorRequest(BaseModel):
    """Assign a queue row; an empty moderator id unassigns it."""

    moderator_id: str = ""
    expected_updated_at: datetime | None = None


class FlagRequest(BaseModel):
    """Flag a queue row."""

    reason: str | None = None
    expected_updated_at: datetime | None = None


class NotesRequest(BaseModel):
    """Replace the moderation notes of a queue row."""

    notes: str | None = None
    expected_updated_at: datetime | None = None


class AutoRefreshRequest(BaseModel):
    """Turn periodic reloading on or off."""

    enabled: bool
