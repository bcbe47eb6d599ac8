"""Base models and types for the Moderation Desk database."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel
from pydantic import BeforeValidator
from pydantic import ConfigDict

# Row ids are opaque; uuid columns come back from asyncpg as UUID objects.
ItemId = Annotated[str, BeforeValidator(str)]


class ModerationStatus(str, Enum):
    """Moderation queue status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class SubmissionStatus(str, Enum):
    """Submission status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"


class SubmissionKind(str, Enum):
    """Kinds of user submissions awaiting review, named after their tables."""

    PODCASTS = "podcasts"
    COMMENTS = "comments"
    ARTICLES = "articles"


class StatusFilter(str, Enum):
    """Status filters available in the moderation views."""

    ALL = "all"
    PENDING = "pending"
    FLAGGED = "flagged"
    HIGH_PRIORITY = "high_priority"


class SortKey(str, Enum):
    """Sort keys available in the moderation views."""

    DATE = "date"
    PRIORITY = "priority"
    STATUS = "status"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class BulkAction(str, Enum):
    """Actions that can be applied to several items at once."""

    APPROVE = "approve"
    REJECT = "reject"
    FLAG = "flag"


class BaseDBModel(BaseModel):
    """Base model for database entities."""

    id: ItemId
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
