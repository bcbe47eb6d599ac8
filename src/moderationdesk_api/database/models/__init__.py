"""Database models for the Moderation Desk API."""

from moderationdesk_api.database.models.admin_action import AdminAction
from moderationdesk_api.database.models.admin_action import AdminActionCreate
from moderationdesk_api.database.models.admin_action import AdminActionType
from moderationdesk_api.database.models.base import BulkAction
from moderationdesk_api.database.models.base import ModerationStatus
from moderationdesk_api.database.models.base import SortKey
from moderationdesk_api.database.models.base import SortOrder
from moderationdesk_api.database.models.base import StatusFilter
from moderationdesk_api.database.models.base import SubmissionKind
from moderationdesk_api.database.models.base import SubmissionStatus
from moderationdesk_api.database.models.queue import ModerationQueueItem
from moderationdesk_api.database.models.queue import ModerationStats
from moderationdesk_api.database.models.queue import ModeratorSummary
from moderationdesk_api.database.models.submission import ArticleSubmission
from moderationdesk_api.database.models.submission import CommentSubmission
from moderationdesk_api.database.models.submission import PodcastSubmission
from moderationdesk_api.database.models.submission import Submission

__all__ = [
    "AdminAction",
    "AdminActionCreate",
    "AdminActionType",
    "ArticleSubmission",
    "BulkAction",
    "CommentSubmission",
    "ModerationQueueItem",
    "ModerationStats",
    "ModerationStatus",
    "ModeratorSummary",
    "PodcastSubmission",
    "SortKey",
    "SortOrder",
    "StatusFilter",
    "Submission",
    "SubmissionKind",
    "SubmissionStatus",
]
