"""Database repositories for the Moderation Desk API."""

from moderationdesk_api.database.repositories.admin_action import (
    AdminActionRepository,
)
from moderationdesk_api.database.repositories.base import BaseRepository
from moderationdesk_api.database.repositories.profile import CategoryRepository
from moderationdesk_api.database.repositories.profile import ProfileRepository
from moderationdesk_api.database.repositories.queue import (
    ModerationQueueRepository,
)
from moderationdesk_api.database.repositories.submission import ArticleRepository
from moderationdesk_api.database.repositories.submission import CommentRepository
from moderationdesk_api.database.repositories.submission import PodcastRepository
from moderationdesk_api.database.repositories.submission import (
    SubmissionRepository,
)

__all__ = [
    "AdminActionRepository",
    "ArticleRepository",
    "BaseRepository",
    "CategoryRepository",
    "CommentRepository",
    "ModerationQueueRepository",
    "PodcastRepository",
    "ProfileRepository",
    "SubmissionRepository",
]
