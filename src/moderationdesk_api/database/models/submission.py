"""Pending submission models for the Moderation Desk API.

Podcasts, comments and articles share a review shape; the priority of each
kind is a fixed client-side constant rather than something the database
derives.
"""

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from moderationdesk_api.database.models.base import ItemId
from moderationdesk_api.database.models.base import SubmissionKind
from moderationdesk_api.database.models.base import SubmissionStatus

PODCAST_PRIORITY = 3
COMMENT_PRIORITY = 2
ARTICLE_PRIORITY = 4

UNKNOWN_CATEGORY = "Unknown Category"
UNKNOWN_ARTICLE = "Unknown Article"
ADMIN_SUBMITTER = "Admin"


class BaseSubmission(BaseModel):
    """Fields common to every pending submission."""

    kind: ClassVar[SubmissionKind]

    id: ItemId
    status: SubmissionStatus = SubmissionStatus.PENDING
    priority: int
    submitted_at: datetime | None = None
    admin_comments: str | None = None
    submitter_name: str | None = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        return SubmissionStatus.PENDING if value is None else value


class PodcastSubmission(BaseSubmission):
    """Podcast feed submitted for listing."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.PODCASTS

    priority: int = PODCAST_PRIORITY
    name: str
    feed_url: str
    image_url: str | None = None
    author: str | None = None
    description: str | None = None
    category_id: ItemId | None = None
    category_name: str = UNKNOWN_CATEGORY
    submitter_id: ItemId | None = None


class CommentSubmission(BaseSubmission):
    """Reader comment awaiting publication."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.COMMENTS

    priority: int = COMMENT_PRIORITY
    content: str
    user_id: ItemId | None = None
    article_id: ItemId | None = None
    article_title: str = UNKNOWN_ARTICLE


class ArticleSubmission(BaseSubmission):
    """Article draft awaiting publication."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.ARTICLES

    priority: int = ARTICLE_PRIORITY
    title: str
    content: str | None = None
    excerpt: str | None = None
    author: str | None = None
    author_id: ItemId | None = None
    category_id: ItemId | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value):
        return [] if value is None else value


Submission = PodcastSubmission | CommentSubmission | ArticleSubmission

SUBMISSION_MODELS: dict[SubmissionKind, type[BaseSubmission]] = {
    SubmissionKind.PODCASTS: PodcastSubmission,
    SubmissionKind.COMMENTS: CommentSubmission,
    SubmissionKind.ARTICLES: ArticleSubmission,
}
