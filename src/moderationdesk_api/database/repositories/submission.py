"""Repositories for podcast, comment and article submissions."""

from typing import Any
from typing import TypeVar

from asyncpg import Record

from moderationdesk_api.database.connection import get_db_connection
from moderationdesk_api.database.models.base import SubmissionKind
from moderationdesk_api.database.models.base import SubmissionStatus
from moderationdesk_api.database.models.submission import ArticleSubmission
from moderationdesk_api.database.models.submission import BaseSubmission
from moderationdesk_api.database.models.submission import CommentSubmission
from moderationdesk_api.database.models.submission import PodcastSubmission
from moderationdesk_api.database.repositories.base import BaseRepository

T = TypeVar("T", bound=BaseSubmission)


class SubmissionRepository(BaseRepository[T]):
    """Shared queries for tables holding reviewable submissions."""

    kind: SubmissionKind
    pending_columns: str = "*"

    def __init__(self):
        super().__init__(self.kind.value)

    async def get_pending(self) -> list[T]:
        """Get every pending submission, newest first."""
        query = f"""
            SELECT {self.pending_columns} FROM {self.table_name}
            WHERE status = $1
            ORDER BY created_at DESC
        """  # nosec B608

        async with get_db_connection() as connection:
            records = await connection.fetch(query, SubmissionStatus.PENDING.value)
            return [self._record_to_model(record) for record in records]

    async def record_review(self, item_id: str, data: dict[str, Any]) -> T | None:
        """Store a review decision, only if the submission is still pending."""
        return await self.update_where(
            item_id, data, expected={"status": SubmissionStatus.PENDING.value}
        )


class PodcastRepository(SubmissionRepository[PodcastSubmission]):
    """Repository for podcast submissions."""

    kind = SubmissionKind.PODCASTS
    pending_columns = """
        id, name, feed_url, image_url, author, description,
        category_id, created_at, status, admin_comments, submitter_id
    """

    def _record_to_model(self, record: Record) -> PodcastSubmission:
        """Convert database record to PodcastSubmission model."""
        data = dict(record)
        data.setdefault("submitted_at", data.get("created_at"))
        return PodcastSubmission.model_validate(data)


class CommentRepository(SubmissionRepository[CommentSubmission]):
    """Repository for reader comments."""

    kind = SubmissionKind.COMMENTS
    pending_columns = "id, content, user_id, article_id, created_at, status, admin_comments"

    def _record_to_model(self, record: Record) -> CommentSubmission:
        """Convert database record to CommentSubmission model."""
        data = dict(record)
        data.setdefault("submitted_at", data.get("created_at"))
        return CommentSubmission.model_validate(data)


class ArticleRepository(SubmissionRepository[ArticleSubmission]):
    """Repository for article drafts."""

    kind = SubmissionKind.ARTICLES
    pending_columns = """
        id, title, content, excerpt, author_name, author_id, category_id,
        tags, created_at, status, admin_comments
    """

    def _record_to_model(self, record: Record) -> ArticleSubmission:
        """Convert database record to ArticleSubmission model."""
        data = dict(record)
        data.setdefault("submitted_at", data.get("created_at"))
        data.setdefault("author", data.get("author_name"))
        data.setdefault("submitter_name", data.get("author_name"))
        return ArticleSubmission.model_validate(data)

    async def get_titles(self, ids: list[str]) -> dict[str, str]:
        """Map article ids to titles."""
        if not ids:
            return {}

        query = "SELECT id, title FROM articles WHERE id = ANY($1)"

        async with get_db_connection() as connection:
            records = await connection.fetch(query, ids)
            return {str(record["id"]): record["title"] for record in records}


SUBMISSION_REPOSITORIES: dict[SubmissionKind, type[SubmissionRepository]] = {
    SubmissionKind.PODCASTS: PodcastRepository,
    SubmissionKind.COMMENTS: CommentRepository,
    SubmissionKind.ARTICLES: ArticleRepository,
}
