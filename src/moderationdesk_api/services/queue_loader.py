"""Loads the moderator's working set.

Five independent fetches run concurrently: the open moderation queue, the
statistics window, and the pending podcasts, comments and articles. Each
fetch fails on its own; a failure is logged and leaves the previous value
of that collection in place.
"""

import asyncio
import logging

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from decimal import ROUND_HALF_UP
from decimal import Decimal
from typing import Any

from moderationdesk_api.config.settings import get_moderation_settings
from moderationdesk_api.database.models.base import ModerationStatus
from moderationdesk_api.database.models.base import SubmissionKind
from moderationdesk_api.database.models.queue import UNASSIGNED
from moderationdesk_api.database.models.queue import UNKNOWN_USER
from moderationdesk_api.database.models.queue import ModerationQueueItem
from moderationdesk_api.database.models.queue import ModerationStats
from moderationdesk_api.database.models.submission import ADMIN_SUBMITTER
from moderationdesk_api.database.models.submission import UNKNOWN_ARTICLE
from moderationdesk_api.database.models.submission import UNKNOWN_CATEGORY
from moderationdesk_api.database.models.submission import ArticleSubmission
from moderationdesk_api.database.models.submission import CommentSubmission
from moderationdesk_api.database.models.submission import PodcastSubmission
from moderationdesk_api.database.repositories.profile import CategoryRepository
from moderationdesk_api.database.repositories.profile import ProfileRepository
from moderationdesk_api.database.repositories.queue import (
    ModerationQueueRepository,
)
from moderationdesk_api.database.repositories.submission import ArticleRepository
from moderationdesk_api.database.repositories.submission import CommentRepository
from moderationdesk_api.database.repositories.submission import PodcastRepository
from moderationdesk_api.services.cache import NameCache
from moderationdesk_api.services.pipeline import HIGH_PRIORITY_THRESHOLD

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

_UNCHANGED = object()


def _round_half_up(value: float, places: str = "1") -> Decimal:
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def compute_stats(rows: Sequence[ModerationQueueItem]) -> ModerationStats:
    """Derive moderation statistics from the queue rows of a time window."""
    counts = dict.fromkeys(
        (status.value for status in ModerationStatus),
        0,
    )
    high_priority = 0
    response_times: list[float] = []

    for row in rows:
        status = ModerationStatus(row.status).value
        counts[status] += 1
        if row.priority >= HIGH_PRIORITY_THRESHOLD:
            high_priority += 1
        if status != ModerationStatus.PENDING.value and row.created_at and row.updated_at:
            response_times.append((row.updated_at - row.created_at).total_seconds())

    total = len(rows)
    resolved = counts["approved"] + counts["rejected"]
    resolution_rate = int(_round_half_up(resolved / total * 100, "1")) if total else 0

    if response_times:
        hours = sum(response_times) / len(response_times) / 3600
        avg_response_time = f"{_round_half_up(hours, '0.1')}h"
    else:
        avg_response_time = NOT_AVAILABLE

    return ModerationStats(
        total=total,
        pending=counts["pending"],
        approved=counts["approved"],
        rejected=counts["rejected"],
        flagged=counts["flagged"],
        high_priority=high_priority,
        resolution_rate=resolution_rate,
        avg_response_time=avg_response_time,
    )


@dataclass
class QueueSnapshot:
    """The five collections a moderator works from."""

    moderation_queue: list[ModerationQueueItem] = field(default_factory=list)
    moderation_stats: ModerationStats = field(default_factory=ModerationStats)
    pending_podcasts: list[PodcastSubmission] = field(default_factory=list)
    pending_comments: list[CommentSubmission] = field(default_factory=list)
    pending_articles: list[ArticleSubmission] = field(default_factory=list)
    loaded_at: datetime | None = None

    def pending_for(self, kind: SubmissionKind | str) -> list[Any]:
        """Get the pending collection for a submission kind."""
        return getattr(self, f"pending_{SubmissionKind(kind).value}")


@dataclass
class QueueLoadResult:
    """Outcome of one load: the snapshot plus the fetches that failed."""

    snapshot: QueueSnapshot
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def status(self) -> str:
        if not self.errors:
            return "ok"
        if len(self.errors) == len(QueueLoader.FETCHES):
            return "error"
        return "degraded"


class QueueLoader:
    """Assembles and owns the moderator's working set."""

    FETCHES = (
        "moderation_queue",
        "moderation_stats",
        "pending_podcasts",
        "pending_comments",
        "pending_articles",
    )

    def __init__(
        self,
        queue_repo: ModerationQueueRepository | None = None,
        podcast_repo: PodcastRepository | None = None,
        comment_repo: CommentRepository | None = None,
        article_repo: ArticleRepository | None = None,
        profile_repo: ProfileRepository | None = None,
        category_repo: CategoryRepository | None = None,
        name_cache: NameCache | None = None,
        stats_window_days: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the queue loader."""
        settings = get_moderation_settings()
        self.queue_repo = queue_repo or ModerationQueueRepository()
        self.podcast_repo = podcast_repo or PodcastRepository()
        self.comment_repo = comment_repo or CommentRepository()
        self.article_repo = article_repo or ArticleRepository()
        self.profile_repo = profile_repo or ProfileRepository()
        self.category_repo = category_repo or CategoryRepository()
        self.name_cache = (
            name_cache if name_cache is not None else NameCache(settings.name_cache_ttl)
        )
        self.stats_window_days = stats_window_days or settings.stats_window_days
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = asyncio.Lock()
        self.snapshot = QueueSnapshot()

    async def load(self) -> QueueLoadResult:
        """Run all five fetches concurrently and merge what succeeded."""
        fetchers: dict[str, Callable[[], Awaitable[Any]]] = {
            "moderation_queue": self._fetch_moderation_queue,
            "moderation_stats": self._fetch_moderation_stats,
            "pending_podcasts": self._fetch_pending_podcasts,
            "pending_comments": self._fetch_pending_comments,
            "pending_articles": self._fetch_pending_articles,
        }
        errors: dict[str, str] = {}

        async with self._lock:
            results = await asyncio.gather(
                *(self._guarded(name, fetch, errors) for name, fetch in fetchers.items())
            )

            updates = {
                name: value
                for name, value in zip(fetchers, results, strict=True)
                if value is not _UNCHANGED
            }
            self.snapshot = replace(self.snapshot, loaded_at=self._clock(), **updates)

        if errors:
            logger.warning(f"Queue load finished with failed fetches: {sorted(errors)}")
        return QueueLoadResult(snapshot=self.snapshot, errors=errors)

    def discard(self, kind: SubmissionKind | str, item_id: str) -> None:
        """Drop a reviewed submission from its pending collection."""
        name = f"pending_{SubmissionKind(kind).value}"
        remaining = [item for item in getattr(self.snapshot, name) if item.id != item_id]
        self.snapshot = replace(self.snapshot, **{name: remaining})

    async def _guarded(
        self,
        name: str,
        fetch: Callable[[], Awaitable[Any]],
        errors: dict[str, str],
    ) -> Any:
        try:
            return await fetch()
        except Exception as e:
            logger.exception(f"Error fetching {name}: {e}")
            errors[name] = str(e) or type(e).__name__
            return _UNCHANGED

    async def _resolve_names(
        self,
        namespace: str,
        ids: Iterable[str | None],
        lookup: Callable[[list[str]], Awaitable[dict[str, str]]],
    ) -> dict[str, str]:
        """Batch-resolve display names, serving repeats from the name cache."""
        wanted = list(dict.fromkeys(i for i in ids if i))
        names = await self.name_cache.get_many(namespace, wanted)
        missing = [item_id for item_id in wanted if item_id not in names]

        if not missing:
            return names

        try:
            fetched = await lookup(missing)
        except Exception as e:
            logger.error(f"Error resolving {namespace} names: {e}")
            return names

        await self.name_cache.set_many(namespace, fetched)
        names.update(fetched)
        return names

    async def _fetch_moderation_queue(self) -> list[ModerationQueueItem]:
        items = await self.queue_repo.get_open_items()
        names = await self._resolve_names(
            "profile",
            [i.submitter_id for i in items] + [i.assigned_moderator_id for i in items],
            self.profile_repo.get_display_names,
        )

        return [
            item.model_copy(
                update={
                    "submitter_name": names.get(item.submitter_id or "", UNKNOWN_USER),
                    "assigned_moderator_name": names.get(
                        item.assigned_moderator_id or "", UNASSIGNED
                    ),
                }
            )
            for item in items
        ]

    async def _fetch_moderation_stats(self) -> ModerationStats:
        since = self._clock() - timedelta(days=self.stats_window_days)
        rows = await self.queue_repo.get_created_since(since)
        return compute_stats(rows)

    async def _fetch_pending_podcasts(self) -> list[PodcastSubmission]:
        podcasts = await self.podcast_repo.get_pending()
        categories = await self._resolve_names(
            "category",
            [p.category_id for p in podcasts],
            self.category_repo.get_names,
        )
        submitters = await self._resolve_names(
            "profile",
            [p.submitter_id for p in podcasts],
            self.profile_repo.get_display_names,
        )

        return [
            podcast.model_copy(
                update={
                    "category_name": categories.get(
                        podcast.category_id or "", UNKNOWN_CATEGORY
                    ),
                    # Podcasts without a submitter were added by an admin
                    "submitter_name": (
                        submitters.get(podcast.submitter_id, UNKNOWN_USER)
                        if podcast.submitter_id
                        else ADMIN_SUBMITTER
                    ),
                }
            )
            for podcast in podcasts
        ]

    async def _fetch_pending_comments(self) -> list[CommentSubmission]:
        comments = await self.comment_repo.get_pending()
        users = await self._resolve_names(
            "profile",
            [c.user_id for c in comments],
            self.profile_repo.get_display_names,
        )
        titles = await self._resolve_names(
            "article",
            [c.article_id for c in comments],
            self.article_repo.get_titles,
        )

        return [
            comment.model_copy(
                update={
                    "submitter_name": users.get(comment.user_id or "", UNKNOWN_USER),
                    "article_title": titles.get(comment.article_id or "", UNKNOWN_ARTICLE),
                }
            )
            for comment in comments
        ]

    async def _fetch_pending_articles(self) -> list[ArticleSubmission]:
        articles = await self.article_repo.get_pending()
        authors = await self._resolve_names(
            "profile",
            [a.author_id for a in articles if not a.author],
            self.profile_repo.get_display_names,
        )

        return [
            article
            if article.author
            else article.model_copy(
                update={
                    "submitter_name": authors.get(article.author_id or "", UNKNOWN_USER)
                }
            )
            for article in articles
        ]


# Global loader instance
_queue_loader: QueueLoader | None = None


def get_queue_loader() -> QueueLoader:
    """Get the shared queue loader (singleton pattern)."""
    global _queue_loader  # noqa: PLW0603
    if _queue_loader is None:
        _queue_loader = QueueLoader()
    return _queue_loader
