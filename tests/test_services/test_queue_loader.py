"""Tests for the moderation queue loader."""

import asyncio

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from moderationdesk_api.database.models.queue import UNASSIGNED
from moderationdesk_api.database.models.queue import UNKNOWN_USER
from moderationdesk_api.database.models.submission import ADMIN_SUBMITTER
from moderationdesk_api.database.models.submission import UNKNOWN_ARTICLE
from moderationdesk_api.database.models.submission import UNKNOWN_CATEGORY
from moderationdesk_api.database.models.submission import ArticleSubmission
from moderationdesk_api.database.models.submission import PodcastSubmission
from moderationdesk_api.services.queue_loader import QueueLoader
from moderationdesk_api.services.queue_loader import compute_stats


class TestComputeStats:
    """Test statistics derivation."""

    def test_only_pending_rows(self, make_queue_item):
        """A window with nothing resolved has no response time and 0% resolved."""
        rows = [make_queue_item(), make_queue_item(priority=4)]

        stats = compute_stats(rows)

        assert stats.total == 2
        assert stats.pending == 2
        assert stats.resolution_rate == 0
        assert stats.avg_response_time == "N/A"
        assert stats.high_priority == 1

    def test_empty_window(self):
        """No rows gives zeroed stats."""
        stats = compute_stats([])

        assert stats.total == 0
        assert stats.resolution_rate == 0
        assert stats.avg_response_time == "N/A"

    def test_counts_and_rates(self, make_queue_item, fixed_now):
        """Counts per status, resolution rate and mean response time."""
        created = fixed_now - timedelta(hours=10)
        rows = [
            make_queue_item(
                status="approved",
                created_at=created,
                updated_at=created + timedelta(hours=1),
            ),
            make_queue_item(
                status="rejected",
                priority=5,
                created_at=created,
                updated_at=created + timedelta(hours=2),
            ),
            make_queue_item(status="pending"),
        ]

        stats = compute_stats(rows)

        assert stats.approved == 1
        assert stats.rejected == 1
        assert stats.pending == 1
        assert stats.flagged == 0
        assert stats.high_priority == 1
        assert stats.resolution_rate == 67
        assert stats.avg_response_time == "1.5h"

    def test_flagged_rows_count_towards_response_time(
        self, make_queue_item, fixed_now
    ):
        """Any non-pending row contributes to the response time."""
        created = fixed_now - timedelta(hours=4)
        rows = [
            make_queue_item(
                status="flagged",
                created_at=created,
                updated_at=created + timedelta(minutes=15),
            ),
        ]

        stats = compute_stats(rows)

        assert stats.flagged == 1
        assert stats.resolution_rate == 0
        assert stats.avg_response_time == "0.3h"

    def test_resolution_rate_rounds_half_up(self, make_queue_item):
        """One resolved row out of eight is 12.5%, reported as 13."""
        rows = [make_queue_item(status="approved")] + [
            make_queue_item() for _ in range(7)
        ]

        assert compute_stats(rows).resolution_rate == 13


@pytest.fixture
def repos():
    """Mock repositories for every fetch the loader performs."""
    queue_repo = AsyncMock()
    queue_repo.get_open_items.return_value = []
    queue_repo.get_created_since.return_value = []

    podcast_repo = AsyncMock()
    podcast_repo.get_pending.return_value = []
    comment_repo = AsyncMock()
    comment_repo.get_pending.return_value = []
    article_repo = AsyncMock()
    article_repo.get_pending.return_value = []
    article_repo.get_titles.return_value = {}

    profile_repo = AsyncMock()
    profile_repo.get_display_names.return_value = {}
    category_repo = AsyncMock()
    category_repo.get_names.return_value = {}

    return {
        "queue_repo": queue_repo,
        "podcast_repo": podcast_repo,
        "comment_repo": comment_repo,
        "article_repo": article_repo,
        "profile_repo": profile_repo,
        "category_repo": category_repo,
    }


@pytest.fixture
def loader(repos, name_cache, fixed_now):
    """Queue loader wired to mock repositories."""
    return QueueLoader(
        **repos,
        name_cache=name_cache,
        stats_window_days=30,
        clock=lambda: fixed_now,
    )


class TestQueueLoader:
    """Test loading the working set."""

    @pytest.mark.asyncio
    async def test_load_all_succeed(self, loader, repos, make_queue_item, fixed_now):
        """A clean load fills every collection and stamps the time."""
        item = make_queue_item(submitter_id="user-1", assigned_moderator_id="mod-1")
        repos["queue_repo"].get_open_items.return_value = [item]
        repos["profile_repo"].get_display_names.return_value = {
            "user-1": "Alex",
            "mod-1": "Morgan",
        }

        result = await loader.load()

        assert result.status == "ok"
        assert result.errors == {}
        assert result.snapshot.loaded_at == fixed_now
        queue_item = result.snapshot.moderation_queue[0]
        assert queue_item.submitter_name == "Alex"
        assert queue_item.assigned_moderator_name == "Morgan"

    @pytest.mark.asyncio
    async def test_stats_window(self, loader, repos, fixed_now):
        """Stats are read from the configured window."""
        await loader.load()

        repos["queue_repo"].get_created_since.assert_awaited_once_with(
            fixed_now - timedelta(days=30)
        )

    @pytest.mark.asyncio
    async def test_one_failed_fetch_keeps_previous_value(
        self, loader, repos, sample_comment
    ):
        """A failing fetch leaves its collection alone; others still update."""
        repos["comment_repo"].get_pending.return_value = [sample_comment]
        await loader.load()
        assert loader.snapshot.pending_comments[0].id == "comment-1"

        repos["comment_repo"].get_pending.side_effect = Exception("timeout")
        repos["podcast_repo"].get_pending.return_value = [
            PodcastSubmission(id="p9", name="New", feed_url="https://x/feed")
        ]

        result = await loader.load()

        assert result.status == "degraded"
        assert list(result.errors) == ["pending_comments"]
        assert result.errors["pending_comments"] == "timeout"
        assert [c.id for c in result.snapshot.pending_comments] == ["comment-1"]
        assert [p.id for p in result.snapshot.pending_podcasts] == ["p9"]

    @pytest.mark.asyncio
    async def test_every_fetch_failing_is_an_error(self, loader, repos):
        """When all five fetches fail the load reports an error."""
        repos["queue_repo"].get_open_items.side_effect = Exception("down")
        repos["queue_repo"].get_created_since.side_effect = Exception("down")
        repos["podcast_repo"].get_pending.side_effect = Exception("down")
        repos["comment_repo"].get_pending.side_effect = Exception("down")
        repos["article_repo"].get_pending.side_effect = Exception("down")

        result = await loader.load()

        assert result.status == "error"
        assert len(result.errors) == 5
        assert result.snapshot.moderation_queue == []

    @pytest.mark.asyncio
    async def test_unresolved_names_use_placeholders(
        self, loader, repos, make_queue_item, sample_podcast, sample_comment
    ):
        """Missing lookups fall back to literal placeholders."""
        repos["queue_repo"].get_open_items.return_value = [
            make_queue_item(submitter_id="ghost")
        ]
        repos["podcast_repo"].get_pending.return_value = [sample_podcast]
        repos["comment_repo"].get_pending.return_value = [sample_comment]

        result = await loader.load()

        queue_item = result.snapshot.moderation_queue[0]
        assert queue_item.submitter_name == UNKNOWN_USER
        assert queue_item.assigned_moderator_name == UNASSIGNED
        podcast = result.snapshot.pending_podcasts[0]
        assert podcast.category_name == UNKNOWN_CATEGORY
        assert podcast.submitter_name == UNKNOWN_USER
        comment = result.snapshot.pending_comments[0]
        assert comment.submitter_name == UNKNOWN_USER
        assert comment.article_title == UNKNOWN_ARTICLE

    @pytest.mark.asyncio
    async def test_name_lookup_failure_does_not_fail_fetch(
        self, loader, repos, make_queue_item
    ):
        """A broken name lookup still returns the rows with placeholders."""
        repos["queue_repo"].get_open_items.return_value = [
            make_queue_item(submitter_id="user-1")
        ]
        repos["profile_repo"].get_display_names.side_effect = Exception("boom")

        result = await loader.load()

        assert "moderation_queue" not in result.errors
        assert result.snapshot.moderation_queue[0].submitter_name == UNKNOWN_USER

    @pytest.mark.asyncio
    async def test_podcast_without_submitter_is_admin(self, loader, repos):
        """Podcasts added without a submitter show the admin label."""
        repos["podcast_repo"].get_pending.return_value = [
            PodcastSubmission(
                id="p1", name="Feed", feed_url="https://x/feed", category_id="cat-1"
            )
        ]
        repos["category_repo"].get_names.return_value = {"cat-1": "Science"}

        result = await loader.load()

        podcast = result.snapshot.pending_podcasts[0]
        assert podcast.submitter_name == ADMIN_SUBMITTER
        assert podcast.category_name == "Science"

    @pytest.mark.asyncio
    async def test_comment_names_resolved(self, loader, repos, sample_comment):
        """Comments get their author and article title."""
        repos["comment_repo"].get_pending.return_value = [sample_comment]
        repos["profile_repo"].get_display_names.return_value = {"user-2": "Robin"}
        repos["article_repo"].get_titles.return_value = {"article-9": "Launch Notes"}

        result = await loader.load()

        comment = result.snapshot.pending_comments[0]
        assert comment.submitter_name == "Robin"
        assert comment.article_title == "Launch Notes"

    @pytest.mark.asyncio
    async def test_article_author_lookup_only_when_missing(self, loader, repos):
        """Articles with an author name skip the profile lookup."""
        repos["article_repo"].get_pending.return_value = [
            ArticleSubmission(id="a1", title="Named", author="Sam", submitter_name="Sam"),
            ArticleSubmission(id="a2", title="Anonymous", author_id="user-7"),
        ]
        repos["profile_repo"].get_display_names.return_value = {"user-7": "Jo"}

        result = await loader.load()

        articles = {a.id: a for a in result.snapshot.pending_articles}
        assert articles["a1"].submitter_name == "Sam"
        assert articles["a2"].submitter_name == "Jo"
        repos["profile_repo"].get_display_names.assert_awaited_once_with(["user-7"])

    @pytest.mark.asyncio
    async def test_names_served_from_cache(self, loader, repos, make_queue_item):
        """Repeated loads do not look up the same names again."""
        repos["queue_repo"].get_open_items.return_value = [
            make_queue_item(submitter_id="user-1")
        ]
        repos["profile_repo"].get_display_names.return_value = {"user-1": "Alex"}

        await loader.load()
        result = await loader.load()

        assert result.snapshot.moderation_queue[0].submitter_name == "Alex"
        repos["profile_repo"].get_display_names.assert_awaited_once_with(["user-1"])

    @pytest.mark.asyncio
    async def test_concurrent_loads_are_serialized(self, loader, repos):
        """Two overlapping loads never run their fetches at the same time."""
        active = 0
        peak = 0

        async def slow_fetch():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return []

        repos["queue_repo"].get_open_items.side_effect = slow_fetch

        await asyncio.gather(loader.load(), loader.load())

        assert peak == 1

    def test_discard(self, loader, sample_podcast):
        """Discard removes one item from its pending collection."""
        other = sample_podcast.model_copy(update={"id": "podcast-2"})
        loader.snapshot.pending_podcasts = [sample_podcast, other]

        loader.discard("podcasts", "podcast-1")

        assert [p.id for p in loader.snapshot.pending_podcasts] == ["podcast-2"]

    def test_pending_for(self, loader, sample_article):
        """Pending collections are addressed by kind."""
        loader.snapshot.pending_articles = [sample_article]

        assert loader.snapshot.pending_for("articles") == [sample_article]
        assert loader.snapshot.pending_for("comments") == []
