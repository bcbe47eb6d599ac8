"""Test configuration and fixtures for the Moderation Desk API tests."""

from datetime import UTC
from datetime import datetime
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from moderationdesk_api.database.models.queue import ModerationQueueItem
from moderationdesk_api.database.models.submission import ArticleSubmission
from moderationdesk_api.database.models.submission import CommentSubmission
from moderationdesk_api.database.models.submission import PodcastSubmission
from moderationdesk_api.services.cache import NameCache

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed point in time for deterministic tests."""
    return FIXED_NOW


@pytest.fixture
def mock_connection():
    """Mock database connection for testing."""
    connection = AsyncMock()
    connection.fetchval = AsyncMock()
    connection.fetchrow = AsyncMock()
    connection.fetch = AsyncMock()
    connection.execute = AsyncMock()
    return connection


@pytest.fixture
def make_queue_item():
    """Factory for moderation queue items."""

    def _make(**overrides) -> ModerationQueueItem:
        data = {
            "id": str(uuid4()),
            "content_id": str(uuid4()),
            "content_type": "podcast",
            "status": "pending",
            "priority": 1,
            "created_at": FIXED_NOW - timedelta(hours=2),
            "updated_at": FIXED_NOW - timedelta(hours=2),
        }
        data.update(overrides)
        return ModerationQueueItem.model_validate(data)

    return _make


@pytest.fixture
def sample_podcast() -> PodcastSubmission:
    """Sample pending podcast."""
    return PodcastSubmission(
        id="podcast-1",
        name="Night Shift Radio",
        feed_url="https://example.com/feed.xml",
        author="Dana",
        submitted_at=FIXED_NOW - timedelta(days=1),
        submitter_id="user-1",
        category_id="cat-1",
    )


@pytest.fixture
def sample_comment() -> CommentSubmission:
    """Sample pending comment."""
    return CommentSubmission(
        id="comment-1",
        content="Great episode, thanks!",
        user_id="user-2",
        article_id="article-9",
        submitted_at=FIXED_NOW - timedelta(hours=5),
    )


@pytest.fixture
def sample_article() -> ArticleSubmission:
    """Sample pending article."""
    return ArticleSubmission(
        id="article-1",
        title="Ten Feeds Worth Following",
        content="...",
        author="Sam",
        submitter_name="Sam",
        submitted_at=FIXED_NOW - timedelta(hours=3),
    )


class FakeRedis:
    """In-memory stand-in for the Redis commands the name cache uses."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def mget(self, keys):
        return [self.values.get(key) for key in keys]

    async def setex(self, key, ttl, value):
        self.values[key] = value
        self.ttls[key] = ttl


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Redis client double that keeps values in a dict."""
    return FakeRedis()


@pytest.fixture
def name_cache(fake_redis):
    """Name cache backed by the in-memory Redis double."""

    async def client_factory():
        return fake_redis

    return NameCache(ttl=600, client_factory=client_factory, key_prefix="test")
