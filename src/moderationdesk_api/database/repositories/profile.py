"""Profile and category repositories used for display name lookups."""

from asyncpg import Record

from moderationdesk_api.database.connection import get_db_connection
from moderationdesk_api.database.models.profile import PodcastCategory
from moderationdesk_api.database.models.profile import Profile
from moderationdesk_api.database.models.queue import ModeratorSummary
from moderationdesk_api.database.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for account profiles."""

    def __init__(self):
        super().__init__("profiles")

    def _record_to_model(self, record: Record) -> Profile:
        """Convert database record to Profile model."""
        return Profile.model_validate(dict(record))

    async def get_display_names(self, ids: list[str]) -> dict[str, str]:
        """Map profile ids to display names."""
        profiles = await self.find_by_ids(ids)
        return {profile.id: profile.display_name for profile in profiles}

    async def get_moderators(self) -> list[ModeratorSummary]:
        """Get accounts allowed to take queue assignments."""
        query = """
            SELECT id, name, email, is_admin FROM profiles
            WHERE is_admin = TRUE
            ORDER BY name NULLS LAST, email
        """

        async with get_db_connection() as connection:
            records = await connection.fetch(query)

        profiles = [self._record_to_model(record) for record in records]
        return [
            ModeratorSummary(id=profile.id, display_name=profile.display_name)
            for profile in profiles
        ]


class CategoryRepository(BaseRepository[PodcastCategory]):
    """Repository for podcast categories."""

    def __init__(self):
        super().__init__("podcast_categories")

    def _record_to_model(self, record: Record) -> PodcastCategory:
        """Convert database record to PodcastCategory model."""
        return PodcastCategory.model_validate(dict(record))

    async def get_names(self, ids: list[str]) -> dict[str, str]:
        """Map category ids to category names."""
        categories = await self.find_by_ids(ids)
        return {category.id: category.name for category in categories}
