"""Profile and category lookup models for the Moderation Desk API."""

from pydantic import BaseModel
from pydantic import ConfigDict

from moderationdesk_api.database.models.base import ItemId
from moderationdesk_api.database.models.queue import UNKNOWN_USER


class Profile(BaseModel):
    """Account profile, used only to resolve display names."""

    id: ItemId
    name: str | None = None
    email: str | None = None
    is_admin: bool | None = False

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        return self.name or self.email or UNKNOWN_USER


class PodcastCategory(BaseModel):
    """Podcast category."""

    id: ItemId
    name: str

    model_config = ConfigDict(from_attributes=True)
