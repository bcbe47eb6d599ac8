"""Application settings for the Moderation Desk API."""

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from moderationdesk_api.config.auth import AuthSettings
from moderationdesk_api.config.database import DatabaseSettings


class ModerationSettings(BaseSettings):
    """Moderation queue behaviour settings."""

    page_size: int = Field(default=10, ge=1, description="Default page size")
    max_page_size: int = Field(default=100, ge=1, description="Largest page size")
    stats_window_days: int = Field(
        default=30, ge=1, description="Window for moderation statistics in days"
    )
    auto_refresh_interval: float = Field(
        default=30.0, gt=0, description="Auto refresh interval in seconds"
    )
    auto_refresh_enabled: bool = Field(
        default=False, description="Start auto refresh with the application"
    )
    name_cache_ttl: int = Field(
        default=600, ge=1, description="Display name cache lifetime in seconds"
    )
    flag_priority: int = Field(
        default=5, description="Priority forced onto flagged queue items"
    )

    model_config = SettingsConfigDict(env_prefix="MODERATION_", case_sensitive=False)


class AppSettings(BaseSettings):
    """Main application settings."""

    app_name: str = Field(default="Moderation Desk API", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")  # nosec B104
    port: int = Field(default=8000, description="Server port")

    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Allowed CORS origins",
    )

    # Component settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    moderation: ModerationSettings = Field(default_factory=ModerationSettings)

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )


# Global settings instance
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get application settings (singleton pattern)."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = AppSettings()
    return _settings


def get_moderation_settings() -> ModerationSettings:
    """Get moderation settings."""
    return get_settings().moderation
