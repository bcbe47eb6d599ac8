"""Redis configuration for the Moderation Desk API."""

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis configuration settings."""

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    key_prefix: str = Field(
        default="moderationdesk", description="Namespace for every cache key"
    )

    # Connection settings
    max_connections: int = Field(default=20, description="Maximum Redis connections")
    retry_on_timeout: bool = Field(default=True, description="Retry on timeout")
    socket_timeout: float = Field(default=5.0, description="Socket timeout in seconds")
    socket_connect_timeout: float = Field(
        default=5.0, description="Socket connect timeout in seconds"
    )

    model_config = SettingsConfigDict(env_prefix="REDIS_", case_sensitive=False)


def get_redis_settings() -> RedisSettings:
    """Get Redis settings from environment variables."""
    return RedisSettings()
