"""Authentication configuration for the Moderation Desk API."""

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class AuthSettings(BaseSettings):
    """Settings for verifying moderator access tokens."""

    jwt_secret_key: str = Field(default="", description="JWT signing secret key")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_audience: str | None = Field(
        default=None, description="Expected JWT audience (skipped when unset)"
    )
    moderator_roles: list[str] = Field(
        default=["admin", "moderator"],
        description="Role claims allowed to use the moderation desk",
    )

    model_config = SettingsConfigDict(env_prefix="AUTH_", case_sensitive=False)


def get_auth_settings() -> AuthSettings:
    """Get authentication settings from environment variables."""
    return AuthSettings()
