"""Authentication dependencies for FastAPI endpoints.

Tokens are issued elsewhere; this service only verifies them and reads the
acting moderator's identity.
"""

import logging

import jwt

from fastapi import HTTPException
from fastapi import Request
from fastapi import status
from jwt import InvalidTokenError
from pydantic import BaseModel

from moderationdesk_api.config.auth import get_auth_settings

logger = logging.getLogger(__name__)


class Moderator(BaseModel):
    """Identity of the moderator making a request."""

    id: str
    role: str | None = None
    is_admin: bool = False


def decode_access_token(token: str) -> Moderator:
    """Verify a bearer token and return the moderator it identifies."""
    settings = get_auth_settings()
    if not settings.jwt_secret_key:
        raise InvalidTokenError("JWT secret key is not configured")

    options = {"require": ["sub", "exp"], "verify_aud": bool(settings.jwt_audience)}
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options=options,
    )

    return Moderator(
        id=str(payload["sub"]),
        role=payload.get("role"),
        is_admin=bool(payload.get("is_admin", False)),
    )


async def get_current_moderator(request: Request) -> Moderator:
    """Get the authenticated moderator from the Authorization header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")

    if scheme.lower() != "bearer" or not token:
        logger.warning("No bearer token on moderation request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required"
        )

    try:
        moderator = decode_access_token(token)
    except InvalidTokenError as e:
        logger.warning(f"Token validation failed: {e!s}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from e

    allowed_roles = get_auth_settings().moderator_roles
    if not moderator.is_admin and moderator.role not in allowed_roles:
        logger.warning(f"User {moderator.id} lacks moderation access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Moderator access required"
        )

    return moderator
