"""
Access token handling at the identity provider boundary.

Users sign in elsewhere; this service only checks the bearer
token it is given and reads the user id and role from it.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from course_marketplace.config import get_settings
from course_marketplace.models.enums import UserRole
from course_marketplace.services.authorization import Actor

logger = logging.getLogger(__name__)


class TokenError(Exception):
    pass


def create_access_token(
    user_id: int,
    role: UserRole,
    expires_delta: timedelta = timedelta(hours=1),
) -> str:
    """Issue a token in the identity provider's format."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": str(user_id),
        "role": role.value,
        "exp": int(expire.timestamp()),
        "type": "access",
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Actor:
    """Verify a bearer token and return the caller it identifies."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.warning("JWT verification failed: %s", e)
        raise TokenError("Invalid or expired token")

    if payload.get("type", "access") != "access":
        raise TokenError("Invalid token type")

    try:
        user_id = int(payload["sub"])
        role = UserRole(payload.get("role", UserRole.STUDENT.value))
    except (KeyError, TypeError, ValueError):
        raise TokenError("Token is missing a valid subject or role")

    return Actor(user_id=user_id, role=role)
