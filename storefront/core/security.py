"""
Security utilities for admin credential checks and bearer tokens.

Admin credentials come from the deployment environment; tokens are signed
JWTs so no server-side session table is needed.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from storefront.core.config import get_settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

ADMIN_SCOPE = "admin"


class SecurityError(Exception):
    """Base exception for security-related errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class TokenError(SecurityError):
    """Exception raised for token-related errors."""

    pass


def verify_admin_credentials(username: str, password: str) -> bool:
    """
    Check submitted credentials against ADMIN_USERNAME / ADMIN_PASSWORD.

    Both comparisons always run so the response time does not reveal which
    half was wrong. Returns False when no admin account is configured.

    Args:
        username: Submitted user name
        password: Submitted password

    Returns:
        True if both values match the configured admin account
    """
    settings = get_settings()
    if not settings.admin_username or settings.admin_password is None:
        logger.warning("Admin login attempted but no admin account is configured")
        return False

    expected_password = settings.admin_password.get_secret_value()
    if not expected_password:
        return False

    username_ok = secrets.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        password.encode("utf-8"), expected_password.encode("utf-8")
    )
    return username_ok and password_ok


def create_admin_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed admin bearer token.

    Args:
        subject: Admin user name stored in the ``sub`` claim
        expires_delta: Custom lifetime, defaults to the configured one

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.admin_token_expire_minutes)
    )
    claims = {
        "sub": subject,
        "scope": ADMIN_SCOPE,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
        "jti": secrets.token_hex(8),
    }
    token = jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)
    logger.info("Admin token issued", subject=subject, expires_at=expire.isoformat())
    return token


def decode_admin_token(token: str) -> dict[str, Any]:
    """
    Validate an admin bearer token and return its claims.

    Args:
        token: Encoded JWT

    Returns:
        Decoded claims

    Raises:
        TokenError: If the token is malformed, expired or not an admin token
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise TokenError("Invalid admin token", code="INVALID_TOKEN") from e

    if payload.get("scope") != ADMIN_SCOPE or not payload.get("sub"):
        raise TokenError("Token does not grant admin access", code="INVALID_SCOPE")

    return payload
