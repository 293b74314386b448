"""
Back-office authentication.

Wraps the credential check and token issuing with the login attempt
throttle. A blocked caller is refused before the credentials are even
compared.
"""

from dataclasses import dataclass
from typing import Any

from storefront.core.config import get_settings
from storefront.core.logging import get_logger
from storefront.core.security import create_admin_token, verify_admin_credentials
from storefront.services.auth.login_attempts import LoginAttemptTracker

logger = get_logger(__name__)


class AuthServiceError(Exception):
    """Base exception for authentication errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidCredentialsError(AuthServiceError):
    """Raised when the submitted user name or password is wrong."""

    pass


class RateLimitedError(AuthServiceError):
    """Raised when the caller has exhausted its login attempts."""

    def __init__(self, message: str, retry_after: int, **context: Any):
        super().__init__(message, **context)
        self.retry_after = retry_after


@dataclass(frozen=True)
class AdminSession:
    access_token: str
    token_type: str
    expires_in: int


class AdminAuthService:
    """
    Admin login with attempt throttling.

    Attributes:
        tracker: Failed login tracker keyed by caller address
    """

    def __init__(self, tracker: LoginAttemptTracker):
        self.tracker = tracker

    async def login(self, username: str, password: str, caller: str) -> AdminSession:
        """
        Authenticate the back-office administrator.

        Args:
            username: Submitted user name
            password: Submitted password
            caller: Throttle key, normally the client address

        Returns:
            AdminSession with a signed bearer token

        Raises:
            RateLimitedError: Too many recent failures from this caller
            InvalidCredentialsError: Credentials do not match
        """
        if await self.tracker.is_blocked(caller):
            logger.warning("Blocked admin login attempt", caller=caller)
            raise RateLimitedError(
                "Too many login attempts. Try again later.",
                retry_after=self.tracker.window_seconds,
                caller=caller,
            )

        if not verify_admin_credentials(username, password):
            await self.tracker.register_failure(caller)
            raise InvalidCredentialsError("Invalid credentials", caller=caller)

        await self.tracker.reset(caller)
        settings = get_settings()
        token = create_admin_token(username)
        logger.info("Admin logged in", caller=caller)
        return AdminSession(
            access_token=token,
            token_type="bearer",
            expires_in=settings.admin_token_expire_minutes * 60,
        )
