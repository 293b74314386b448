"""
Settings store service.

Presents one flat string-to-string map to the back office while keeping
provider credentials in a separate table. Reads are never cached: every
consumer (pricing, payment provider resolution) re-reads on each request.
"""

from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.logging import get_logger
from storefront.database.models.site_setting import SiteSecret, SiteSetting
from storefront.services.settings.repository import KeyValueRepository

logger = get_logger(__name__)

SECRET_KEYS: frozenset[str] = frozenset({"paypalClientSecret", "stripeSecretKey"})


class SettingsServiceError(Exception):
    """Base exception for settings service errors."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.context = context


class UnknownSecretError(SettingsServiceError):
    """Raised when a secret operation names a key that is not a secret."""

    pass


class SettingsService:
    """
    Read and update site configuration.

    Attributes:
        settings: Repository over public settings
        secrets: Repository over provider credentials
    """

    def __init__(self, session: AsyncSession):
        self.settings = KeyValueRepository(session, SiteSetting)
        self.secrets = KeyValueRepository(session, SiteSecret)

    async def get_all(self) -> dict[str, str]:
        """Return every non-secret setting."""
        return await self.settings.get_all()

    async def get(self, key: str, default: str | None = None) -> str | None:
        if key in SECRET_KEYS:
            raise UnknownSecretError(
                "Secret keys are not readable through the settings map", key=key
            )
        value = await self.settings.get(key)
        return default if value is None else value

    async def update(self, values: Mapping[str, str]) -> dict[str, str]:
        """
        Upsert each key independently.

        Secret keys are routed to the secret table. A blank secret value is
        skipped, so a form that never displayed the secret cannot erase it.

        Args:
            values: Keys and new values

        Returns:
            The non-secret settings after the update
        """
        written: list[str] = []
        for key, value in values.items():
            if key in SECRET_KEYS:
                if not value or not value.strip():
                    logger.debug("Skipping blank secret update", key=key)
                    continue
                await self.secrets.upsert(key, value.strip())
            else:
                await self.settings.upsert(key, value)
            written.append(key)

        logger.info("Settings updated", keys=written)
        return await self.get_all()

    async def get_secret(self, key: str) -> str | None:
        if key not in SECRET_KEYS:
            raise UnknownSecretError("Not a secret setting", key=key)
        return await self.secrets.get(key)

    async def secret_status(self) -> dict[str, bool]:
        """Report which secrets are configured without revealing them."""
        stored = await self.secrets.get_all()
        return {key: bool(stored.get(key)) for key in sorted(SECRET_KEYS)}

    async def clear_secret(self, key: str) -> bool:
        if key not in SECRET_KEYS:
            raise UnknownSecretError("Not a secret setting", key=key)
        removed = await self.secrets.delete(key)
        logger.info("Secret cleared", key=key, removed=removed)
        return removed
