"""
Settings data access.

Both ``site_settings`` and ``site_secrets`` are plain key/value tables, so a
single repository class serves either model. Every key is upserted and
committed on its own: concurrent writers to different keys never lose each
other's update, and a failure part way through a batch leaves earlier keys
written.
"""

from typing import Type, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.logging import get_logger
from storefront.database.models.site_setting import SiteSecret, SiteSetting

logger = get_logger(__name__)

KeyValueModel = Union[Type[SiteSetting], Type[SiteSecret]]


class SettingsRepositoryError(Exception):
    """Raised when settings cannot be read or written."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.context = context


class KeyValueRepository:
    """Repository over a key/value settings table."""

    def __init__(self, session: AsyncSession, model: KeyValueModel = SiteSetting):
        self.session = session
        self.model = model

    async def get_all(self) -> dict[str, str]:
        try:
            result = await self.session.execute(select(self.model).order_by(self.model.key))
            return {row.key: row.value for row in result.scalars().all()}
        except SQLAlchemyError as e:
            raise SettingsRepositoryError(
                "Failed to read settings",
                table=self.model.__tablename__,
                error=str(e),
            ) from e

    async def get(self, key: str) -> str | None:
        try:
            row = await self.session.get(self.model, key)
        except SQLAlchemyError as e:
            raise SettingsRepositoryError(
                "Failed to read setting",
                table=self.model.__tablename__,
                key=key,
                error=str(e),
            ) from e
        return row.value if row is not None else None

    async def upsert(self, key: str, value: str) -> None:
        """
        Insert or overwrite a single key and commit.

        A concurrent insert of the same new key surfaces as an integrity
        error; the write is then retried once as an update.
        """
        for attempt in range(2):
            try:
                row = await self.session.get(self.model, key, populate_existing=True)
                if row is None:
                    self.session.add(self.model(key=key, value=value))
                else:
                    row.value = value
                await self.session.commit()
                return
            except IntegrityError as e:
                await self.session.rollback()
                if attempt == 0:
                    logger.info(
                        "Concurrent insert of setting, retrying as update",
                        table=self.model.__tablename__,
                        key=key,
                    )
                    continue
                raise SettingsRepositoryError(
                    "Failed to write setting",
                    table=self.model.__tablename__,
                    key=key,
                    error=str(e),
                ) from e
            except SQLAlchemyError as e:
                await self.session.rollback()
                raise SettingsRepositoryError(
                    "Failed to write setting",
                    table=self.model.__tablename__,
                    key=key,
                    error=str(e),
                ) from e

    async def delete(self, key: str) -> bool:
        try:
            result = await self.session.execute(
                delete(self.model).where(self.model.key == key)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise SettingsRepositoryError(
                "Failed to delete setting",
                table=self.model.__tablename__,
                key=key,
                error=str(e),
            ) from e
        return bool(result.rowcount)
