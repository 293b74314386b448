"""
Key/value configuration tables.

``site_settings`` holds toggles and display configuration and is readable by
any storefront client. ``site_secrets`` has the same shape but holds provider
credentials and is never returned by generic settings reads.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import Base, TimestampMixin


class SiteSetting(Base, TimestampMixin):
    """Untyped configuration entry; last writer wins."""

    __tablename__ = "site_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")


class SiteSecret(Base, TimestampMixin):
    """Provider credential persisted through the back office."""

    __tablename__ = "site_secrets"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<SiteSecret(key={self.key!r}, value=***)>"
