"""ORM models; importing this package registers every table on Base.metadata."""

from storefront.database.models.order import Order
from storefront.database.models.site_setting import SiteSecret, SiteSetting

__all__ = ["Order", "SiteSecret", "SiteSetting"]
