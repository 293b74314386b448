"""Settings schemas."""

from pydantic import RootModel

from storefront.schemas.common import CamelModel


class SettingsMap(RootModel[dict[str, str]]):
    """Flat string-to-string settings map."""

    root: dict[str, str]


class SecretStatusResponse(CamelModel):
    """Which provider secrets are stored, without their values."""

    paypal_client_secret: bool
    stripe_secret_key: bool
