"""
Runtime payment provider configuration.

Resolves what each provider needs for the current request from two sources:
deployment environment variables, which always win, and values persisted
through the back-office settings. Nothing here is cached; a settings change
or a rotated deployment secret applies to the next request.
"""

from dataclasses import dataclass
from typing import Optional

from storefront.core.config import PaymentSecrets, get_payment_secrets
from storefront.core.logging import get_logger
from storefront.services.orders.enums import PaymentProviderName
from storefront.services.settings.service import SettingsService

logger = get_logger(__name__)

# Checkout shows these when no provider has been switched on yet.
FALLBACK_PAYMENT_METHODS: tuple[PaymentProviderName, ...] = (
    PaymentProviderName.STRIPE,
    PaymentProviderName.PAYPAL,
)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _flag(value: Optional[str]) -> bool:
    return value == "true"


def normalize_paypal_mode(raw: Optional[str]) -> str:
    """``live`` when the raw value says so (any case), else ``sandbox``."""
    if raw is not None and raw.strip().lower() == "live":
        return "live"
    return "sandbox"


@dataclass(frozen=True)
class PayPalConfig:
    """Resolved PayPal configuration. ``client_secret`` never leaves the server."""

    enabled: bool
    client_id: Optional[str]
    client_secret: Optional[str]
    mode: str

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def public(self) -> dict:
        return {"enabled": self.enabled, "client_id": self.client_id, "mode": self.mode}

    def __repr__(self) -> str:
        return (
            f"PayPalConfig(enabled={self.enabled}, client_id={self.client_id!r}, "
            f"client_secret={'***' if self.client_secret else None}, mode={self.mode!r})"
        )


@dataclass(frozen=True)
class StripeConfig:
    """Resolved Stripe configuration."""

    enabled: bool
    publishable_key: Optional[str]
    secret_key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    def public(self) -> dict:
        return {"enabled": self.enabled, "publishable_key": self.publishable_key}

    def __repr__(self) -> str:
        return (
            f"StripeConfig(enabled={self.enabled}, "
            f"publishable_key={self.publishable_key!r}, "
            f"secret_key={'***' if self.secret_key else None})"
        )


class PaymentProviderConfig:
    """
    Per-request resolver for payment provider settings.

    Attributes:
        settings_service: Persisted site settings and secrets
    """

    def __init__(
        self,
        settings_service: SettingsService,
        secrets: Optional[PaymentSecrets] = None,
    ):
        self.settings_service = settings_service
        self._secrets = secrets

    def _env(self) -> PaymentSecrets:
        return self._secrets if self._secrets is not None else get_payment_secrets()

    async def resolve_paypal(self) -> PayPalConfig:
        """
        Resolve PayPal credentials, mode and enablement.

        Environment values win over persisted ones. PayPal is enabled when the
        environment supplies both client id and secret, or when the
        ``paypalEnabled`` setting is ``"true"``.
        """
        env = self._env()
        stored = await self.settings_service.get_all()

        env_client_id = _clean(env.paypal_client_id)
        env_client_secret = _clean(
            env.paypal_client_secret.get_secret_value() if env.paypal_client_secret else None
        )
        env_mode = _clean(env.paypal_mode)

        client_id = env_client_id or _clean(stored.get("paypalClientId"))
        client_secret = env_client_secret
        if client_secret is None:
            client_secret = _clean(await self.settings_service.get_secret("paypalClientSecret"))

        mode = normalize_paypal_mode(env_mode or stored.get("paypalMode"))
        enabled = bool(env_client_id and env_client_secret) or _flag(stored.get("paypalEnabled"))

        config = PayPalConfig(
            enabled=enabled,
            client_id=client_id,
            client_secret=client_secret,
            mode=mode,
        )
        logger.debug(
            "Resolved PayPal configuration",
            enabled=config.enabled,
            mode=config.mode,
            configured=config.is_configured,
            credentials_from_env=bool(env_client_id and env_client_secret),
        )
        return config

    async def public_paypal_config(self) -> dict:
        """PayPal settings safe to hand to the storefront; no secret."""
        return (await self.resolve_paypal()).public()

    async def resolve_stripe(self) -> StripeConfig:
        env = self._env()
        stored = await self.settings_service.get_all()

        secret_key = _clean(
            env.stripe_secret_key.get_secret_value() if env.stripe_secret_key else None
        )
        if secret_key is None:
            secret_key = _clean(await self.settings_service.get_secret("stripeSecretKey"))

        return StripeConfig(
            enabled=_flag(stored.get("stripeEnabled")),
            publishable_key=_clean(env.stripe_publishable_key)
            or _clean(stored.get("stripePublicKey")),
            secret_key=secret_key,
        )

    async def public_stripe_config(self) -> dict:
        return (await self.resolve_stripe()).public()

    async def cod_enabled(self) -> bool:
        stored = await self.settings_service.get_all()
        return _flag(stored.get("codEnabled"))

    async def enabled_providers(self) -> dict[PaymentProviderName, bool]:
        """Enablement of every provider, without the checkout fallback."""
        paypal = await self.resolve_paypal()
        stripe_config = await self.resolve_stripe()
        return {
            PaymentProviderName.STRIPE: stripe_config.enabled,
            PaymentProviderName.PAYPAL: paypal.enabled,
            PaymentProviderName.COD: await self.cod_enabled(),
        }

    async def available_payment_methods(self) -> list[PaymentProviderName]:
        """
        Providers the checkout should offer.

        When nothing is enabled the checkout falls back to Stripe and PayPal
        so a store that has not been configured yet still shows a payment
        step.
        """
        enabled = await self.enabled_providers()
        methods = [name for name, is_enabled in enabled.items() if is_enabled]
        if not methods:
            return list(FALLBACK_PAYMENT_METHODS)
        return methods
