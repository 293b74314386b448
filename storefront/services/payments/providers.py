"""
Payment provider variants behind one interface.

Checkout code talks to ``PaymentProvider`` and never branches on the
provider tag itself. Each variant checks its own enablement and credentials
at call time, so a settings change applies to the next request.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Protocol, Union

import stripe

from storefront.core.config import get_settings
from storefront.core.logging import get_logger, log_performance
from storefront.services.orders.enums import PaymentProviderName
from storefront.services.payments.exceptions import (
    InvalidRequest,
    NotConfigured,
    ProviderDisabled,
    UpstreamAuthError,
    UpstreamRequestError,
    parse_amount,
)
from storefront.services.payments.paypal_gateway import PayPalGateway
from storefront.services.payments.provider_config import PaymentProviderConfig

logger = get_logger(__name__)

# Currencies Stripe charges in whole units rather than cents.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {"BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA", "PYG", "RWF",
     "UGX", "VND", "VUV", "XAF", "XOF", "XPF"}
)


@dataclass
class PaymentIntent:
    """Provider-side payment created before the buyer pays."""

    provider: PaymentProviderName
    reference: str
    status: str
    amount: Decimal
    currency: str
    client_secret: Optional[str] = None
    approval_url: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class PaymentCapture:
    """Outcome of capturing a payment intent."""

    provider: PaymentProviderName
    reference: str
    status: str
    completed: bool
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


class PaymentProvider(Protocol):
    """Uniform create-then-capture interface implemented by every provider."""

    name: PaymentProviderName

    async def create_intent(self, amount: Any, currency: Optional[str] = None) -> PaymentIntent:
        ...

    async def capture(self, reference: Optional[str]) -> PaymentCapture:
        ...


def _currency(currency: Optional[str]) -> str:
    return (currency or "").strip().upper() or get_settings().default_currency


def _require_reference(reference: Optional[str]) -> str:
    reference = (reference or "").strip()
    if not reference:
        raise InvalidRequest("Payment reference is required")
    return reference


def to_minor_units(amount: Decimal, currency: str) -> int:
    """Convert an amount to the integer unit Stripe expects."""
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return int(amount.quantize(Decimal("1")))
    return int((amount * 100).quantize(Decimal("1")))


class StripeProvider:
    """
    Stripe PaymentIntents with manual capture.

    The SDK is synchronous, so calls run in a worker thread. The API key is
    passed per call rather than set globally because it is resolved per
    request.
    """

    name = PaymentProviderName.STRIPE

    def __init__(self, provider_config: PaymentProviderConfig):
        self.provider_config = provider_config

    async def _secret_key(self) -> str:
        config = await self.provider_config.resolve_stripe()
        if not config.enabled:
            raise ProviderDisabled("Stripe is not enabled")
        if not config.secret_key:
            raise NotConfigured("Stripe secret key is missing")
        return config.secret_key

    async def _call(self, operation: str, func, *args: Any, **kwargs: Any) -> Any:
        try:
            with log_performance(logger, f"stripe.{operation}"):
                return await asyncio.to_thread(func, *args, **kwargs)
        except stripe.AuthenticationError as e:
            raise UpstreamAuthError(
                "Stripe authentication failed",
                operation=operation,
                stripe_code=e.code,
                body=str(e),
            ) from e
        except stripe.StripeError as e:
            raise UpstreamRequestError(
                "Stripe request failed",
                operation=operation,
                stripe_code=e.code,
                http_status=e.http_status,
                body=str(e),
            ) from e

    async def create_intent(self, amount: Any, currency: Optional[str] = None) -> PaymentIntent:
        value = parse_amount(amount)
        currency_code = _currency(currency)
        api_key = await self._secret_key()

        intent = await self._call(
            "create_intent",
            stripe.PaymentIntent.create,
            amount=to_minor_units(value, currency_code),
            currency=currency_code.lower(),
            capture_method="manual",
            automatic_payment_methods={"enabled": True},
            api_key=api_key,
        )

        logger.info(
            "Stripe payment intent created",
            payment_intent_id=intent.id,
            status=intent.status,
            amount=f"{value:.2f}",
            currency=currency_code,
        )
        return PaymentIntent(
            provider=self.name,
            reference=intent.id,
            status=intent.status,
            amount=value,
            currency=currency_code,
            client_secret=getattr(intent, "client_secret", None),
            raw={"id": intent.id, "status": intent.status},
        )

    async def capture(self, reference: Optional[str]) -> PaymentCapture:
        reference = _require_reference(reference)
        api_key = await self._secret_key()

        intent = await self._call(
            "capture",
            stripe.PaymentIntent.capture,
            reference,
            api_key=api_key,
        )

        logger.info(
            "Stripe payment intent captured",
            payment_intent_id=reference,
            status=intent.status,
        )
        return PaymentCapture(
            provider=self.name,
            reference=reference,
            status=intent.status,
            completed=intent.status == "succeeded",
            raw={"id": intent.id, "status": intent.status},
        )


class PayPalProvider:
    """PayPal Orders v2 through ``PayPalGateway``."""

    name = PaymentProviderName.PAYPAL

    def __init__(self, gateway: PayPalGateway):
        self.gateway = gateway

    async def create_intent(self, amount: Any, currency: Optional[str] = None) -> PaymentIntent:
        value = parse_amount(amount)
        currency_code = _currency(currency)
        payload = await self.gateway.create_order(value, currency_code)

        approval_url = next(
            (
                link.get("href")
                for link in payload.get("links", [])
                if link.get("rel") in ("approve", "payer-action")
            ),
            None,
        )
        return PaymentIntent(
            provider=self.name,
            reference=payload.get("id", ""),
            status=payload.get("status", ""),
            amount=value,
            currency=currency_code,
            approval_url=approval_url,
            raw=payload,
        )

    async def capture(self, reference: Optional[str]) -> PaymentCapture:
        payload = await self.gateway.capture_order(reference)
        status = payload.get("status", "")
        return PaymentCapture(
            provider=self.name,
            reference=payload.get("id", reference or ""),
            status=status,
            completed=status == "COMPLETED",
            raw=payload,
        )


class CashOnDeliveryProvider:
    """
    Cash on delivery.

    No external service is involved: the intent only acknowledges the order
    and capture records that the courier collected the cash.
    """

    name = PaymentProviderName.COD

    PENDING_STATUS = "pending_collection"
    COLLECTED_STATUS = "collected"

    def __init__(self, provider_config: PaymentProviderConfig):
        self.provider_config = provider_config

    async def _ensure_enabled(self) -> None:
        if not await self.provider_config.cod_enabled():
            raise ProviderDisabled("Cash on delivery is not enabled")

    async def create_intent(self, amount: Any, currency: Optional[str] = None) -> PaymentIntent:
        value = parse_amount(amount)
        await self._ensure_enabled()
        reference = f"COD-{uuid.uuid4().hex[:12].upper()}"

        logger.info("Cash on delivery intent created", reference=reference, amount=f"{value:.2f}")
        return PaymentIntent(
            provider=self.name,
            reference=reference,
            status=self.PENDING_STATUS,
            amount=value,
            currency=_currency(currency),
        )

    async def capture(self, reference: Optional[str]) -> PaymentCapture:
        reference = _require_reference(reference)
        await self._ensure_enabled()

        logger.info("Cash on delivery collected", reference=reference)
        return PaymentCapture(
            provider=self.name,
            reference=reference,
            status=self.COLLECTED_STATUS,
            completed=True,
        )


def get_payment_provider(
    tag: Union[str, PaymentProviderName],
    provider_config: PaymentProviderConfig,
    paypal_gateway: Optional[PayPalGateway] = None,
) -> PaymentProvider:
    """
    Get the provider implementation for a tag.

    Args:
        tag: ``stripe``, ``paypal`` or ``cod``
        provider_config: Configuration resolver shared by all providers
        paypal_gateway: Gateway to use for PayPal; built on demand if omitted

    Raises:
        InvalidRequest: If the tag names no known provider
    """
    try:
        raw = tag.value if isinstance(tag, PaymentProviderName) else str(tag)
        name = PaymentProviderName(raw.strip().lower())
    except ValueError:
        raise InvalidRequest("Unknown payment provider", provider=str(tag)) from None

    if name is PaymentProviderName.STRIPE:
        return StripeProvider(provider_config)
    if name is PaymentProviderName.PAYPAL:
        return PayPalProvider(paypal_gateway or PayPalGateway(provider_config))
    return CashOnDeliveryProvider(provider_config)
