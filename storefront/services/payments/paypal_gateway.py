"""
PayPal checkout gateway.

Two-step Orders v2 relay used by the storefront: create an order for an
amount, then capture it once the buyer approves. Input is validated before
any configuration lookup or network call. The client secret is only ever
used to obtain an access token and never leaves this module.
"""

from typing import Any, Optional

from storefront.core.config import get_settings
from storefront.core.logging import get_logger
from storefront.services.payments.exceptions import (
    InvalidRequest,
    NotConfigured,
    ProviderDisabled,
    parse_amount,
)
from storefront.services.payments.paypal_client import PayPalClient
from storefront.services.payments.provider_config import (
    PaymentProviderConfig,
    PayPalConfig,
)

logger = get_logger(__name__)


class PayPalGateway:
    """
    Orchestrates PayPal order creation and capture.

    Attributes:
        provider_config: Per-request provider configuration resolver
        client: PayPal REST client
    """

    def __init__(
        self,
        provider_config: PaymentProviderConfig,
        client: Optional[PayPalClient] = None,
    ):
        self.provider_config = provider_config
        self.client = client or PayPalClient()

    async def _ready_config(self) -> PayPalConfig:
        config = await self.provider_config.resolve_paypal()
        if not config.enabled:
            raise ProviderDisabled("PayPal is not enabled")
        if not config.is_configured:
            raise NotConfigured(
                "PayPal credentials are missing",
                has_client_id=bool(config.client_id),
                has_client_secret=bool(config.client_secret),
            )
        return config

    async def create_order(self, amount: Any, currency: Optional[str] = None) -> dict[str, Any]:
        """
        Create a PayPal order for ``amount``.

        Args:
            amount: Positive decimal amount (number or string)
            currency: ISO currency code; defaults to USD

        Returns:
            PayPal order payload (includes ``id`` and approval links)

        Raises:
            InvalidAmount: Amount is not a finite positive decimal
            ProviderDisabled: PayPal is switched off
            NotConfigured: Credentials are missing
            UpstreamAuthError: Token request failed
            UpstreamRequestError: Order request failed
        """
        value = parse_amount(amount)
        currency_code = (currency or "").strip().upper() or get_settings().default_currency

        config = await self._ready_config()
        token = await self.client.get_access_token(
            config.client_id, config.client_secret, config.mode
        )
        payload = await self.client.create_order(
            token, config.mode, f"{value:.2f}", currency_code
        )

        logger.info(
            "PayPal order created",
            paypal_order_id=payload.get("id"),
            status=payload.get("status"),
            amount=f"{value:.2f}",
            currency=currency_code,
            mode=config.mode,
        )
        return payload

    async def capture_order(self, order_id: Optional[str]) -> dict[str, Any]:
        """
        Capture an approved PayPal order.

        A fresh access token is obtained for every capture.

        Raises:
            InvalidRequest: ``order_id`` is empty
            ProviderDisabled: PayPal is switched off
            NotConfigured: Credentials are missing
            UpstreamAuthError: Token request failed
            UpstreamRequestError: Capture request failed
        """
        order_id = (order_id or "").strip()
        if not order_id:
            raise InvalidRequest("orderID is required")

        config = await self._ready_config()
        token = await self.client.get_access_token(
            config.client_id, config.client_secret, config.mode
        )
        payload = await self.client.capture_order(token, config.mode, order_id)

        logger.info(
            "PayPal order captured",
            paypal_order_id=order_id,
            status=payload.get("status"),
            mode=config.mode,
        )
        return payload
