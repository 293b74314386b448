"""
PayPal REST client.

Thin async wrapper over the three PayPal endpoints the checkout uses: OAuth2
client-credentials token, Orders v2 create, and Orders v2 capture. Every
request has an explicit timeout and is retried on transient transport
failures (timeouts, dropped connections). HTTP error responses are never
retried.
"""

import asyncio
from typing import Any, Optional

import httpx

from storefront.core.config import get_settings
from storefront.core.logging import get_logger, log_performance
from storefront.services.payments.exceptions import (
    InvalidRequest,
    UpstreamAuthError,
    UpstreamRequestError,
)

logger = get_logger(__name__)

PAYPAL_API_BASES = {
    "live": "https://api-m.paypal.com",
    "sandbox": "https://api-m.sandbox.paypal.com",
}

RETRY_BACKOFF_SECONDS = 0.25


def api_base(mode: str) -> str:
    """
    Get the PayPal REST base URL for a mode.

    Raises:
        InvalidRequest: If mode is neither ``live`` nor ``sandbox``
    """
    try:
        return PAYPAL_API_BASES[mode]
    except KeyError:
        raise InvalidRequest("Unknown PayPal mode", mode=mode) from None


class PayPalClient:
    """
    PayPal API client with timeout and retry handling.

    Attributes:
        timeout: Per-request timeout in seconds
        max_retries: Extra attempts after a transient transport failure
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.paypal_timeout_seconds
        self.max_retries = (
            max_retries if max_retries is not None else settings.paypal_max_retries
        )
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _send(
        self,
        method: str,
        url: str,
        operation: str,
        **kwargs: Any,
    ) -> httpx.Response:
        attempts = max(0, self.max_retries) + 1
        last_error: Optional[httpx.TransportError] = None

        for attempt in range(1, attempts + 1):
            try:
                async with self._client() as client:
                    with log_performance(logger, f"paypal.{operation}", attempt=attempt):
                        return await client.request(method, url, **kwargs)
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "PayPal transport error",
                    operation=operation,
                    attempt=attempt,
                    max_attempts=attempts,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if attempt < attempts:
                    await asyncio.sleep(RETRY_BACKOFF_SECONDS * attempt)

        raise UpstreamRequestError(
            "PayPal request failed after retries",
            operation=operation,
            error=str(last_error),
        ) from last_error

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamRequestError(
                "PayPal returned a non-JSON response",
                operation=operation,
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def get_access_token(self, client_id: str, client_secret: str, mode: str) -> str:
        """
        Obtain an OAuth2 access token with client credentials.

        Args:
            client_id: PayPal REST app client id
            client_secret: PayPal REST app secret
            mode: ``live`` or ``sandbox``

        Returns:
            Bearer access token

        Raises:
            UpstreamAuthError: If PayPal does not issue a token
        """
        url = f"{api_base(mode)}/v1/oauth2/token"
        try:
            response = await self._send(
                "POST",
                url,
                "oauth2_token",
                data={"grant_type": "client_credentials"},
                auth=httpx.BasicAuth(client_id, client_secret),
                headers={"Accept": "application/json"},
            )
        except UpstreamRequestError as e:
            raise UpstreamAuthError("PayPal token request failed", **e.context) from e

        if not response.is_success:
            raise UpstreamAuthError(
                "PayPal token request rejected",
                status_code=response.status_code,
                body=response.text,
                mode=mode,
            )

        payload = self._json(response, "oauth2_token")
        token = payload.get("access_token")
        if not token:
            raise UpstreamAuthError(
                "PayPal token response missing access_token",
                status_code=response.status_code,
                body=response.text,
            )
        return token

    async def create_order(
        self,
        access_token: str,
        mode: str,
        value: str,
        currency_code: str,
    ) -> dict[str, Any]:
        """
        Create an Orders v2 order with CAPTURE intent.

        Args:
            access_token: Token from ``get_access_token``
            mode: ``live`` or ``sandbox``
            value: Amount formatted with exactly two decimals
            currency_code: ISO currency code, upper case

        Returns:
            PayPal order payload
        """
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {"amount": {"currency_code": currency_code, "value": value}},
            ],
        }
        response = await self._send(
            "POST",
            f"{api_base(mode)}/v2/checkout/orders",
            "create_order",
            json=body,
            headers=self._auth_headers(access_token),
        )
        return self._order_payload(response, "create_order")

    async def capture_order(
        self,
        access_token: str,
        mode: str,
        order_id: str,
    ) -> dict[str, Any]:
        """Capture payment for an approved Orders v2 order."""
        response = await self._send(
            "POST",
            f"{api_base(mode)}/v2/checkout/orders/{order_id}/capture",
            "capture_order",
            headers=self._auth_headers(access_token),
        )
        return self._order_payload(response, "capture_order")

    @staticmethod
    def _auth_headers(access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _order_payload(self, response: httpx.Response, operation: str) -> dict[str, Any]:
        if not response.is_success:
            raise UpstreamRequestError(
                "PayPal order request rejected",
                operation=operation,
                status_code=response.status_code,
                body=response.text,
            )
        return self._json(response, operation)
