"""
Payment error hierarchy.

Every payment failure carries a stable ``code`` and an ``http_status`` that
the API layer maps onto the response. Upstream errors keep the provider's raw
response body in ``context`` for the logs only; callers receive a generic
message.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional


class PaymentError(Exception):
    """Base exception for payment errors."""

    code = "PAYMENT_ERROR"
    http_status = 500
    public_message = "Payment processing failed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.context = context


class InvalidAmount(PaymentError):
    """Amount is not a finite positive decimal."""

    code = "INVALID_AMOUNT"
    http_status = 400
    public_message = "Invalid amount"


class InvalidRequest(PaymentError):
    """A required request field is missing or malformed."""

    code = "INVALID_REQUEST"
    http_status = 400
    public_message = "Invalid request"


class ProviderDisabled(PaymentError):
    """The requested provider is switched off."""

    code = "PROVIDER_DISABLED"
    http_status = 400
    public_message = "Payment provider is not enabled"


class NotConfigured(PaymentError):
    """The provider is enabled but its credentials are missing."""

    code = "NOT_CONFIGURED"
    http_status = 500
    public_message = "Payment provider is not configured"


class UpstreamAuthError(PaymentError):
    """The provider rejected our credentials."""

    code = "UPSTREAM_AUTH_ERROR"
    http_status = 500
    public_message = "Payment provider authentication failed"


class UpstreamRequestError(PaymentError):
    """The provider rejected or failed a payment request."""

    code = "UPSTREAM_REQUEST_ERROR"
    http_status = 500
    public_message = "Payment provider request failed"


def parse_amount(value: Any) -> Decimal:
    """
    Parse a payment amount.

    Args:
        value: Number or numeric string

    Returns:
        Amount as a Decimal

    Raises:
        InvalidAmount: If the value is not a finite decimal greater than zero
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount(value=repr(value))
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(value=repr(value)) from e
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount(value=repr(value))
    return amount
