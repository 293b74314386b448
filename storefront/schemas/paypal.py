"""PayPal relay schemas."""

from typing import Any, Optional

from pydantic import AliasChoices, Field

from storefront.schemas.common import CamelModel


class PayPalConfigResponse(CamelModel):
    """Public PayPal configuration; the client secret is never included."""

    enabled: bool
    client_id: Optional[str] = None
    mode: str


class PayPalCreateOrderRequest(CamelModel):
    # Left loose so a malformed amount is reported as INVALID_AMOUNT.
    amount: Any = None
    currency: Optional[str] = Field(None, max_length=3)


class PayPalCaptureOrderRequest(CamelModel):
    order_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("orderId", "orderID", "order_id")
    )
    order_number: Optional[str] = None
