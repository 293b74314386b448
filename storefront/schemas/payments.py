"""Provider-neutral payment schemas."""

from typing import Any, Optional

from pydantic import Field

from storefront.schemas.common import CamelModel, Money
from storefront.services.orders.enums import PaymentProviderName


class StripeConfigResponse(CamelModel):
    enabled: bool
    publishable_key: Optional[str] = None


class PaymentIntentRequest(CamelModel):
    amount: Any = None
    currency: Optional[str] = Field(None, max_length=3)


class PaymentIntentResponse(CamelModel):
    provider: PaymentProviderName
    reference: str
    status: str
    amount: Money
    currency: str
    client_secret: Optional[str] = None
    approval_url: Optional[str] = None


class PaymentCaptureRequest(CamelModel):
    reference: Optional[str] = None
    order_number: Optional[str] = None


class PaymentCaptureResponse(CamelModel):
    provider: PaymentProviderName
    reference: str
    status: str
    completed: bool
    order_number: Optional[str] = None
