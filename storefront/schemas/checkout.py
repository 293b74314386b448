"""Checkout quote and payment method schemas."""

from typing import Optional

from pydantic import Field

from storefront.schemas.common import CamelModel, Money
from storefront.services.orders.enums import PaymentProviderName


class QuoteLine(CamelModel):
    unit_price: Money = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class QuoteRequest(CamelModel):
    """Cart to price under the current store policy."""

    items: list[QuoteLine] = Field(default_factory=list)


class QuoteResponse(CamelModel):
    subtotal: Money
    shipping: Money
    tax: Money
    total: Money
    free_shipping: bool
    free_shipping_threshold: Money
    tax_rate: str


class PaymentMethod(CamelModel):
    provider: PaymentProviderName
    name: str


class PaymentMethodsResponse(CamelModel):
    """Providers the checkout should offer, in display order."""

    methods: list[PaymentMethod]
    default: Optional[PaymentProviderName] = None
