"""
Order schemas for API request/response validation.

The draft submitted at checkout carries a point-in-time snapshot of every
line item plus the totals the storefront displayed. ``status`` and
``orderNumber`` are accepted for compatibility but always overwritten by the
server.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from storefront.schemas.common import CamelModel, Money
from storefront.services.orders.enums import OrderStatus, PaymentProviderName

TOTAL_TOLERANCE = Decimal("0.01")

# Columns a patch may explicitly clear with null.
NULLABLE_UPDATE_FIELDS = frozenset({"payment_provider", "tracking_number"})


class OrderItemSnapshot(CamelModel):
    """Line item copied from the product at submission time."""

    product_id: Union[int, str] = Field(..., description="Product reference")
    name: str = Field(..., min_length=1, max_length=255)
    price: Money = Field(..., ge=0, description="Unit price snapshot")
    quantity: int = Field(..., ge=1, description="Units ordered")
    image: Optional[str] = Field(None, max_length=2048)


class OrderDraft(CamelModel):
    """Order as submitted by the storefront checkout."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: str = Field(..., min_length=3, max_length=255)
    shipping_address: str = Field(..., min_length=1)
    items: list[OrderItemSnapshot] = Field(..., min_length=1)
    subtotal: Money = Field(..., ge=0)
    shipping: Money = Field(..., ge=0)
    tax: Money = Field(..., ge=0)
    total: Money = Field(..., ge=0)
    payment_provider: Optional[PaymentProviderName] = None
    status: Optional[str] = Field(
        None, description="Ignored; new orders always start as pending"
    )

    @field_validator("customer_email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        """Validate email format."""
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Invalid email format")
        return v.lower()

    @model_validator(mode="after")
    def validate_totals(self) -> "OrderDraft":
        """Ensure total reconciles with its components."""
        expected = self.subtotal + self.shipping + self.tax
        if abs(expected - self.total) > TOTAL_TOLERANCE:
            raise ValueError(
                f"total ({self.total:.2f}) must equal subtotal + shipping + tax "
                f"({expected:.2f})"
            )
        return self


class OrderUpdate(CamelModel):
    """Partial order patch applied by the back office."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_email: Optional[str] = Field(None, min_length=3, max_length=255)
    shipping_address: Optional[str] = Field(None, min_length=1)
    items: Optional[list[OrderItemSnapshot]] = Field(None, min_length=1)
    subtotal: Optional[Money] = Field(None, ge=0)
    shipping: Optional[Money] = Field(None, ge=0)
    tax: Optional[Money] = Field(None, ge=0)
    total: Optional[Money] = Field(None, ge=0)
    payment_provider: Optional[PaymentProviderName] = None
    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = Field(None, max_length=100)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly present in the patch, as column values."""
        data = {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name in NULLABLE_UPDATE_FIELDS
        }
        if data.get("items") is not None:
            data["items"] = [
                item.model_dump(by_alias=True, mode="json") for item in data["items"]
            ]
        return data


class OrderResponse(CamelModel):
    """Full order as seen by the back office."""

    id: int
    order_number: str
    customer_name: str
    customer_email: str
    shipping_address: str
    items: list[dict[str, Any]]
    subtotal: Money
    shipping: Money
    tax: Money
    total: Money
    payment_provider: Optional[PaymentProviderName] = None
    status: OrderStatus
    tracking_number: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderTrackingResponse(CamelModel):
    """Public order-tracking view; carries no customer details."""

    order_number: str
    status: OrderStatus
    items: list[dict[str, Any]]
    total: Money
    tracking_number: Optional[str] = None
    created_at: datetime


class OrdersClearedResponse(CamelModel):
    deleted: int
