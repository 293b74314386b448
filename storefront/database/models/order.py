"""
Order model for checkout persistence and tracking.

Line items are stored as a JSON snapshot taken at submission time so later
product edits never alter historical orders. Money columns are fixed-point
with two decimals.
"""

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Enum as SQLEnum, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import Base, TimestampMixin
from storefront.services.orders.enums import OrderStatus, PaymentProviderName

MONEY = Numeric(precision=10, scale=2, asdecimal=True)


class Order(Base, TimestampMixin):
    """
    Customer order.

    Attributes:
        id: Internal numeric identifier
        order_number: Human-readable identifier exposed for tracking
        customer_name: Customer full name
        customer_email: Customer email
        shipping_address: Free-text shipping address
        items: Snapshot of purchased line items
        subtotal: Sum of line totals
        shipping: Shipping charge
        tax: Tax on the subtotal
        total: subtotal + shipping + tax
        payment_provider: Provider chosen at checkout, if any
        status: Current lifecycle status
        tracking_number: Carrier tracking number
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    order_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)

    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    shipping: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    payment_provider: Mapped[Optional[PaymentProviderName]] = mapped_column(
        SQLEnum(
            PaymentProviderName,
            name="payment_provider",
            native_enum=False,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=True,
    )

    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("ix_orders_status", "status"),
        Index("ix_orders_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, order_number={self.order_number}, "
            f"status={self.status.value if self.status else None})>"
        )
