"""Order status and payment provider enums.

The nominal fulfilment flow is pending -> paid -> packed -> shipped ->
delivered, with refunded reachable as a side exit. The back office may set
any status at any time; see ``state_machine.check_status_transition``.
"""

from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"
    PAID = "paid"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    REFUNDED = "refunded"

    @classmethod
    def from_string(cls, value: str) -> "OrderStatus":
        """Convert string to OrderStatus enum.

        Args:
            value: String representation of status

        Returns:
            OrderStatus enum value

        Raises:
            ValueError: If value is not a valid status
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid_values = ", ".join([s.value for s in cls])
            raise ValueError(
                f"Invalid order status: {value}. "
                f"Valid values are: {valid_values}"
            )

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class PaymentProviderName(str, Enum):
    """Payment providers a checkout can be settled with."""

    STRIPE = "stripe"
    PAYPAL = "paypal"
    COD = "cod"

    @property
    def display_name(self) -> str:
        return {
            PaymentProviderName.STRIPE: "Stripe",
            PaymentProviderName.PAYPAL: "PayPal",
            PaymentProviderName.COD: "Cash on Delivery",
        }[self]
