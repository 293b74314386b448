"""
Checkout pricing engine.

Computes subtotal, shipping, tax and grand total for a cart under the store's
pricing policy. The calculation is deterministic and side-effect free; the
policy itself is read from the settings store by the caller.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from storefront.core.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Round a money amount half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartLine:
    """Minimal view of a cart item needed for pricing."""

    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class PricingPolicy:
    """
    Store pricing policy.

    Attributes:
        tax_rate: Fraction applied to the subtotal (0.08 means 8%)
        free_shipping_threshold: Subtotal at or above which shipping is free
        flat_shipping_rate: Shipping charged below the threshold
    """

    tax_rate: Decimal
    free_shipping_threshold: Decimal
    flat_shipping_rate: Decimal

    DEFAULT_TAX_RATE = Decimal("0.08")
    DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal("75")
    DEFAULT_FLAT_SHIPPING_RATE = Decimal("9.99")

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> "PricingPolicy":
        """
        Build the policy from the flat settings map.

        Reads ``taxRate``, ``freeShippingThreshold`` and ``shippingFlatRate``.
        Missing or unparsable values fall back to the storefront defaults.

        Args:
            settings: Current site settings

        Returns:
            PricingPolicy
        """
        return cls(
            tax_rate=_setting_decimal(settings, "taxRate", cls.DEFAULT_TAX_RATE),
            free_shipping_threshold=_setting_decimal(
                settings, "freeShippingThreshold", cls.DEFAULT_FREE_SHIPPING_THRESHOLD
            ),
            flat_shipping_rate=_setting_decimal(
                settings, "shippingFlatRate", cls.DEFAULT_FLAT_SHIPPING_RATE
            ),
        )


@dataclass(frozen=True)
class PriceBreakdown:
    """Order financials, each rounded to two decimals."""

    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @property
    def free_shipping(self) -> bool:
        return self.shipping == ZERO

    def as_strings(self) -> dict[str, str]:
        """Render amounts the way they are persisted and sent over the wire."""
        return {
            "subtotal": f"{self.subtotal:.2f}",
            "shipping": f"{self.shipping:.2f}",
            "tax": f"{self.tax:.2f}",
            "total": f"{self.total:.2f}",
        }


def _setting_decimal(settings: Mapping[str, str], key: str, default: Decimal) -> Decimal:
    raw: Optional[str] = settings.get(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        logger.warning("Unparsable pricing setting, using default", key=key, value=raw)
        return default
    if not value.is_finite() or value < 0:
        logger.warning("Out of range pricing setting, using default", key=key, value=raw)
        return default
    return value


class PricingEngine:
    """
    Pure pricing calculator.

    ``shipping`` is zero when the subtotal meets the free-shipping threshold,
    otherwise the flat rate. Tax applies to the subtotal only. The total is
    the sum of the rounded components so it always reconciles exactly.
    """

    def __init__(self, policy: PricingPolicy):
        self.policy = policy

    def calculate_subtotal(self, lines: Iterable[CartLine]) -> Decimal:
        subtotal = sum(
            (Decimal(line.unit_price) * line.quantity for line in lines),
            start=ZERO,
        )
        return quantize_money(subtotal)

    def calculate_shipping(self, subtotal: Decimal) -> Decimal:
        if subtotal >= self.policy.free_shipping_threshold:
            return ZERO
        return quantize_money(self.policy.flat_shipping_rate)

    def calculate_tax(self, subtotal: Decimal) -> Decimal:
        return quantize_money(subtotal * self.policy.tax_rate)

    def quote(self, lines: Iterable[CartLine]) -> PriceBreakdown:
        """
        Price a cart.

        Args:
            lines: Cart lines; validation of non-negative prices and positive
                quantities belongs to the caller

        Returns:
            PriceBreakdown
        """
        subtotal = self.calculate_subtotal(list(lines))
        shipping = self.calculate_shipping(subtotal)
        tax = self.calculate_tax(subtotal)
        total = subtotal + shipping + tax

        logger.debug(
            "Cart priced",
            subtotal=str(subtotal),
            shipping=str(shipping),
            tax=str(tax),
            total=str(total),
        )

        return PriceBreakdown(subtotal=subtotal, shipping=shipping, tax=tax, total=total)


def calculate_order_totals(
    items: Iterable[Any],
    tax_rate: Decimal,
    free_shipping_threshold: Decimal,
    flat_shipping_rate: Decimal,
) -> PriceBreakdown:
    """
    Functional entry point over ``PricingEngine``.

    Args:
        items: Objects or mappings exposing ``unit_price``/``unitPrice`` and
            ``quantity``
        tax_rate: Tax fraction
        free_shipping_threshold: Free shipping threshold
        flat_shipping_rate: Flat shipping rate

    Returns:
        PriceBreakdown
    """
    lines = [_to_cart_line(item) for item in items]
    policy = PricingPolicy(
        tax_rate=Decimal(tax_rate),
        free_shipping_threshold=Decimal(free_shipping_threshold),
        flat_shipping_rate=Decimal(flat_shipping_rate),
    )
    return PricingEngine(policy).quote(lines)


def _to_cart_line(item: Any) -> CartLine:
    if isinstance(item, CartLine):
        return item
    if isinstance(item, Mapping):
        price = item.get("unit_price", item.get("unitPrice", item.get("price")))
        quantity = item["quantity"]
    else:
        price = item.unit_price
        quantity = item.quantity
    return CartLine(unit_price=Decimal(str(price)), quantity=int(quantity))
