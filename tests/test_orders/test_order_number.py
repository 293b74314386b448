"""Tests for order number generation."""

import random
import re

import pytest

from storefront.services.orders.order_number import generate_order_number, to_base36

ORDER_NUMBER_PATTERN = re.compile(r"^[A-Z0-9]+-[0-9A-Z]+-[0-9A-Z]{4}$")


class TestToBase36:
    @pytest.mark.parametrize(
        "value,expected",
        [(0, "0"), (35, "Z"), (36, "10"), (1_700_000_000_000, "LOYW3V28")],
    )
    def test_encodes_upper_case(self, value, expected):
        assert to_base36(value) == expected

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            to_base36(-1)


class TestGenerateOrderNumber:
    def test_format(self):
        number = generate_order_number("NVZ", now_ms=1_700_000_000_000, rng=random.Random(7))

        assert number.startswith("NVZ-LOYW3V28-")
        assert ORDER_NUMBER_PATTERN.match(number)

    def test_prefix_is_upper_cased(self):
        assert generate_order_number("shop").startswith("SHOP-")

    def test_blank_prefix_falls_back(self):
        assert generate_order_number("  ").startswith("NVZ-")

    def test_same_millisecond_numbers_differ(self):
        rng = random.Random(42)
        numbers = {
            generate_order_number("NVZ", now_ms=1_700_000_000_000, rng=rng) for _ in range(50)
        }

        assert len(numbers) > 1
