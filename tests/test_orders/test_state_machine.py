"""Tests for the order status transition check."""

import pytest

from storefront.services.orders.enums import OrderStatus
from storefront.services.orders.state_machine import (
    StateTransitionError,
    check_status_transition,
    get_allowed_transitions,
)


class TestCheckStatusTransition:
    @pytest.mark.parametrize("current", list(OrderStatus))
    @pytest.mark.parametrize("target", list(OrderStatus))
    def test_any_enumerated_status_is_allowed(self, current, target):
        assert check_status_transition(current, target) is target

    def test_accepts_strings(self):
        assert check_status_transition("pending", "SHIPPED") is OrderStatus.SHIPPED

    def test_unknown_target_is_rejected(self):
        with pytest.raises(StateTransitionError) as exc_info:
            check_status_transition(OrderStatus.PENDING, "teleported")

        assert exc_info.value.target_state == "teleported"

    def test_backwards_move_is_allowed(self):
        """Admins may correct mistakes, e.g. delivered back to shipped."""
        assert check_status_transition(OrderStatus.DELIVERED, OrderStatus.SHIPPED) is (
            OrderStatus.SHIPPED
        )


class TestGetAllowedTransitions:
    def test_every_status_reaches_every_status(self):
        for status in OrderStatus:
            assert get_allowed_transitions(status) == frozenset(OrderStatus)
