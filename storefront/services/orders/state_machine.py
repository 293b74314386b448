"""Order status transition checks.

Every status change made through ``OrderService`` passes through
``check_status_transition``. The back office is currently allowed to move an
order to any enumerated status (manual corrections included), so the check
only rejects unknown values. Tightening the lifecycle means editing
``ALLOWED_TRANSITIONS`` here; callers stay untouched.
"""

from typing import Any, Union

from storefront.core.logging import get_logger
from storefront.services.orders.enums import OrderStatus

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    status: frozenset(OrderStatus) for status in OrderStatus
}


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        message: str,
        current_state: Union[OrderStatus, str, None],
        target_state: Union[OrderStatus, str, None],
        **context: Any,
    ):
        super().__init__(message)
        self.current_state = current_state
        self.target_state = target_state
        self.context = context


def get_allowed_transitions(current: OrderStatus) -> frozenset[OrderStatus]:
    """Get the statuses an order in ``current`` may move to."""
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def check_status_transition(
    current: Union[OrderStatus, str],
    target: Union[OrderStatus, str],
) -> OrderStatus:
    """Validate a status change and return the normalized target.

    Args:
        current: Status the order is in now
        target: Requested status

    Returns:
        Target status as an ``OrderStatus``

    Raises:
        StateTransitionError: If either status is unknown or the move is not
            allowed
    """
    try:
        current_status = (
            current if isinstance(current, OrderStatus) else OrderStatus.from_string(current)
        )
        target_status = (
            target if isinstance(target, OrderStatus) else OrderStatus.from_string(target)
        )
    except (ValueError, AttributeError) as e:
        raise StateTransitionError(
            str(e), current_state=current, target_state=target
        ) from e

    if target_status not in get_allowed_transitions(current_status):
        raise StateTransitionError(
            f"Cannot transition from {current_status.value} to {target_status.value}",
            current_state=current_status,
            target_state=target_status,
        )

    if current_status != target_status:
        logger.debug(
            "Order status transition accepted",
            from_status=current_status.value,
            to_status=target_status.value,
        )
    return target_status
