"""
Order service.

Validates and persists checkout orders, generates their public order number,
routes every status change through the transition check and exposes the
PII-free tracking projection used by the public lookup.
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import Settings, get_settings
from storefront.core.logging import get_logger
from storefront.database.models.order import Order
from storefront.schemas.orders import OrderDraft, OrderUpdate
from storefront.services.orders.enums import OrderStatus
from storefront.services.orders.order_number import generate_order_number
from storefront.services.orders.repository import (
    OrderNotFoundError as RepositoryNotFoundError,
    OrderNumberConflictError,
    OrderRepository,
    OrderRepositoryError,
)
from storefront.services.orders.state_machine import (
    StateTransitionError,
    check_status_transition,
)
from storefront.services.settings.service import SettingsService

logger = get_logger(__name__)

ORDER_PREFIX_SETTING = "orderPrefix"

REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header"})


class OrderServiceError(Exception):
    """Base exception for order service errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class OrderValidationError(OrderServiceError):
    """Raised when an order draft or patch fails validation."""

    def __init__(
        self,
        message: str,
        form_errors: Optional[list[str]] = None,
        field_errors: Optional[dict[str, list[str]]] = None,
        **context: Any,
    ):
        super().__init__(message, **context)
        self.form_errors = form_errors or []
        self.field_errors = field_errors or {}


class OrderNotFoundError(OrderServiceError):
    """Raised when order is not found."""

    pass


class OrderProcessingError(OrderServiceError):
    """Raised when an order cannot be persisted."""

    pass


def flatten_validation_errors(errors: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Flatten pydantic error entries into ``{formErrors, fieldErrors}``.

    Errors attached to a field are grouped under the top-level field name;
    model-level errors become form errors.
    """
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for error in errors:
        location = list(error.get("loc", ()))
        if location and location[0] in REQUEST_LOCATIONS:
            location = location[1:]
        message = error.get("msg", "Invalid value")
        if location:
            field_errors.setdefault(str(location[0]), []).append(message)
        else:
            form_errors.append(message)
    return {"formErrors": form_errors, "fieldErrors": field_errors}


class OrderService:
    """
    Order service orchestrating validation, numbering and persistence.

    Attributes:
        repository: Order repository for data access
        settings_service: Source of the configured order prefix
        settings: Application settings
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Optional[Settings] = None,
        number_generator: Callable[[str], str] = generate_order_number,
    ):
        self.repository = OrderRepository(session)
        self.settings_service = SettingsService(session)
        self.settings = settings or get_settings()
        self._generate_number = number_generator

    async def create_order(self, draft: Union[OrderDraft, Mapping[str, Any]]) -> Order:
        """
        Validate and persist a new order.

        Whatever status or order number the draft carries is discarded: the
        order always starts ``pending`` with a server-generated number. A
        number collision is retried with a fresh number a bounded number of
        times.

        Args:
            draft: Validated draft or raw mapping in wire format

        Returns:
            Persisted order

        Raises:
            OrderValidationError: If the draft is invalid
            OrderProcessingError: If persistence fails
        """
        draft = self._validate_draft(draft)
        prefix = await self._order_prefix()
        items = [item.model_dump(by_alias=True, mode="json") for item in draft.items]

        max_attempts = max(1, self.settings.order_number_max_attempts)
        for attempt in range(1, max_attempts + 1):
            order_number = self._generate_number(prefix)
            try:
                order = await self.repository.create(
                    order_number=order_number,
                    customer_name=draft.customer_name,
                    customer_email=draft.customer_email,
                    shipping_address=draft.shipping_address,
                    items=items,
                    subtotal=draft.subtotal,
                    shipping=draft.shipping,
                    tax=draft.tax,
                    total=draft.total,
                    payment_provider=draft.payment_provider,
                    status=OrderStatus.PENDING,
                )
            except OrderNumberConflictError:
                logger.warning(
                    "Order number collision, regenerating",
                    order_number=order_number,
                    attempt=attempt,
                    max_attempts=max_attempts,
                )
                continue
            except OrderRepositoryError as e:
                raise OrderProcessingError(
                    "Failed to create order", **e.context
                ) from e

            if draft.status and draft.status.strip().lower() != OrderStatus.PENDING.value:
                logger.info(
                    "Ignored client-supplied order status",
                    order_number=order.order_number,
                    requested_status=draft.status,
                )
            return order

        logger.error(
            "Exhausted order number attempts",
            prefix=prefix,
            max_attempts=max_attempts,
        )
        raise OrderProcessingError(
            "Could not allocate a unique order number",
            max_attempts=max_attempts,
        )

    async def update_order(
        self,
        order_id: int,
        patch: Union[OrderUpdate, Mapping[str, Any]],
    ) -> Order:
        """
        Apply a partial back-office update.

        Fields are overwritten as given; totals are not re-validated against
        each other.

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderValidationError: If the patch or status change is invalid
        """
        if not isinstance(patch, OrderUpdate):
            try:
                patch = OrderUpdate.model_validate(patch)
            except ValidationError as e:
                flattened = flatten_validation_errors(e.errors())
                raise OrderValidationError(
                    "Invalid order update",
                    form_errors=flattened["formErrors"],
                    field_errors=flattened["fieldErrors"],
                ) from e

        changes = patch.changes()

        order = await self.repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError("Order not found", order_id=order_id)

        if changes.get("status") is not None:
            try:
                changes["status"] = check_status_transition(order.status, changes["status"])
            except StateTransitionError as e:
                raise OrderValidationError(
                    str(e),
                    field_errors={"status": [str(e)]},
                    order_id=order_id,
                ) from e
        elif "status" in changes:
            changes.pop("status")

        try:
            return await self.repository.update(order_id, changes)
        except RepositoryNotFoundError as e:
            raise OrderNotFoundError("Order not found", order_id=order_id) from e
        except OrderRepositoryError as e:
            raise OrderProcessingError("Failed to update order", **e.context) from e

    async def list_orders(self) -> Sequence[Order]:
        return await self.repository.list()

    async def clear_orders(self) -> int:
        return await self.repository.delete_all()

    async def get_by_order_number(self, order_number: str) -> dict[str, Any]:
        """
        Public tracking lookup.

        Returns only orderNumber, status, items, total, trackingNumber and
        createdAt. Customer name, email and address never leave this method.

        Raises:
            OrderNotFoundError: If no order has this number
        """
        normalized = (order_number or "").strip().upper()
        order = None
        if normalized:
            order = await self.repository.get_by_order_number(normalized)
        if order is None:
            raise OrderNotFoundError("Order not found", order_number=normalized)

        return {
            "order_number": order.order_number,
            "status": order.status,
            "items": order.items,
            "total": order.total,
            "tracking_number": order.tracking_number,
            "created_at": order.created_at,
        }

    async def mark_paid(self, order_number: str) -> Order:
        """
        Move a pending order to ``paid`` after a completed capture.

        Raises:
            OrderNotFoundError: If no order has this number
        """
        order = await self.repository.get_by_order_number(order_number.strip().upper())
        if order is None:
            raise OrderNotFoundError("Order not found", order_number=order_number)

        # Only a pending order is advanced; later statuses were set by an admin.
        if order.status != OrderStatus.PENDING:
            return order
        status = check_status_transition(order.status, OrderStatus.PAID)

        logger.info(
            "Marking order paid",
            order_id=order.id,
            order_number=order.order_number,
            previous_status=order.status.value,
        )
        return await self.repository.update(order.id, {"status": status})

    def _validate_draft(self, draft: Union[OrderDraft, Mapping[str, Any]]) -> OrderDraft:
        if isinstance(draft, OrderDraft):
            return draft
        try:
            return OrderDraft.model_validate(draft)
        except ValidationError as e:
            flattened = flatten_validation_errors(e.errors())
            logger.info(
                "Order draft rejected",
                field_errors=list(flattened["fieldErrors"].keys()),
                form_error_count=len(flattened["formErrors"]),
            )
            raise OrderValidationError(
                "Invalid order",
                form_errors=flattened["formErrors"],
                field_errors=flattened["fieldErrors"],
            ) from e

    async def _order_prefix(self) -> str:
        configured = await self.settings_service.get(ORDER_PREFIX_SETTING)
        prefix = (configured or "").strip().upper()
        return prefix or self.settings.default_order_prefix
