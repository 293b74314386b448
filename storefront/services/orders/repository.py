"""
Order data access repository.

Async CRUD over the ``orders`` table. Writes are committed here so that a
unique-constraint violation on ``order_number`` surfaces to the service as
``OrderNumberConflictError`` and can be retried with a fresh number.
"""

from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.logging import get_logger
from storefront.database.models.order import Order

logger = get_logger(__name__)

# Columns a back-office patch may touch.
UPDATABLE_FIELDS = frozenset(
    {
        "customer_name",
        "customer_email",
        "shipping_address",
        "items",
        "subtotal",
        "shipping",
        "tax",
        "total",
        "payment_provider",
        "status",
        "tracking_number",
    }
)


class OrderRepositoryError(Exception):
    """Base exception for order repository errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderNotFoundError(OrderRepositoryError):
    """Raised when order is not found."""

    pass


class OrderNumberConflictError(OrderRepositoryError):
    """Raised when a generated order number is already taken."""

    pass


def is_order_number_conflict(error: IntegrityError) -> bool:
    """
    Whether an integrity error is a duplicate ``order_number``.

    PostgreSQL reports the violated constraint name
    (``orders_order_number_key``); SQLite reports ``orders.order_number``.
    NOT NULL and other violations do not count.
    """
    message = str(error.orig).lower()
    is_unique = "unique" in message or "duplicate" in message
    return is_unique and "order_number" in message


class OrderRepository:
    """Repository for order data access operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **values: Any) -> Order:
        """
        Insert a new order and commit.

        Args:
            **values: Column values for the new order

        Returns:
            Persisted order with ``id`` and ``created_at`` populated

        Raises:
            OrderNumberConflictError: If ``order_number`` already exists
            OrderRepositoryError: On any other database failure
        """
        order = Order(**values)
        try:
            self.session.add(order)
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(order)
        except IntegrityError as e:
            await self.session.rollback()
            if not is_order_number_conflict(e):
                logger.error(
                    "Order insert violated a constraint",
                    order_number=values.get("order_number"),
                    error=str(e.orig),
                )
                raise OrderRepositoryError(
                    "Failed to create order",
                    order_number=values.get("order_number"),
                    error=str(e.orig),
                ) from e
            logger.warning(
                "Order number already taken",
                order_number=values.get("order_number"),
                error=str(e.orig),
            )
            raise OrderNumberConflictError(
                "Order number already exists",
                order_number=values.get("order_number"),
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Database error creating order",
                order_number=values.get("order_number"),
                error=str(e),
            )
            raise OrderRepositoryError(
                "Failed to create order",
                order_number=values.get("order_number"),
                error=str(e),
            ) from e

        logger.info(
            "Order created successfully",
            order_id=order.id,
            order_number=order.order_number,
        )
        return order

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        try:
            return await self.session.get(Order, order_id)
        except SQLAlchemyError as e:
            raise OrderRepositoryError(
                "Failed to retrieve order", order_id=order_id, error=str(e)
            ) from e

    async def get_by_order_number(self, order_number: str) -> Optional[Order]:
        try:
            result = await self.session.execute(
                select(Order).where(Order.order_number == order_number)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise OrderRepositoryError(
                "Failed to retrieve order",
                order_number=order_number,
                error=str(e),
            ) from e

    async def list(self) -> Sequence[Order]:
        """Return every order, newest first."""
        try:
            result = await self.session.execute(
                select(Order).order_by(Order.created_at.desc(), Order.id.desc())
            )
            return result.scalars().all()
        except SQLAlchemyError as e:
            raise OrderRepositoryError("Failed to list orders", error=str(e)) from e

    async def update(self, order_id: int, changes: dict[str, Any]) -> Order:
        """
        Apply a partial update and commit.

        Args:
            order_id: Order identifier
            changes: Column values to overwrite; keys outside
                ``UPDATABLE_FIELDS`` are ignored

        Returns:
            Updated order

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderRepositoryError: On database failure
        """
        order = await self.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError("Order not found", order_id=order_id)

        applied = []
        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                continue
            setattr(order, field, value)
            applied.append(field)

        try:
            await self.session.commit()
            await self.session.refresh(order)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise OrderRepositoryError(
                "Failed to update order", order_id=order_id, error=str(e)
            ) from e

        logger.info("Order updated", order_id=order_id, fields=applied)
        return order

    async def delete_all(self) -> int:
        """Delete every order and return how many were removed."""
        try:
            result = await self.session.execute(delete(Order))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise OrderRepositoryError("Failed to clear orders", error=str(e)) from e

        deleted = result.rowcount or 0
        logger.warning("All orders cleared", deleted=deleted)
        return deleted
