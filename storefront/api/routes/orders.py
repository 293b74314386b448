"""
Order API endpoints.

Order submission is public (the storefront checkout); everything else is
back-office only.
"""

from fastapi import APIRouter, HTTPException, status

from storefront.api.deps import CurrentAdmin, OrderServiceDep
from storefront.api.errors import error_detail, not_found_exception, validation_exception
from storefront.core.logging import get_logger
from storefront.schemas.orders import (
    OrderDraft,
    OrderResponse,
    OrdersClearedResponse,
    OrderUpdate,
)
from storefront.services.orders.service import (
    OrderNotFoundError,
    OrderProcessingError,
    OrderValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit order",
)
async def create_order(draft: OrderDraft, service: OrderServiceDep) -> OrderResponse:
    """
    Persist a checkout order.

    The server assigns the order number and always starts the order as
    pending, whatever the body says.
    """
    try:
        order = await service.create_order(draft)
    except OrderValidationError as e:
        raise validation_exception(e.form_errors, e.field_errors, e.message)
    except OrderProcessingError as e:
        logger.error("Order creation failed", error=e.message, context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Failed to create order", "PROCESSING_ERROR"),
        )
    return OrderResponse.model_validate(order)


@router.get("", response_model=list[OrderResponse], summary="List orders")
async def list_orders(admin: CurrentAdmin, service: OrderServiceDep) -> list[OrderResponse]:
    orders = await service.list_orders()
    return [OrderResponse.model_validate(order) for order in orders]


@router.delete("", response_model=OrdersClearedResponse, summary="Clear all orders")
async def clear_orders(admin: CurrentAdmin, service: OrderServiceDep) -> OrdersClearedResponse:
    deleted = await service.clear_orders()
    logger.warning("Orders cleared by admin", admin=admin["sub"], deleted=deleted)
    return OrdersClearedResponse(deleted=deleted)


@router.patch("/{order_id}", response_model=OrderResponse, summary="Update order")
async def update_order(
    order_id: int,
    patch: OrderUpdate,
    admin: CurrentAdmin,
    service: OrderServiceDep,
) -> OrderResponse:
    try:
        order = await service.update_order(order_id, patch)
    except OrderNotFoundError:
        raise not_found_exception("Order not found")
    except OrderValidationError as e:
        raise validation_exception(e.form_errors, e.field_errors, e.message)
    except OrderProcessingError as e:
        logger.error("Order update failed", order_id=order_id, context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Failed to update order", "PROCESSING_ERROR"),
        )
    return OrderResponse.model_validate(order)
