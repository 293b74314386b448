"""Public order tracking."""

from fastapi import APIRouter

from storefront.api.deps import OrderServiceDep
from storefront.api.errors import not_found_exception
from storefront.schemas.orders import OrderTrackingResponse
from storefront.services.orders.service import OrderNotFoundError

router = APIRouter(prefix="/track", tags=["tracking"])


@router.get("/{order_number}", response_model=OrderTrackingResponse)
async def track_order(order_number: str, service: OrderServiceDep) -> OrderTrackingResponse:
    """Look up an order by its public number. Customer details are never returned."""
    try:
        projection = await service.get_by_order_number(order_number)
    except OrderNotFoundError:
        raise not_found_exception("Order not found")
    return OrderTrackingResponse.model_validate(projection)
