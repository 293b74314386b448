"""
PayPal relay endpoints.

The browser SDK calls create-order, the buyer approves on PayPal, then the
browser calls capture-order. Only the client id ever reaches the browser.
"""

from typing import Any

from fastapi import APIRouter, Request

from storefront.api.deps import OrderServiceDep, PayPalGatewayDep, ProviderConfigDep
from storefront.api.errors import payment_exception
from storefront.api.rate_limit import PAYMENT_RATE_LIMIT, limiter
from storefront.core.logging import get_logger
from storefront.schemas.paypal import (
    PayPalCaptureOrderRequest,
    PayPalConfigResponse,
    PayPalCreateOrderRequest,
)
from storefront.services.orders.service import OrderNotFoundError
from storefront.services.payments.exceptions import PaymentError

logger = get_logger(__name__)

router = APIRouter(prefix="/paypal", tags=["paypal"])


@router.get("/config", response_model=PayPalConfigResponse)
async def paypal_config(provider_config: ProviderConfigDep) -> PayPalConfigResponse:
    return PayPalConfigResponse.model_validate(await provider_config.public_paypal_config())


@router.post("/create-order")
@limiter.limit(PAYMENT_RATE_LIMIT)
async def create_order(
    request: Request,
    body: PayPalCreateOrderRequest,
    gateway: PayPalGatewayDep,
) -> dict[str, Any]:
    try:
        return await gateway.create_order(body.amount, body.currency)
    except PaymentError as e:
        raise payment_exception(e, "paypal.create_order")


@router.post("/capture-order")
@limiter.limit(PAYMENT_RATE_LIMIT)
async def capture_order(
    request: Request,
    body: PayPalCaptureOrderRequest,
    gateway: PayPalGatewayDep,
    order_service: OrderServiceDep,
) -> dict[str, Any]:
    """
    Capture an approved PayPal order.

    When ``orderNumber`` is supplied and the capture completes, that store
    order is marked paid.
    """
    try:
        payload = await gateway.capture_order(body.order_id)
    except PaymentError as e:
        raise payment_exception(e, "paypal.capture_order")

    if body.order_number and payload.get("status") == "COMPLETED":
        try:
            await order_service.mark_paid(body.order_number)
        except OrderNotFoundError:
            # The money is captured; a bad order reference must not fail the call.
            logger.warning(
                "Captured PayPal order references unknown store order",
                paypal_order_id=body.order_id,
                order_number=body.order_number,
            )
    return payload
