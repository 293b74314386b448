"""
Provider-neutral payment endpoints.

``/payments/{provider}/intents`` and ``/payments/{provider}/captures`` drive
Stripe, PayPal or cash on delivery through the same request shape.
"""

from fastapi import APIRouter, Request, status

from storefront.api.deps import OrderServiceDep, PayPalGatewayDep, ProviderConfigDep
from storefront.api.errors import payment_exception
from storefront.api.rate_limit import PAYMENT_RATE_LIMIT, limiter
from storefront.core.logging import get_logger
from storefront.schemas.payments import (
    PaymentCaptureRequest,
    PaymentCaptureResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from storefront.services.orders.service import OrderNotFoundError
from storefront.services.payments.exceptions import PaymentError
from storefront.services.payments.providers import get_payment_provider

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/{provider}/intents",
    response_model=PaymentIntentResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(PAYMENT_RATE_LIMIT)
async def create_intent(
    request: Request,
    provider: str,
    body: PaymentIntentRequest,
    provider_config: ProviderConfigDep,
    paypal_gateway: PayPalGatewayDep,
) -> PaymentIntentResponse:
    try:
        payment_provider = get_payment_provider(provider, provider_config, paypal_gateway)
        intent = await payment_provider.create_intent(body.amount, body.currency)
    except PaymentError as e:
        raise payment_exception(e, f"{provider}.create_intent")

    return PaymentIntentResponse(
        provider=intent.provider,
        reference=intent.reference,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
        client_secret=intent.client_secret,
        approval_url=intent.approval_url,
    )


@router.post("/{provider}/captures", response_model=PaymentCaptureResponse)
@limiter.limit(PAYMENT_RATE_LIMIT)
async def capture(
    request: Request,
    provider: str,
    body: PaymentCaptureRequest,
    provider_config: ProviderConfigDep,
    paypal_gateway: PayPalGatewayDep,
    order_service: OrderServiceDep,
) -> PaymentCaptureResponse:
    try:
        payment_provider = get_payment_provider(provider, provider_config, paypal_gateway)
        result = await payment_provider.capture(body.reference)
    except PaymentError as e:
        raise payment_exception(e, f"{provider}.capture")

    linked_order = None
    if body.order_number and result.completed:
        try:
            order = await order_service.mark_paid(body.order_number)
            linked_order = order.order_number
        except OrderNotFoundError:
            logger.warning(
                "Captured payment references unknown store order",
                provider=provider,
                reference=result.reference,
                order_number=body.order_number,
            )

    return PaymentCaptureResponse(
        provider=result.provider,
        reference=result.reference,
        status=result.status,
        completed=result.completed,
        order_number=linked_order,
    )
