"""Checkout pricing and payment method discovery."""

from fastapi import APIRouter

from storefront.api.deps import ProviderConfigDep, SettingsServiceDep
from storefront.schemas.checkout import (
    PaymentMethod,
    PaymentMethodsResponse,
    QuoteRequest,
    QuoteResponse,
)
from storefront.services.pricing.pricing_engine import (
    CartLine,
    PricingEngine,
    PricingPolicy,
)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/quote", response_model=QuoteResponse)
async def quote(request: QuoteRequest, settings_service: SettingsServiceDep) -> QuoteResponse:
    """Price a cart with the store's current tax and shipping settings."""
    policy = PricingPolicy.from_settings(await settings_service.get_all())
    breakdown = PricingEngine(policy).quote(
        CartLine(unit_price=line.unit_price, quantity=line.quantity)
        for line in request.items
    )
    return QuoteResponse(
        subtotal=breakdown.subtotal,
        shipping=breakdown.shipping,
        tax=breakdown.tax,
        total=breakdown.total,
        free_shipping=breakdown.free_shipping,
        free_shipping_threshold=policy.free_shipping_threshold,
        tax_rate=str(policy.tax_rate),
    )


@router.get("/payment-methods", response_model=PaymentMethodsResponse)
async def payment_methods(provider_config: ProviderConfigDep) -> PaymentMethodsResponse:
    methods = await provider_config.available_payment_methods()
    return PaymentMethodsResponse(
        methods=[PaymentMethod(provider=m, name=m.display_name) for m in methods],
        default=methods[0] if methods else None,
    )
