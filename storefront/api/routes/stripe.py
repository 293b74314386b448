"""Stripe public configuration."""

from fastapi import APIRouter

from storefront.api.deps import ProviderConfigDep
from storefront.schemas.payments import StripeConfigResponse

router = APIRouter(prefix="/stripe", tags=["stripe"])


@router.get("/config", response_model=StripeConfigResponse)
async def stripe_config(provider_config: ProviderConfigDep) -> StripeConfigResponse:
    """Publishable key and enablement; the secret key is never returned."""
    return StripeConfigResponse.model_validate(await provider_config.public_stripe_config())
