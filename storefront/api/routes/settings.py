"""Site settings endpoints."""

from fastapi import APIRouter, HTTPException, status

from storefront.api.deps import CurrentAdmin, SettingsServiceDep
from storefront.api.errors import error_detail, not_found_exception
from storefront.core.logging import get_logger
from storefront.schemas.settings import SecretStatusResponse, SettingsMap
from storefront.services.settings.repository import SettingsRepositoryError
from storefront.services.settings.service import UnknownSecretError

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=dict[str, str])
async def get_settings_map(settings_service: SettingsServiceDep) -> dict[str, str]:
    """All public settings. Provider secrets are stored separately and never listed."""
    return await settings_service.get_all()


@router.patch("", response_model=dict[str, str])
async def update_settings(
    values: SettingsMap,
    admin: CurrentAdmin,
    settings_service: SettingsServiceDep,
) -> dict[str, str]:
    try:
        return await settings_service.update(values.root)
    except SettingsRepositoryError as e:
        logger.error("Settings update failed", context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Failed to update settings", "PROCESSING_ERROR"),
        )


@router.get("/secrets", response_model=SecretStatusResponse)
async def secret_status(
    admin: CurrentAdmin, settings_service: SettingsServiceDep
) -> SecretStatusResponse:
    configured = await settings_service.secret_status()
    return SecretStatusResponse(
        paypal_client_secret=configured["paypalClientSecret"],
        stripe_secret_key=configured["stripeSecretKey"],
    )


@router.delete("/secrets/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_secret(
    key: str, admin: CurrentAdmin, settings_service: SettingsServiceDep
) -> None:
    try:
        removed = await settings_service.clear_secret(key)
    except UnknownSecretError:
        raise not_found_exception("Unknown secret")
    if not removed:
        raise not_found_exception("Secret not set")
