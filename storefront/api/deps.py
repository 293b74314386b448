"""
FastAPI dependencies for admin authentication and service wiring.

Services are built per request on top of the request's database session.
Tests swap any of them through ``app.dependency_overrides``.
"""

from typing import Annotated, Any, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.logging import get_logger, set_actor
from storefront.core.security import TokenError, decode_admin_token
from storefront.database.connection import get_db
from storefront.services.auth.login_attempts import (
    LoginAttemptTracker,
    get_login_tracker,
)
from storefront.services.auth.service import AdminAuthService
from storefront.services.orders.service import OrderService
from storefront.services.payments.paypal_client import PayPalClient
from storefront.services.payments.paypal_gateway import PayPalGateway
from storefront.services.payments.provider_config import PaymentProviderConfig
from storefront.services.settings.service import SettingsService

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def get_optional_admin(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[dict[str, Any]]:
    """
    Decode the admin bearer token if one was sent.

    Returns:
        Token claims, or None for anonymous or invalid tokens
    """
    if credentials is None:
        return None
    try:
        claims = decode_admin_token(credentials.credentials)
    except TokenError as e:
        logger.info("Rejected admin token", code=e.code)
        return None
    set_actor(claims["sub"])
    return claims


async def get_current_admin(
    claims: Annotated[Optional[dict[str, Any]], Depends(get_optional_admin)],
) -> dict[str, Any]:
    """
    Require a valid admin bearer token.

    Raises:
        HTTPException: 401 if the caller is not an admin
    """
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Unauthorized", "code": "UNAUTHORIZED"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentAdmin = Annotated[dict[str, Any], Depends(get_current_admin)]
OptionalAdmin = Annotated[Optional[dict[str, Any]], Depends(get_optional_admin)]


def get_settings_service(db: DatabaseSession) -> SettingsService:
    return SettingsService(db)


def get_order_service(db: DatabaseSession) -> OrderService:
    return OrderService(db)


def get_provider_config(
    settings_service: Annotated[SettingsService, Depends(get_settings_service)],
) -> PaymentProviderConfig:
    return PaymentProviderConfig(settings_service)


def get_paypal_client() -> PayPalClient:
    return PayPalClient()


def get_paypal_gateway(
    provider_config: Annotated[PaymentProviderConfig, Depends(get_provider_config)],
    client: Annotated[PayPalClient, Depends(get_paypal_client)],
) -> PayPalGateway:
    return PayPalGateway(provider_config, client)


def get_auth_service(
    tracker: Annotated[LoginAttemptTracker, Depends(get_login_tracker)],
) -> AdminAuthService:
    return AdminAuthService(tracker)


def get_client_address(request: Request) -> str:
    """
    Throttle key for the caller: the connection peer address.

    Request headers are never trusted here. Behind a proxy, run uvicorn with
    ``--proxy-headers`` and ``--forwarded-allow-ips`` so the peer address is
    the real client.
    """
    return get_remote_address(request)


SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
ProviderConfigDep = Annotated[PaymentProviderConfig, Depends(get_provider_config)]
PayPalGatewayDep = Annotated[PayPalGateway, Depends(get_paypal_gateway)]
AuthServiceDep = Annotated[AdminAuthService, Depends(get_auth_service)]
ClientAddress = Annotated[str, Depends(get_client_address)]
