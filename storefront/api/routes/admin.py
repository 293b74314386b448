"""Back-office login endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from storefront.api.deps import AuthServiceDep, ClientAddress, OptionalAdmin
from storefront.api.errors import error_detail
from storefront.schemas.auth import (
    AdminLoginRequest,
    AdminSessionResponse,
    AdminTokenResponse,
)
from storefront.services.auth.service import InvalidCredentialsError, RateLimitedError

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=AdminTokenResponse)
async def login(
    credentials: AdminLoginRequest,
    auth_service: AuthServiceDep,
    caller: ClientAddress,
) -> AdminTokenResponse:
    try:
        session = await auth_service.login(
            credentials.username, credentials.password, caller
        )
    except RateLimitedError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=error_detail(e.message, "RATE_LIMITED"),
            headers={"Retry-After": str(e.retry_after)},
        )
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("Invalid credentials", "INVALID_CREDENTIALS"),
        )
    return AdminTokenResponse(
        access_token=session.access_token,
        token_type=session.token_type,
        expires_in=session.expires_in,
    )


@router.get("/session", response_model=AdminSessionResponse)
async def session(admin: OptionalAdmin) -> AdminSessionResponse:
    return AdminSessionResponse(is_admin=admin is not None)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout() -> Response:
    # Tokens are stateless; the client drops its copy.
    return Response(status_code=status.HTTP_204_NO_CONTENT)
