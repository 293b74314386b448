"""Admin authentication schemas."""

from pydantic import Field

from storefront.schemas.common import CamelModel


class AdminLoginRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class AdminTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AdminSessionResponse(CamelModel):
    is_admin: bool
