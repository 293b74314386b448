"""
Mapping from domain exceptions to HTTP errors.

Every error body has the shape ``{"detail": {"message", "code", ...}}``.
Upstream provider details are logged here and never copied into the
response.
"""

from typing import Any, Optional

from fastapi import HTTPException, status

from storefront.core.logging import get_logger
from storefront.services.payments.exceptions import PaymentError

logger = get_logger(__name__)


def error_detail(message: str, code: str, **extra: Any) -> dict[str, Any]:
    return {"message": message, "code": code, **extra}


def validation_exception(
    form_errors: Optional[list[str]] = None,
    field_errors: Optional[dict[str, list[str]]] = None,
    message: str = "Validation failed",
) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail(
            message,
            "VALIDATION_ERROR",
            errors={
                "formErrors": form_errors or [],
                "fieldErrors": field_errors or {},
            },
        ),
    )


def not_found_exception(message: str = "Not found") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail(message, "NOT_FOUND"),
    )


def payment_exception(error: PaymentError, operation: str) -> HTTPException:
    """
    Convert a payment error into an HTTPException.

    Client errors keep their message. Server-side failures (missing
    credentials, provider rejections) are logged with their full context and
    answered with the generic public message only.
    """
    if error.http_status < 500:
        logger.warning(
            "Payment request rejected",
            operation=operation,
            code=error.code,
            error=error.message,
        )
        return HTTPException(
            status_code=error.http_status,
            detail=error_detail(error.message, error.code),
        )

    logger.error(
        "Payment provider failure",
        operation=operation,
        code=error.code,
        error=error.message,
        context=error.context,
    )
    return HTTPException(
        status_code=error.http_status,
        detail=error_detail(error.public_message, error.code),
    )
