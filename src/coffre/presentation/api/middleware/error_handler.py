"""
Global error handling.

Every failure leaves as {success: false, error, message, details}.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from coffre.domain.exceptions import CoffreException
from coffre.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

STATUS_CODE_MAP = {
    "ENTITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE_ENTITY": status.HTTP_409_CONFLICT,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_AMOUNT": status.HTTP_400_BAD_REQUEST,
    "INVALID_TRANSFER_REQUEST": status.HTTP_400_BAD_REQUEST,
    "AUTHENTICATION_ERROR": status.HTTP_401_UNAUTHORIZED,
    "AUTH_INVALID": status.HTTP_401_UNAUTHORIZED,
    "AUTH_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "AUTH_REVOKED": status.HTTP_401_UNAUTHORIZED,
    "ACCESS_DENIED": status.HTTP_403_FORBIDDEN,
    "ACCOUNT_LOCKED": status.HTTP_423_LOCKED,
    "ORACLE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
    "EXPLORER_UNAVAILABLE": status.HTTP_502_BAD_GATEWAY,
    "SIMULATION_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(code: str, message: str, details: dict | None = None) -> dict:
    return {
        "success": False,
        "error": code,
        "message": message,
        "details": details or {},
    }


async def coffre_exception_handler(
    request: Request, exc: CoffreException
) -> JSONResponse:
    """
    Handle Coffre domain exceptions.

    Converts domain exceptions to appropriate HTTP responses.
    """
    status_code = STATUS_CODE_MAP.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    if status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, exc.message, exc.details),
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors in the common envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request body or query validation failures."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "VALIDATION_ERROR", "Request validation failed", {"errors": errors}
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the failure, never leak internals."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
    )
