"""
Error taxonomy and the handlers that turn errors into response envelopes.

Every failure leaves the service as ``{"status": false, "message": ..., "data": ...}``
with the HTTP status code of the matching error class.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fleetdesk.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors reported to the caller."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access denied. Please login to continue."


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied. Admin privileges required."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str, data: Any = None, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": False, "message": message, "data": data},
        headers=headers,
    )


def format_validation_error(exc: RequestValidationError) -> str:
    """Describe the first pydantic error as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return "Validation error"
    first = errors[0]
    # Custom validators raise ValueError; their message is already user-facing
    if first.get("type") == "value_error" and first.get("ctx", {}).get("error"):
        return str(first["ctx"]["error"])
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return error_response(exc.status_code, exc.message, exc.data, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, format_validation_error(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    data = {"error": str(exc)} if settings.is_development else None
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", data)


def add_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-producing handlers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
