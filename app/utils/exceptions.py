"""
Application error taxonomy and the handlers that turn every failure into the
`{success: false, message}` envelope.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed, missing or out-of-range input."""
    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, {"errors": errors} if errors else None)
        self.errors = errors or []


class ExpiredError(ValidationError):
    """A one-time code that is missing or past its expiry."""
    def __init__(self, message: str = "Invalid or expired OTP"):
        super().__init__(message)


class ConflictError(AppError):
    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, status.HTTP_409_CONFLICT)


class AuthError(AppError):
    """Bad credentials, invalid/expired token or missing rights."""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class InternalError(AppError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_envelope(message: str, errors: Optional[List[Dict[str, str]]] = None) -> dict:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return content


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, getattr(exc, "errors", None)),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/path validation failures become 400 with field-level messages"""
    errors = []
    for error in exc.errors():
        # loc is e.g. ("body", "regularPrice"); drop the location prefix
        field_path = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        errors.append({
            "field": ".".join(field_path) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope("Validation failed", errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route Not Found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the cause server-side, never leak it to the client"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
