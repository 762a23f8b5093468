"""
Global exception handlers and custom exception classes.

Every error leaves the API in the same envelope:
``{"success": false, "error": {"message": ..., "details": ...}}``.
"""
import logging
from typing import Any, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Set up logging
logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Base exception class for application-specific exceptions.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, details: Any = None):
        self.detail = detail or self.default_detail
        self.details = details
        super().__init__(self.detail)


class ResourceNotFoundException(AppException):
    """Exception raised when an entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class UnauthorizedException(AppException):
    """Exception raised when credentials are missing, invalid or expired."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class PermissionDeniedException(AppException):
    """Exception raised when the caller may not act on a resource."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Permission denied"


class ConflictException(AppException):
    """Exception raised when the request conflicts with current state."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict with current state"


class ValidationException(AppException):
    """Exception raised for malformed or semantically invalid input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation error"


def error_body(message: str, details: Any = None) -> dict:
    error = {"message": message}
    if details is not None:
        error["details"] = jsonable_encoder(details)
    return {"success": False, "error": error}


async def app_exception_handler(request: Request, exc: AppException):
    """
    Handler for application-specific exceptions.

    Args:
        request: The request that caused the exception
        exc: The exception instance

    Returns:
        JSONResponse: Standardized error response
    """
    if exc.status_code >= 500:
        logger.error(f"Application error on {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, exc.details),
        headers=headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation exceptions.

    Args:
        request: The request that caused the exception
        exc: The validation exception instance

    Returns:
        JSONResponse: Standardized error response with validation details
    """
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", exc.errors()),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handler for framework HTTP errors such as unknown routes."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Not found - {request.url.path}"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Handler for anything the services did not translate."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    settings = getattr(request.app.state, "settings", None)
    details = repr(exc) if settings is not None and settings.debug else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", details),
    )


# Register exception handlers with FastAPI app
def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
