"""
Exception handlers for the application.

Every error leaves the service in the response envelope:
{"success": false, "error": ..., "message": ..., "request_id": ...}
"""
import sqlite3
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from planner.exceptions import ServiceError, to_http_exception
from planner.monitoring import get_request_id

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    error: str,
    message: str,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any
) -> JSONResponse:
    content = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": get_request_id() or '-',
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map domain errors to their HTTP status."""
    http_exc = to_http_exception(exc)
    log = logger.error if http_exc.status_code >= 500 else logger.info
    log(
        f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}",
        exc_info=http_exc.status_code >= 500,
    )
    return error_response(
        http_exc.status_code,
        http_exc.detail["error"],
        http_exc.detail["message"],
        headers=http_exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        error = str(exc.detail.get("error", "HTTP error"))
        message = str(exc.detail.get("message", error))
    else:
        error = "HTTP error"
        message = str(exc.detail)
    return error_response(exc.status_code, error, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors with clear messages.
    """
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    logger.warning(f"Validation error in {request.method} {request.url.path}: {', '.join(errors)}")
    return error_response(
        422,
        "Validation error",
        "One or more fields failed validation",
        errors=errors,
    )


async def sqlite_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    """Database failures are logged in full and reported opaquely."""
    logger.error(
        f"Database error in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_type": type(exc).__name__},
    )
    return error_response(
        500,
        "Database error",
        "A database operation failed. Please try again or contact support if the issue persists.",
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.
    """
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={"exception_type": type(exc).__name__},
    )
    return error_response(
        500,
        "Internal server error",
        "An unexpected error occurred. Please try again or contact support if the issue persists.",
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with the FastAPI app.
    """
    app.add_exception_handler(ServiceError, service_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
