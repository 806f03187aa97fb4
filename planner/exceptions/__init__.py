"""
Standard exceptions for the planner service.

Services raise these instead of HTTP errors so that the business layer stays
free of framework dependencies. The HTTP layer converts them with
to_http_exception() or through the handlers in planner.exceptions.handlers.
"""
import sqlite3
from typing import Any, Dict, Optional

from fastapi import HTTPException


class ServiceError(Exception):
    """Base class for all planner service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.context = context or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logging and error responses."""
        result: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        if self.context:
            result["context"] = self.context
        if self.original_error is not None:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error),
            }
        return result


class NotFoundError(ServiceError):
    """Entity is absent, or it exists but is not owned by the caller."""

    status_code = 404

    def __init__(
        self,
        resource_type: str,
        resource_id: Any = None,
        message: Optional[str] = None,
        **kwargs: Any,
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        if message is None:
            message = f"{resource_type} not found"
        context = kwargs.pop("context", None) or {}
        context.setdefault("resource_type", resource_type)
        if resource_id is not None:
            context.setdefault("resource_id", str(resource_id))
        super().__init__(message, context=context, **kwargs)


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: Any = None, **kwargs: Any):
        super().__init__("Task", task_id, **kwargs)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: Any = None, **kwargs: Any):
        super().__init__("User", user_id, **kwargs)


class ValidationError(ServiceError):
    """Input rejected by the store (constraint violation) or by a service rule."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ):
        self.field = field
        self.value = value
        context = kwargs.pop("context", None) or {}
        if field is not None:
            context.setdefault("field", field)
        if value is not None:
            context.setdefault("value", value)
        super().__init__(message, context=context, **kwargs)


class ConflictError(ServiceError):
    """Unique-constraint violation, e.g. two logins racing to create a user."""

    status_code = 409


class UnauthorizedError(ServiceError):
    """Missing, invalid or expired credentials, or a deleted subject."""

    status_code = 401


class InvalidTokenError(ServiceError):
    """Session token failed verification. Deliberately carries no detail."""

    status_code = 401

    def __init__(self, message: str = "Invalid token", **kwargs: Any):
        super().__init__(message, **kwargs)


class ConfigurationError(ServiceError):
    """Required configuration is missing. Fatal at startup."""

    status_code = 500


def translate_integrity_error(exc: sqlite3.IntegrityError, resource: str = "Resource") -> ServiceError:
    """
    Map a SQLite constraint violation to the service taxonomy.

    UNIQUE -> ConflictError, FOREIGN KEY -> ValidationError,
    any other constraint (CHECK, NOT NULL) -> ValidationError.
    """
    error_msg = str(exc).lower()
    if "unique constraint" in error_msg:
        return ConflictError(
            f"{resource} already exists with that identifier",
            original_error=exc,
        )
    if "foreign key constraint" in error_msg:
        return ValidationError(
            "Invalid reference to related resource",
            original_error=exc,
        )
    return ValidationError("Database constraint violation", original_error=exc)


def _declared_status_code(exc: ServiceError) -> Optional[int]:
    """Status code declared by the exception's own class hierarchy, below ServiceError."""
    for klass in type(exc).__mro__:
        if klass is ServiceError:
            return None
        if "status_code" in vars(klass):
            return klass.status_code
    return None


def to_http_exception(
    exc: ServiceError,
    include_context: bool = False,
    default_status_code: int = 500,
) -> HTTPException:
    """Convert a ServiceError into a FastAPI HTTPException."""
    status_code = _declared_status_code(exc) or default_status_code

    detail: Dict[str, Any] = {"error": type(exc).__name__, "message": exc.message}
    if exc.request_id:
        detail["request_id"] = exc.request_id
    if include_context and exc.context:
        detail["context"] = exc.context

    headers = None
    if status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


__all__ = [
    "ServiceError",
    "NotFoundError",
    "TaskNotFoundError",
    "UserNotFoundError",
    "ValidationError",
    "ConflictError",
    "UnauthorizedError",
    "InvalidTokenError",
    "ConfigurationError",
    "translate_integrity_error",
    "to_http_exception",
]
