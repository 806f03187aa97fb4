"""
Pydantic models for the planner API.
"""
from planner.models.pagination_models import (
    ApiResponse,
    PaginationMeta,
    PaginationOptions,
)
from planner.models.task_models import (
    Priority,
    TaskCreate,
    TaskFilters,
    TaskResponse,
    TaskStats,
    TaskUpdate,
)
from planner.models.user_models import ExternalProfile, GoogleAuthRequest, UserResponse

__all__ = [
    "ApiResponse",
    "PaginationMeta",
    "PaginationOptions",
    "Priority",
    "TaskCreate",
    "TaskFilters",
    "TaskResponse",
    "TaskStats",
    "TaskUpdate",
    "ExternalProfile",
    "GoogleAuthRequest",
    "UserResponse",
]
