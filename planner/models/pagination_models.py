"""
Pydantic models for pagination and the response envelope.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationOptions(BaseModel):
    """Normalized, bounded paging and sorting parameters."""
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1)
    sort_by: Optional[str] = None
    sort_order: str = "asc"
    max_limit: int = 100


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: Optional[int] = None
    prev_page: Optional[int] = None


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every endpoint."""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None


def envelope(data: Any = None, message: Optional[str] = None) -> dict:
    """Build a success envelope, leaving out empty optional keys."""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body
