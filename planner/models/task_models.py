"""
Pydantic models for task-related requests and responses.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


VALID_PRIORITIES = [p.value for p in Priority]

# Public sort names accepted by GET /api/tasks
TASK_SORT_FIELDS = ["created_at", "updated_at", "title", "completed", "priority", "due_date"]


def validate_iso_date(value: Optional[str]) -> Optional[str]:
    """Accept ISO-8601 dates or datetimes (trailing 'Z' allowed); return the input unchanged."""
    if value is None:
        return value
    candidate = value.strip()
    if candidate.endswith('Z'):
        candidate = candidate[:-1] + '+00:00'
    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        raise ValueError(
            f"Invalid date '{value}'. Must be ISO 8601 format "
            f"(e.g., '2024-01-01' or '2024-01-01T00:00:00Z')"
        )
    return value


class TaskCreate(BaseModel):
    """Request model for creating a task."""
    title: str = Field(..., description="Task title", min_length=1, max_length=255)
    description: Optional[str] = Field(None, description="Optional description", max_length=1000)
    priority: Priority = Field(Priority.MEDIUM, description="Task priority: low, medium, or high")
    due_date: Optional[str] = Field(None, description="Optional due date (ISO 8601)")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title cannot be empty or contain only whitespace")
        return v

    @field_validator('priority', mode='before')
    @classmethod
    def default_priority(cls, v):
        return Priority.MEDIUM if v is None else v

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v: Optional[str]) -> Optional[str]:
        return validate_iso_date(v)


class TaskUpdate(BaseModel):
    """
    Request model for updating a task.

    Only fields present in the request body are applied; description and
    due_date may be sent as null to clear them.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date: Optional[str] = None

    @field_validator('title', 'completed', 'priority')
    @classmethod
    def reject_null(cls, v, info):
        """Only description and due_date can be cleared."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if info.field_name == 'title' and not v.strip():
            raise ValueError("Title cannot be empty or contain only whitespace")
        return v

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v: Optional[str]) -> Optional[str]:
        return validate_iso_date(v)

    def changes(self) -> dict:
        """Fields explicitly supplied by the caller, with enums as plain values."""
        return self.model_dump(exclude_unset=True, mode="json")


class TaskFilters(BaseModel):
    """Filters for listing and counting tasks. All are optional and ANDed."""
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date_from: Optional[str] = None
    due_date_to: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None

    @field_validator('due_date_from', 'due_date_to')
    @classmethod
    def validate_due_dates(cls, v: Optional[str]) -> Optional[str]:
        return validate_iso_date(v)


class TaskResponse(BaseModel):
    """Task response model."""
    model_config = ConfigDict(use_enum_values=True)

    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    completed: bool
    priority: Priority
    due_date: Optional[str] = None
    created_at: str
    updated_at: str


class TaskStats(BaseModel):
    total: int
    completed: int
    pending: int
    high_priority: int
    overdue: int
