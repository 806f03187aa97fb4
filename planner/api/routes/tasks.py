"""
Task-related API routes.
Thin HTTP layer that delegates to service layer.
"""
import logging
from typing import Any, Dict, Optional
from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends, Path, Query

from planner.auth.dependencies import get_current_user
from planner.dependencies.services import get_task_service
from planner.exceptions import ValidationError
from planner.models.pagination_models import ApiResponse, envelope
from planner.models.task_models import Priority, TaskCreate, TaskFilters, TaskResponse, TaskStats, TaskUpdate
from planner.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def task_body(task: Dict[str, Any]) -> Dict[str, Any]:
    return TaskResponse(**task).model_dump()


@router.get("")
def list_tasks(
    completed: Optional[bool] = Query(None, description="Filter by completion state"),
    priority: Optional[Priority] = Query(None, description="Filter by priority"),
    due_date_from: Optional[str] = Query(None, description="Due on or after (ISO 8601)"),
    due_date_to: Optional[str] = Query(None, description="Due on or before (ISO 8601)"),
    page: Optional[str] = Query(None, description="Page number, 1-based"),
    limit: Optional[str] = Query(None, description="Page size (max 100)"),
    sort_by: str = Query("created_at", description="created_at, updated_at, title, completed, priority or due_date"),
    sort_order: str = Query("desc", description="asc or desc"),
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """List the current user's tasks with filters, sorting and pagination."""
    try:
        filters = TaskFilters(
            completed=completed,
            priority=priority,
            due_date_from=due_date_from,
            due_date_to=due_date_to,
        )
    except pydantic.ValidationError as e:
        raise ValidationError(e.errors()[0]["msg"]) from e

    result = task_service.list_tasks(
        user["id"],
        {"page": page, "limit": limit, "sort_by": sort_by, "sort_order": sort_order},
        filters,
    )
    return envelope({
        "items": [task_body(task) for task in result["items"]],
        "pagination": result["pagination"].model_dump(),
    })


@router.get("/stats/summary", response_model=ApiResponse[TaskStats], response_model_exclude_none=True)
def task_stats(
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    return envelope(task_service.get_stats(user["id"]))


@router.get("/{task_id}")
def get_task(
    task_id: UUID = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    return envelope(task_body(task_service.get_task(user["id"], str(task_id))))


@router.post("", status_code=201)
def create_task(
    task: TaskCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Create a new task owned by the current user."""
    created = task_service.create_task(user["id"], task)
    return envelope(task_body(created), message="Task created successfully")


@router.put("/{task_id}")
def update_task(
    task: TaskUpdate,
    task_id: UUID = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Update the fields present in the body; at least one is required."""
    if not task.changes():
        raise ValidationError("At least one field must be provided for update")
    updated = task_service.update_task(user["id"], str(task_id), task)
    return envelope(task_body(updated), message="Task updated successfully")


@router.patch("/{task_id}/toggle")
def toggle_task(
    task_id: UUID = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    toggled = task_service.toggle_task(user["id"], str(task_id))
    state = "completed" if toggled["completed"] else "incomplete"
    return envelope(task_body(toggled), message=f"Task marked as {state}")


@router.delete("/{task_id}")
def delete_task(
    task_id: UUID = Path(..., description="Task ID"),
    user: Dict[str, Any] = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task_service.delete_task(user["id"], str(task_id))
    return envelope(message="Task deleted successfully")
