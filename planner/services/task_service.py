"""
Task service - business logic for task operations.
This layer contains no HTTP framework dependencies.
Every operation is scoped to the owner passed in by the caller.
"""
import logging
from datetime import datetime, UTC
from typing import Any, Dict, Mapping, Optional

from planner.database import PlannerDatabase
from planner.exceptions import TaskNotFoundError
from planner.models.task_models import Priority, TaskCreate, TaskFilters, TaskUpdate
from planner.storage.repositories import TaskRepository
from planner.utils.pagination import create_paginated_response, normalize_pagination_query

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task business logic."""

    def __init__(self, db: PlannerDatabase):
        """Initialize task service with database dependency."""
        self.db = db
        self.tasks = TaskRepository(db)

    def create_task(self, owner_id: str, task_data: TaskCreate) -> Dict[str, Any]:
        """
        Create a task for owner_id.

        Args:
            owner_id: Owner user ID
            task_data: Validated task creation data

        Returns:
            Created task data as dictionary

        Raises:
            ValidationError: If owner_id does not reference an existing user
        """
        priority = task_data.priority.value if isinstance(task_data.priority, Priority) else task_data.priority
        task = self.tasks.create(
            owner_id,
            title=task_data.title,
            description=task_data.description,
            priority=priority,
            due_date=task_data.due_date,
        )
        logger.info(f"Created task {task['id']} for user {owner_id}")
        return task

    def get_task(self, owner_id: str, task_id: str) -> Dict[str, Any]:
        """
        Get a task by ID.

        Raises:
            TaskNotFoundError: If the task does not exist or belongs to someone else
        """
        task = self.tasks.get_by_id(owner_id, task_id)
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    def list_tasks(self, owner_id: str, query: Mapping[str, Any], filters: Optional[TaskFilters] = None) -> Dict[str, Any]:
        """
        List tasks with normalized paging and sorting.

        Args:
            owner_id: Owner user ID
            query: Raw paging/sorting input (page, limit, sort_by, sort_order)
            filters: Optional completed/priority/due date filters

        Returns:
            {"items": [...], "pagination": PaginationMeta}
        """
        options = normalize_pagination_query(query)
        base = filters.model_dump() if filters else {}
        base.update(
            page=options.page,
            limit=options.limit,
            sort_by=options.sort_by,
            sort_order=options.sort_order,
        )
        effective = TaskFilters(**base)

        items = self.tasks.list(owner_id, effective)
        total = self.tasks.count(owner_id, effective)
        return create_paginated_response(items, options, total)

    def update_task(self, owner_id: str, task_id: str, task_data: TaskUpdate) -> Dict[str, Any]:
        """
        Apply the fields present in task_data.

        Raises:
            TaskNotFoundError: If nothing matched the id and owner
        """
        task = self.tasks.update(task_id, owner_id, task_data.changes())
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    def toggle_task(self, owner_id: str, task_id: str) -> Dict[str, Any]:
        task = self.tasks.toggle(task_id, owner_id)
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    def delete_task(self, owner_id: str, task_id: str) -> None:
        if not self.tasks.delete(task_id, owner_id):
            raise TaskNotFoundError(task_id)
        logger.info(f"Deleted task {task_id} for user {owner_id}")

    def get_stats(self, owner_id: str) -> Dict[str, int]:
        """
        Summary counts for the owner's tasks.

        Overdue means incomplete with a due date at or before now (UTC).
        """
        total = self.tasks.count(owner_id)
        completed = self.tasks.count(owner_id, TaskFilters(completed=True))
        high_priority = self.tasks.count(owner_id, TaskFilters(priority=Priority.HIGH))
        overdue = self.tasks.count(
            owner_id,
            TaskFilters(completed=False, due_date_to=datetime.now(UTC).isoformat())
        )
        return {
            "total": total,
            "completed": completed,
            "pending": total - completed,
            "high_priority": high_priority,
            "overdue": overdue,
        }
