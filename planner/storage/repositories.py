"""
Repository pattern implementation for planner data access.

Repositories wrap PlannerDatabase and expose owner-scoped task operations and
user lookups. Every task read and write carries an owner_id predicate, so a
task owned by someone else is indistinguishable from a missing one.
"""
import sqlite3
import uuid
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from planner.exceptions import translate_integrity_error
from planner.models.task_models import Priority, TaskFilters
from planner.storage.query_builder import QueryBuilder, build_update

if TYPE_CHECKING:
    from planner.database import PlannerDatabase

PRIORITY_RANK = (
    "CASE priority WHEN 'low' THEN 1 WHEN 'medium' THEN 2 WHEN 'high' THEN 3 ELSE 0 END"
)

# Public sort name -> SQL expression. Order matters: the first is the fallback.
TASK_SORT_COLUMNS = {
    "created_at": "created_at",
    "updated_at": "updated_at",
    "title": "title",
    "completed": "completed",
    "priority": PRIORITY_RANK,
    "due_date": "due_date",
}

TASK_UPDATABLE_COLUMNS = {
    "title": "title",
    "description": "description",
    "completed": "completed",
    "priority": "priority",
    "due_date": "due_date",
}

USER_PROFILE_COLUMNS = {
    "name": "name",
    "picture": "picture",
    "verified": "verified",
    "external_id": "external_id",
}


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


def _row_to_task(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "owner_id": row["owner_id"],
        "title": row["title"],
        "description": row["description"],
        "completed": bool(row["completed"]),
        "priority": row["priority"],
        "due_date": row["due_date"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def _row_to_user(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "external_id": row["external_id"],
        "email": row["email"],
        "name": row["name"],
        "picture": row["picture"],
        "verified": bool(row["verified"]),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


class TaskRepository:
    """Repository for owner-scoped task operations."""

    def __init__(self, db: "PlannerDatabase"):
        self.db = db

    def _filtered_query(self, owner_id: str, filters: Optional[TaskFilters]) -> QueryBuilder:
        """Owner predicate plus the optional filters, shared by list() and count()."""
        filters = filters or TaskFilters()
        priority = filters.priority.value if isinstance(filters.priority, Priority) else filters.priority
        return (
            QueryBuilder("tasks", TASK_SORT_COLUMNS)
            .where("owner_id = ?", owner_id)
            .where_if(filters.completed is not None, "completed = ?", int(bool(filters.completed)))
            .where_if(bool(priority), "priority = ?", priority)
            .where_if(bool(filters.due_date_from), "due_date >= ?", filters.due_date_from)
            .where_if(bool(filters.due_date_to), "due_date <= ?", filters.due_date_to)
        )

    def list(self, owner_id: str, filters: Optional[TaskFilters] = None) -> List[Dict[str, Any]]:
        """
        List tasks owned by owner_id.

        Args:
            owner_id: Owner user ID
            filters: Optional filters, sort and page window. LIMIT/OFFSET are
                applied only when filters.limit is set.

        Returns:
            List of task dictionaries
        """
        filters = filters or TaskFilters()
        query = (
            self._filtered_query(owner_id, filters)
            .order_by(filters.sort_by, filters.sort_order)
            .paginate(filters.page, filters.limit)
        )
        sql, params = query.build_select()
        return [_row_to_task(row) for row in self.db.fetch_all(sql, params)]

    def count(self, owner_id: str, filters: Optional[TaskFilters] = None) -> int:
        """Count tasks matching the same predicate as list(), ignoring sort and paging."""
        sql, params = self._filtered_query(owner_id, filters).build_count()
        row = self.db.fetch_one(sql, params)
        return int(row["count"]) if row else 0

    def get_by_id(self, owner_id: str, task_id: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one(
            "SELECT * FROM tasks WHERE id = ? AND owner_id = ?",
            (task_id, owner_id)
        )
        return _row_to_task(row) if row else None

    def create(
        self,
        owner_id: str,
        title: str,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Insert a task and return the full record without re-reading it.

        Raises:
            ValidationError: If owner_id does not reference an existing user
            ConflictError: On an id collision
        """
        now = utc_now()
        task = {
            "id": str(uuid.uuid4()),
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "completed": False,
            "priority": priority or Priority.MEDIUM.value,
            "due_date": due_date,
            "created_at": now,
            "updated_at": now,
        }
        try:
            self.db.execute(
                """
                INSERT INTO tasks (id, owner_id, title, description, completed, priority,
                                   due_date, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (task["id"], owner_id, title, description, 0, task["priority"],
                 due_date, now, now)
            )
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e, "Task") from e
        return task

    def update(self, task_id: str, owner_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update.

        An empty change set returns the current state and leaves updated_at
        alone. Otherwise the owner-scoped WHERE clause is the ownership check:
        zero affected rows (missing, not owned, or deleted concurrently)
        returns None.
        """
        if not changes:
            return self.get_by_id(owner_id, task_id)

        values = dict(changes)
        if "completed" in values:
            values["completed"] = int(bool(values["completed"]))
        if isinstance(values.get("priority"), Priority):
            values["priority"] = values["priority"].value

        set_clause, params = build_update("tasks", values, TASK_UPDATABLE_COLUMNS)
        try:
            affected = self.db.execute(
                f"UPDATE tasks SET {set_clause}, updated_at = ? WHERE id = ? AND owner_id = ?",
                params + [utc_now(), task_id, owner_id]
            )
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e, "Task") from e
        if affected == 0:
            return None
        return self.get_by_id(owner_id, task_id)

    def toggle(self, task_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        """Flip completed in one statement, then read back the new state."""
        affected = self.db.execute(
            "UPDATE tasks SET completed = NOT completed, updated_at = ? WHERE id = ? AND owner_id = ?",
            (utc_now(), task_id, owner_id)
        )
        if affected == 0:
            return None
        # A concurrent delete between the two statements yields None here too
        return self.get_by_id(owner_id, task_id)

    def delete(self, task_id: str, owner_id: str) -> bool:
        """Delete a task. Returns False when nothing matched."""
        affected = self.db.execute(
            "DELETE FROM tasks WHERE id = ? AND owner_id = ?",
            (task_id, owner_id)
        )
        return affected > 0


class UserRepository:
    """Repository for user records."""

    def __init__(self, db: "PlannerDatabase"):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return _row_to_user(row) if row else None

    def get_by_external_id(self, external_id: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one("SELECT * FROM users WHERE external_id = ?", (external_id,))
        return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        row = self.db.fetch_one("SELECT * FROM users WHERE email = ?", (email,))
        return _row_to_user(row) if row else None

    def create(
        self,
        email: str,
        name: str,
        external_id: Optional[str] = None,
        picture: Optional[str] = None,
        verified: bool = False,
    ) -> Dict[str, Any]:
        """
        Insert a user and return the full record.

        Raises:
            ConflictError: If the email or external_id is already taken
        """
        now = utc_now()
        user = {
            "id": str(uuid.uuid4()),
            "external_id": external_id,
            "email": email,
            "name": name,
            "picture": picture,
            "verified": bool(verified),
            "created_at": now,
            "updated_at": now,
        }
        try:
            self.db.execute(
                """
                INSERT INTO users (id, external_id, email, name, picture, verified, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (user["id"], external_id, email, name, picture, int(bool(verified)), now, now)
            )
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e, "User") from e
        return user

    def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update profile columns (name, picture, verified, external_id).

        Returns:
            The updated user, or None if no such user exists

        Raises:
            ConflictError: If external_id is already linked to another user
        """
        if not changes:
            return self.get_by_id(user_id)

        values = dict(changes)
        if "verified" in values:
            values["verified"] = int(bool(values["verified"]))

        set_clause, params = build_update("users", values, USER_PROFILE_COLUMNS)
        try:
            affected = self.db.execute(
                f"UPDATE users SET {set_clause}, updated_at = ? WHERE id = ?",
                params + [utc_now(), user_id]
            )
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e, "User") from e
        if affected == 0:
            return None
        return self.get_by_id(user_id)

    def delete(self, user_id: str) -> bool:
        """Delete a user; owned tasks go with it through ON DELETE CASCADE."""
        return self.db.execute("DELETE FROM users WHERE id = ?", (user_id,)) > 0
