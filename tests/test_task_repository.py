"""
Tests for TaskRepository against a real SQLite database.
"""
import uuid
from datetime import datetime

import pytest

from planner.exceptions import ValidationError
from planner.models.task_models import Priority, TaskFilters


def _is_iso(value: str) -> bool:
    datetime.fromisoformat(value)
    return True


class TestCreateAndGet:
    """Test create and get_by_id."""

    def test_create_then_get_round_trip(self, tasks, owner):
        created = tasks.create(
            owner["id"],
            title="Write report",
            description="Quarterly numbers",
            priority="high",
            due_date="2030-01-15",
        )
        fetched = tasks.get_by_id(owner["id"], created["id"])

        assert fetched == created
        assert uuid.UUID(created["id"]).version == 4
        assert _is_iso(created["created_at"])
        assert created["created_at"] == created["updated_at"]
        assert created["completed"] is False

    def test_defaults(self, tasks, owner):
        created = tasks.create(owner["id"], title="Minimal")
        assert created["priority"] == "medium"
        assert created["description"] is None
        assert created["due_date"] is None

    def test_unknown_owner_is_validation_error(self, tasks):
        with pytest.raises(ValidationError):
            tasks.create("no-such-user", title="Orphan")

    def test_other_owner_cannot_read(self, tasks, owner, other_owner):
        created = tasks.create(owner["id"], title="Private")
        assert tasks.get_by_id(other_owner["id"], created["id"]) is None

    def test_missing_task(self, tasks, owner):
        assert tasks.get_by_id(owner["id"], str(uuid.uuid4())) is None


class TestListAndCount:
    """Test filtered, sorted, paginated listing."""

    @pytest.fixture
    def seeded(self, tasks, owner, other_owner):
        a = tasks.create(owner["id"], title="Alpha", priority="low", due_date="2030-01-01")
        b = tasks.create(owner["id"], title="Bravo", priority="high", due_date="2030-02-01")
        c = tasks.create(owner["id"], title="Charlie", priority="medium", due_date="2030-03-01")
        tasks.toggle(b["id"], owner["id"])
        tasks.create(other_owner["id"], title="Not mine", priority="high")
        return a, b, c

    def test_list_is_owner_scoped(self, tasks, owner, seeded):
        titles = {task["title"] for task in tasks.list(owner["id"])}
        assert titles == {"Alpha", "Bravo", "Charlie"}
        assert tasks.count(owner["id"]) == 3

    def test_completed_filter(self, tasks, owner, seeded):
        completed = tasks.list(owner["id"], TaskFilters(completed=True))
        assert [task["title"] for task in completed] == ["Bravo"]
        assert all(task["completed"] for task in completed)

        pending = tasks.list(owner["id"], TaskFilters(completed=False))
        assert all(not task["completed"] for task in pending)
        assert tasks.count(owner["id"], TaskFilters(completed=False)) == 2

    def test_priority_filter(self, tasks, owner, seeded):
        high = tasks.list(owner["id"], TaskFilters(priority=Priority.HIGH))
        assert [task["title"] for task in high] == ["Bravo"]

    def test_due_date_range(self, tasks, owner, seeded):
        result = tasks.list(owner["id"], TaskFilters(due_date_from="2030-01-15", due_date_to="2030-02-15"))
        assert [task["title"] for task in result] == ["Bravo"]

    def test_sort_by_title_desc(self, tasks, owner, seeded):
        result = tasks.list(owner["id"], TaskFilters(sort_by="title", sort_order="desc"))
        assert [task["title"] for task in result] == ["Charlie", "Bravo", "Alpha"]

    def test_sort_by_priority_uses_rank(self, tasks, owner, seeded):
        result = tasks.list(owner["id"], TaskFilters(sort_by="priority", sort_order="asc"))
        assert [task["priority"] for task in result] == ["low", "medium", "high"]

    def test_unknown_sort_field_is_harmless(self, tasks, owner, seeded):
        result = tasks.list(owner["id"], TaskFilters(sort_by="title; DROP TABLE tasks"))
        assert len(result) == 3
        assert tasks.count(owner["id"]) == 3

    def test_pagination_window(self, tasks, owner, seeded):
        page_one = tasks.list(owner["id"], TaskFilters(sort_by="title", sort_order="asc", page=1, limit=2))
        page_two = tasks.list(owner["id"], TaskFilters(sort_by="title", sort_order="asc", page=2, limit=2))
        assert [task["title"] for task in page_one] == ["Alpha", "Bravo"]
        assert [task["title"] for task in page_two] == ["Charlie"]


class TestUpdateToggleDelete:
    """Test write operations."""

    def test_update_fields(self, tasks, owner):
        created = tasks.create(owner["id"], title="Old")
        updated = tasks.update(created["id"], owner["id"], {"title": "New", "priority": "high", "completed": True})
        assert updated["title"] == "New"
        assert updated["priority"] == "high"
        assert updated["completed"] is True
        assert updated["updated_at"] >= created["updated_at"]

    def test_update_clears_nullable_fields(self, tasks, owner):
        created = tasks.create(owner["id"], title="Dated", description="d", due_date="2030-01-01")
        updated = tasks.update(created["id"], owner["id"], {"description": None, "due_date": None})
        assert updated["description"] is None
        assert updated["due_date"] is None

    def test_empty_update_returns_unchanged(self, tasks, owner):
        created = tasks.create(owner["id"], title="Same")
        result = tasks.update(created["id"], owner["id"], {})
        assert result == created
        assert result["updated_at"] == created["updated_at"]

    def test_update_not_owned_returns_none(self, tasks, owner, other_owner):
        created = tasks.create(owner["id"], title="Mine")
        assert tasks.update(created["id"], other_owner["id"], {"title": "Stolen"}) is None
        assert tasks.get_by_id(owner["id"], created["id"])["title"] == "Mine"

    def test_update_rejects_unknown_column(self, tasks, owner):
        created = tasks.create(owner["id"], title="Mine")
        with pytest.raises(ValueError):
            tasks.update(created["id"], owner["id"], {"owner_id": "someone-else"})

    def test_toggle_flips_twice(self, tasks, owner):
        created = tasks.create(owner["id"], title="Flip")
        assert tasks.toggle(created["id"], owner["id"])["completed"] is True
        assert tasks.toggle(created["id"], owner["id"])["completed"] is False

    def test_toggle_missing_returns_none(self, tasks, owner):
        assert tasks.toggle(str(uuid.uuid4()), owner["id"]) is None

    def test_delete(self, tasks, owner):
        created = tasks.create(owner["id"], title="Gone")
        assert tasks.delete(created["id"], owner["id"]) is True
        assert tasks.get_by_id(owner["id"], created["id"]) is None

    def test_delete_missing_returns_false(self, tasks, owner):
        assert tasks.delete(str(uuid.uuid4()), owner["id"]) is False

    def test_delete_not_owned_returns_false(self, tasks, owner, other_owner):
        created = tasks.create(owner["id"], title="Mine")
        assert tasks.delete(created["id"], other_owner["id"]) is False

    def test_deleting_user_cascades(self, tasks, users, owner):
        tasks.create(owner["id"], title="Cascade")
        users.delete(owner["id"])
        assert tasks.count(owner["id"]) == 0
