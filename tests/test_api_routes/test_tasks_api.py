"""
Tests for task routes through the full application.
"""
import uuid

import pytest

from planner.storage.repositories import UserRepository


@pytest.fixture
def other_headers(app):
    """Auth headers for a second user."""
    other = UserRepository(app.state.services.db).create(
        email="bob@example.com", name="Bob", external_id="google-bob"
    )
    token = app.state.services.token_service.issue(other)
    return {"Authorization": f"Bearer {token}"}


def _create(client, headers, **fields):
    payload = {"title": "Task"}
    payload.update(fields)
    response = client.post("/api/tasks", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateTask:
    """Tests for POST /api/tasks."""

    def test_create(self, client, auth_headers, app_user):
        response = client.post(
            "/api/tasks",
            json={"title": "Buy milk", "priority": "high", "due_date": "2030-05-01T09:00:00Z"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Task created successfully"
        task = body["data"]
        assert task["title"] == "Buy milk"
        assert task["priority"] == "high"
        assert task["completed"] is False
        assert task["owner_id"] == app_user["id"]
        assert task["due_date"] == "2030-05-01T09:00:00Z"

    def test_requires_auth(self, client):
        assert client.post("/api/tasks", json={"title": "x"}).status_code == 401

    @pytest.mark.parametrize("payload", [
        {},
        {"title": ""},
        {"title": "   "},
        {"title": "x" * 256},
        {"title": "ok", "description": "d" * 1001},
        {"title": "ok", "priority": "urgent"},
        {"title": "ok", "due_date": "next tuesday"},
    ])
    def test_invalid_payloads(self, client, auth_headers, payload):
        response = client.post("/api/tasks", json=payload, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"


class TestGetTask:
    """Tests for GET /api/tasks/{task_id}."""

    def test_get_own_task(self, client, auth_headers):
        created = _create(client, auth_headers, title="Mine")
        response = client.get(f"/api/tasks/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"] == created

    def test_other_users_task_is_not_found(self, client, auth_headers, other_headers):
        created = _create(client, auth_headers, title="Private")
        response = client.get(f"/api/tasks/{created['id']}", headers=other_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Task not found"

    def test_missing_task(self, client, auth_headers):
        assert client.get(f"/api/tasks/{uuid.uuid4()}", headers=auth_headers).status_code == 404

    def test_non_uuid_id(self, client, auth_headers):
        assert client.get("/api/tasks/not-a-uuid", headers=auth_headers).status_code == 422


class TestListTasks:
    """Tests for GET /api/tasks."""

    def test_list_paginates_newest_first(self, client, auth_headers, other_headers):
        for index in range(3):
            _create(client, auth_headers, title=f"Task {index}")
        _create(client, other_headers, title="Bob's")

        response = client.get("/api/tasks?limit=2", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [task["title"] for task in data["items"]] == ["Task 2", "Task 1"]
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["total_pages"] == 2
        assert data["pagination"]["has_next_page"] is True
        assert data["pagination"]["next_page"] == 2

    def test_completed_filter(self, client, auth_headers):
        done = _create(client, auth_headers, title="Done")
        _create(client, auth_headers, title="Open")
        client.patch(f"/api/tasks/{done['id']}/toggle", headers=auth_headers)

        items = client.get("/api/tasks?completed=true", headers=auth_headers).json()["data"]["items"]

        assert [task["title"] for task in items] == ["Done"]
        assert all(task["completed"] for task in items)

    def test_sort_by_title_ascending(self, client, auth_headers):
        for title in ("b", "c", "a"):
            _create(client, auth_headers, title=title)
        response = client.get("/api/tasks?sort_by=title&sort_order=asc", headers=auth_headers)
        assert [task["title"] for task in response.json()["data"]["items"]] == ["a", "b", "c"]

    def test_bad_paging_values_fall_back(self, client, auth_headers):
        _create(client, auth_headers)
        pagination = client.get("/api/tasks?page=abc&limit=-3", headers=auth_headers).json()["data"]["pagination"]
        assert pagination["page"] == 1
        assert pagination["limit"] == 20

    def test_limit_capped(self, client, auth_headers):
        pagination = client.get("/api/tasks?limit=1000", headers=auth_headers).json()["data"]["pagination"]
        assert pagination["limit"] == 100

    def test_invalid_date_filter(self, client, auth_headers):
        response = client.get("/api/tasks?due_date_from=yesterday", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_invalid_priority_filter(self, client, auth_headers):
        assert client.get("/api/tasks?priority=urgent", headers=auth_headers).status_code == 422


class TestUpdateTask:
    """Tests for PUT /api/tasks/{task_id}."""

    def test_partial_update(self, client, auth_headers):
        created = _create(client, auth_headers, title="Old", description="keep me")
        response = client.put(f"/api/tasks/{created['id']}", json={"title": "New"}, headers=auth_headers)

        assert response.status_code == 200
        task = response.json()["data"]
        assert task["title"] == "New"
        assert task["description"] == "keep me"

    def test_clear_due_date(self, client, auth_headers):
        created = _create(client, auth_headers, due_date="2030-01-01")
        task = client.put(f"/api/tasks/{created['id']}", json={"due_date": None}, headers=auth_headers).json()["data"]
        assert task["due_date"] is None

    def test_empty_body_rejected(self, client, auth_headers):
        created = _create(client, auth_headers)
        response = client.put(f"/api/tasks/{created['id']}", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_null_title_rejected(self, client, auth_headers):
        created = _create(client, auth_headers)
        response = client.put(f"/api/tasks/{created['id']}", json={"title": None}, headers=auth_headers)
        assert response.status_code == 422

    def test_other_users_task(self, client, auth_headers, other_headers):
        created = _create(client, auth_headers)
        response = client.put(f"/api/tasks/{created['id']}", json={"title": "Mine now"}, headers=other_headers)
        assert response.status_code == 404


class TestToggleTask:
    """Tests for PATCH /api/tasks/{task_id}/toggle."""

    def test_toggle_round_trip(self, client, auth_headers):
        created = _create(client, auth_headers)

        first = client.patch(f"/api/tasks/{created['id']}/toggle", headers=auth_headers).json()
        second = client.patch(f"/api/tasks/{created['id']}/toggle", headers=auth_headers).json()

        assert first["data"]["completed"] is True
        assert first["message"] == "Task marked as completed"
        assert second["data"]["completed"] is False
        assert second["message"] == "Task marked as incomplete"

    def test_toggle_missing(self, client, auth_headers):
        assert client.patch(f"/api/tasks/{uuid.uuid4()}/toggle", headers=auth_headers).status_code == 404


class TestDeleteTask:
    """Tests for DELETE /api/tasks/{task_id}."""

    def test_delete(self, client, auth_headers):
        created = _create(client, auth_headers)
        response = client.delete(f"/api/tasks/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Task deleted successfully"}
        assert client.get(f"/api/tasks/{created['id']}", headers=auth_headers).status_code == 404

    def test_delete_missing(self, client, auth_headers):
        assert client.delete(f"/api/tasks/{uuid.uuid4()}", headers=auth_headers).status_code == 404


class TestStats:
    """Tests for GET /api/tasks/stats/summary."""

    def test_summary(self, client, auth_headers):
        done = _create(client, auth_headers, priority="high")
        _create(client, auth_headers, due_date="2001-01-01")
        client.patch(f"/api/tasks/{done['id']}/toggle", headers=auth_headers)

        response = client.get("/api/tasks/stats/summary", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total": 2,
            "completed": 1,
            "pending": 1,
            "high_priority": 1,
            "overdue": 1,
        }
        assert set(response.json()) == {"success", "data"}


class TestAuthGate:
    """Tokens for deleted users stop working."""

    def test_deleted_user_token_rejected(self, client, app, auth_headers, app_user):
        UserRepository(app.state.services.db).delete(app_user["id"])
        assert client.get("/api/tasks/stats/summary", headers=auth_headers).status_code == 401
