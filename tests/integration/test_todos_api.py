"""
Functional tests for personal todo endpoints.
"""

import pytest

MISSING_NOTE_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture
def make_todo(client):
    def _make(headers, **fields):
        body = {"title": "Buy milk"}
        body.update(fields)
        response = client.post("/api/todos", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


class TestTodoCrud:
    def test_create_todo_defaults(self, client, owner):
        response = client.post("/api/todos", json={"title": " Buy milk "}, headers=owner["headers"])

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Todo created successfully"
        todo = body["data"]
        assert todo["title"] == "Buy milk"
        assert todo["priority"] == "medium"
        assert todo["status"] == "not_started"
        assert todo["completed"] is False
        assert todo["completed_at"] is None
        assert todo["user_id"] == owner["user"]["id"]

    def test_creating_a_completed_todo_stamps_completion(self, client, owner, make_todo):
        todo = make_todo(owner["headers"], completed=True)

        assert todo["status"] == "completed"
        assert todo["completed_at"] is not None

    def test_title_is_required(self, client, owner):
        response = client.post("/api/todos", json={"title": ""}, headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Request validation failed"

    def test_invalid_priority(self, client, owner):
        response = client.post(
            "/api/todos", json={"title": "X", "priority": "urgent"}, headers=owner["headers"]
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid priority: urgent"

    def test_update_and_delete(self, client, owner, make_todo):
        todo = make_todo(owner["headers"])
        url = f"/api/todos/{todo['id']}"

        updated = client.put(url, json={"title": "Buy oat milk", "priority": "高"}, headers=owner["headers"])
        assert updated.status_code == 200
        assert updated.json()["data"]["title"] == "Buy oat milk"
        assert updated.json()["data"]["priority"] == "high"

        assert client.delete(url, headers=owner["headers"]).status_code == 200
        missing = client.get(url, headers=owner["headers"])
        assert missing.status_code == 404
        assert missing.json()["message"] == "Todo not found"

    def test_empty_update_returns_todo_unchanged(self, client, owner, make_todo):
        todo = make_todo(owner["headers"])

        response = client.put(f"/api/todos/{todo['id']}", json={}, headers=owner["headers"])

        assert response.status_code == 200
        assert response.json()["data"]["updated_at"] == todo["updated_at"]

    def test_todos_are_private(self, client, owner, outsider, make_todo):
        todo = make_todo(owner["headers"])

        response = client.get(f"/api/todos/{todo['id']}", headers=outsider["headers"])

        assert response.status_code == 404


class TestNoteLink:
    @pytest.fixture
    def note_of(self, client):
        def _make(user):
            response = client.post("/api/notes", json={"title": "Groceries"}, headers=user["headers"])
            assert response.status_code == 201, response.text
            return response.json()["data"]

        return _make

    def test_todo_links_own_note(self, client, owner, note_of):
        note = note_of(owner)

        response = client.post(
            "/api/todos", json={"title": "Buy milk", "noteId": note["id"]}, headers=owner["headers"]
        )

        assert response.status_code == 201
        assert response.json()["data"]["note_id"] == note["id"]

    def test_unknown_note_is_not_found(self, client, owner):
        response = client.post(
            "/api/todos", json={"title": "Buy milk", "noteId": MISSING_NOTE_ID}, headers=owner["headers"]
        )

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Note not found"}

    def test_other_users_note_is_not_found(self, client, owner, outsider, note_of):
        note = note_of(outsider)

        response = client.post(
            "/api/todos", json={"title": "Buy milk", "noteId": note["id"]}, headers=owner["headers"]
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Note not found"

    def test_update_checks_note(self, client, owner, make_todo):
        todo = make_todo(owner["headers"])

        response = client.put(
            f"/api/todos/{todo['id']}", json={"noteId": MISSING_NOTE_ID}, headers=owner["headers"]
        )

        assert response.status_code == 404
        unchanged = client.get(f"/api/todos/{todo['id']}", headers=owner["headers"]).json()["data"]
        assert unchanged["note_id"] is None

    def test_batch_create_checks_every_note(self, client, owner, note_of):
        note = note_of(owner)

        response = client.post(
            "/api/todos/batch",
            json={"todos": [{"title": "One", "noteId": note["id"]}, {"title": "Two", "noteId": MISSING_NOTE_ID}]},
            headers=owner["headers"],
        )

        assert response.status_code == 404
        listed = client.get("/api/todos", headers=owner["headers"]).json()["data"]
        assert listed["todos"] == []

    def test_batch_update_checks_note(self, client, owner, make_todo):
        todo = make_todo(owner["headers"])

        response = client.patch(
            "/api/todos/batch",
            json={"ids": [todo["id"]], "data": {"noteId": MISSING_NOTE_ID}},
            headers=owner["headers"],
        )

        assert response.status_code == 404


class TestCompletion:
    def test_toggle_flips_completion_and_status(self, client, owner, make_todo):
        todo = make_todo(owner["headers"])
        url = f"/api/todos/{todo['id']}/toggle"

        done = client.patch(url, headers=owner["headers"]).json()["data"]
        assert done["completed"] is True
        assert done["status"] == "completed"
        assert done["completed_at"] is not None

        undone = client.patch(url, headers=owner["headers"]).json()["data"]
        assert undone["completed"] is False
        assert undone["status"] == "not_started"
        assert undone["completed_at"] is None

    def test_toggle_rejects_malformed_id(self, client, owner):
        response = client.patch("/api/todos/not-a-uuid/toggle", headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid todo id"

    def test_setting_status_completed_marks_completed(self, client, owner, make_todo):
        todo = make_todo(owner["headers"])

        response = client.put(
            f"/api/todos/{todo['id']}", json={"status": "completed"}, headers=owner["headers"]
        )

        assert response.json()["data"]["completed"] is True


class TestBatchOperations:
    def test_batch_create(self, client, owner):
        response = client.post(
            "/api/todos/batch",
            json={"todos": [{"title": "One"}, {"title": "Two", "priority": "low"}]},
            headers=owner["headers"],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Created 2 todos"
        assert sorted(t["title"] for t in body["data"]["todos"]) == ["One", "Two"]

    def test_batch_create_requires_items(self, client, owner):
        response = client.post("/api/todos/batch", json={"todos": []}, headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "At least one todo is required"

    def test_batch_update_only_touches_own_todos(self, client, owner, outsider, make_todo):
        mine = [make_todo(owner["headers"], title=f"Mine {i}") for i in range(2)]
        theirs = make_todo(outsider["headers"], title="Theirs")

        response = client.patch(
            "/api/todos/batch",
            json={"ids": [t["id"] for t in mine] + [theirs["id"]], "data": {"status": "in_progress"}},
            headers=owner["headers"],
        )

        assert response.status_code == 200
        updated = response.json()["data"]["todos"]
        assert {t["id"] for t in updated} == {t["id"] for t in mine}
        assert all(t["status"] == "in_progress" for t in updated)
        untouched = client.get(f"/api/todos/{theirs['id']}", headers=outsider["headers"]).json()["data"]
        assert untouched["status"] == "not_started"

    def test_batch_delete(self, client, owner, outsider, make_todo):
        mine = make_todo(owner["headers"])
        theirs = make_todo(outsider["headers"])

        response = client.request(
            "DELETE",
            "/api/todos/batch",
            json={"ids": [mine["id"], theirs["id"]]},
            headers=owner["headers"],
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"ids": [mine["id"]]}
        assert client.get(f"/api/todos/{theirs['id']}", headers=outsider["headers"]).status_code == 200


class TestQueries:
    @pytest.fixture
    def todos(self, owner, make_todo):
        return [
            make_todo(owner["headers"], title="Write report", priority="high", dueDate="2001-01-01"),
            make_todo(owner["headers"], title="Read book", description="A report on birds", status="in_progress"),
            make_todo(owner["headers"], title="Call mom", completed=True),
        ]

    def test_list_filters_by_completion(self, client, owner, todos):
        response = client.get("/api/todos?completed=true", headers=owner["headers"])

        data = response.json()["data"]
        assert [t["title"] for t in data["todos"]] == ["Call mom"]
        assert data["pagination"]["total"] == 1

    def test_list_filters_by_status_label(self, client, owner, todos):
        response = client.get("/api/todos", params={"status": "进行中"}, headers=owner["headers"])

        assert [t["title"] for t in response.json()["data"]["todos"]] == ["Read book"]

    def test_search_matches_title_and_description(self, client, owner, todos):
        response = client.get("/api/todos/search?q=REPORT", headers=owner["headers"])

        data = response.json()["data"]
        assert sorted(t["title"] for t in data["todos"]) == ["Read book", "Write report"]
        assert data["total"] == 2

    def test_search_requires_query(self, client, owner):
        response = client.get("/api/todos/search", headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Search query is required"

    def test_stats(self, client, owner, todos):
        response = client.get("/api/todos/stats", headers=owner["headers"])

        assert response.json()["data"] == {
            "total": 3,
            "completed": 1,
            "pending": 2,
            "in_progress": 1,
            "not_started": 1,
            "overdue": 1,
        }

    def test_export_downloads_json(self, client, owner, todos):
        response = client.get("/api/todos/export", headers=owner["headers"])

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="todos.json"'
        exported = response.json()
        assert isinstance(exported, list)
        assert len(exported) == 3

    def test_export_rejects_other_formats(self, client, owner):
        response = client.get("/api/todos/export?format=csv", headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Unsupported export format. Only json is supported"
