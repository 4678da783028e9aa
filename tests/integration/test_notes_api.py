"""
Functional tests for note endpoints, including embedding similarity search
against a mocked embedding provider.
"""

import json

import httpx
import pytest

from taskhub.server.dependencies import get_ai_service
from taskhub.server.services.ai_service import AIService


def _embedding_for(text):
    return [1.0, 0.0] if "cat" in text.lower() else [0.0, 1.0]


def _embedding_handler(request: httpx.Request) -> httpx.Response:
    payload = json.loads(request.content)
    return httpx.Response(200, json={"data": [{"embedding": _embedding_for(payload["input"])}]})


@pytest.fixture
def mock_ai(app):
    service = AIService(
        base_url="https://ai.test/v1",
        api_key="test-key",
        transport=httpx.MockTransport(_embedding_handler),
    )
    app.dependency_overrides[get_ai_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_ai_service, None)


@pytest.fixture
def make_note(client):
    def _make(headers, **fields):
        body = {"title": "Meeting notes"}
        body.update(fields)
        response = client.post("/api/notes", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


class TestNoteCrud:
    def test_create_derives_plain_text(self, client, owner):
        response = client.post(
            "/api/notes",
            json={
                "title": "Plan",
                "content": "<h1>Sprint</h1><p>Ship the **beta**</p>",
                "tags": ["work", "work", "q3"],
                "isFavorite": True,
            },
            headers=owner["headers"],
        )

        assert response.status_code == 201
        note = response.json()["data"]
        assert note["content_text"] == "Sprint Ship the beta"
        assert note["tags"] == ["work", "q3"]
        assert note["is_favorite"] is True
        assert note["has_embedding"] is False

    def test_title_defaults_to_untitled(self, client, owner):
        response = client.post("/api/notes", json={}, headers=owner["headers"])

        assert response.json()["data"]["title"] == "Untitled"

    def test_too_many_tags(self, client, owner):
        response = client.post(
            "/api/notes", json={"tags": [f"t{i}" for i in range(11)]}, headers=owner["headers"]
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Request validation failed"

    def test_update_recomputes_plain_text(self, client, owner, make_note):
        note = make_note(owner["headers"], content="<p>old</p>")

        response = client.put(
            f"/api/notes/{note['id']}", json={"content": "<p>new text</p>"}, headers=owner["headers"]
        )

        assert response.status_code == 200
        assert response.json()["data"]["content_text"] == "new text"

    def test_delete(self, client, owner, make_note):
        note = make_note(owner["headers"])

        assert client.delete(f"/api/notes/{note['id']}", headers=owner["headers"]).status_code == 200
        missing = client.get(f"/api/notes/{note['id']}", headers=owner["headers"])
        assert missing.status_code == 404
        assert missing.json()["message"] == "Note not found"

    def test_notes_are_private(self, client, owner, outsider, make_note):
        note = make_note(owner["headers"])

        assert client.get(f"/api/notes/{note['id']}", headers=outsider["headers"]).status_code == 404

    def test_toggle_favorite_and_archive(self, client, owner, make_note):
        note = make_note(owner["headers"])

        favorite = client.patch(f"/api/notes/{note['id']}/favorite", headers=owner["headers"])
        archived = client.patch(f"/api/notes/{note['id']}/archive", headers=owner["headers"])

        assert favorite.json()["data"]["is_favorite"] is True
        assert archived.json()["data"]["is_archived"] is True


class TestNoteQueries:
    @pytest.fixture
    def notes(self, owner, make_note):
        return [
            make_note(owner["headers"], title="Groceries", content="eggs and flour", tags=["home"]),
            make_note(owner["headers"], title="Roadmap", content="Q3 launch plan", tags=["work"], isFavorite=True),
            make_note(owner["headers"], title="Old idea", tags=["work"], isArchived=True),
        ]

    def test_list_filters_by_tag_and_archive_flag(self, client, owner, notes):
        response = client.get("/api/notes?tags=work&is_archived=false", headers=owner["headers"])

        data = response.json()["data"]
        assert [n["title"] for n in data["notes"]] == ["Roadmap"]
        assert data["pagination"]["total"] == 1

    def test_search_matches_plain_text(self, client, owner, notes):
        response = client.get("/api/notes/search?query=FLOUR", headers=owner["headers"])

        data = response.json()["data"]
        assert [n["title"] for n in data["notes"]] == ["Groceries"]
        assert data["query"] == "FLOUR"

    def test_search_requires_query(self, client, owner):
        response = client.get("/api/notes/search", headers=owner["headers"])

        assert response.status_code == 400

    def test_tags(self, client, owner, notes):
        response = client.get("/api/notes/tags", headers=owner["headers"])

        assert response.json()["data"]["tags"] == ["home", "work"]

    def test_stats(self, client, owner, notes):
        response = client.get("/api/notes/stats", headers=owner["headers"])

        stats = response.json()["data"]
        assert stats["total_notes"] == 3
        assert stats["favorite_notes"] == 1
        assert stats["archived_notes"] == 1
        assert stats["notes_growth_percent"] == 100
        assert stats["ai_usage"] == 0
        assert stats["total_todos"] == 0


class TestEmbeddings:
    def test_generate_embedding(self, client, owner, make_note, mock_ai):
        note = make_note(owner["headers"], title="Cat care")

        response = client.post(f"/api/notes/{note['id']}/embedding", headers=owner["headers"])

        assert response.status_code == 200
        assert response.json()["data"]["has_embedding"] is True
        assert "embedding" not in response.json()["data"]

    def test_similar_notes_are_ranked_and_thresholded(self, client, owner, make_note, mock_ai):
        cat = make_note(owner["headers"], title="Cat care", content="Feeding the cat")
        dog = make_note(owner["headers"], title="Dog walks", content="Morning routes")
        make_note(owner["headers"], title="No embedding")
        for note in (cat, dog):
            client.post(f"/api/notes/{note['id']}/embedding", headers=owner["headers"])

        response = client.get("/api/notes/similar?query=my cat&threshold=0.5", headers=owner["headers"])

        assert response.status_code == 200
        similar = response.json()["data"]["notes"]
        assert [n["id"] for n in similar] == [cat["id"]]
        assert similar[0]["similarity"] == 1.0

    def test_similar_requires_query(self, client, owner, mock_ai):
        response = client.get("/api/notes/similar", headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Search query is required"

    def test_embedding_without_api_key_is_unavailable(self, client, owner, make_note):
        note = make_note(owner["headers"])

        response = client.post(f"/api/notes/{note['id']}/embedding", headers=owner["headers"])

        assert response.status_code == 503
        assert response.json()["success"] is False
