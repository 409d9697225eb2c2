from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from inkwell.blog.models import Category
from inkwell.core.security import AuthenticatedUser, get_current_user
from inkwell.main import app
from inkwell.services.cache import TTLCache

USER = "firebase-uid-1"

_SERVICE_ATTRS = ("blog_orchestrator", "catalog_repo", "category_cache")


@pytest.fixture
def client(orchestrator, catalog_repo):
  app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(uid=USER, email="writer@example.com")
  app.state.blog_orchestrator = orchestrator
  app.state.catalog_repo = catalog_repo
  app.state.category_cache = TTLCache(300)
  try:
    yield TestClient(app)
  finally:
    app.dependency_overrides.clear()
    for name in _SERVICE_ATTRS:
      if hasattr(app.state, name):
        delattr(app.state, name)


def _start(client: TestClient) -> str:
  response = client.post("/v1/blog/sessions", json={"started_from": "dashboard"})
  assert response.status_code == 201
  return response.json()["session"]["session_id"]


def _send(client: TestClient, session_id: str, message: str) -> dict:
  response = client.post(f"/v1/blog/sessions/{session_id}/message", json={"message": message})
  assert response.status_code == 200, response.text
  return response.json()


def test_health_check():
  response = TestClient(app).get("/health")
  assert response.status_code == 200
  assert response.json()["status"] == "ok"
  assert response.headers["x-request-id"]


def test_sessions_require_auth():
  response = TestClient(app).post("/v1/blog/sessions")
  assert response.status_code in (401, 403)


def test_start_session(client):
  response = client.post("/v1/blog/sessions")
  assert response.status_code == 201
  body = response.json()
  assert body["session"]["stage"] == "topic_discovery"
  assert body["session"]["progress"] == 20
  assert body["session"]["user_id"] == USER
  assert "What topic would you like to write about?" in body["message"]


def test_full_flow_generates_and_saves_a_draft(client, catalog_repo):
  session_id = _start(client)
  _send(client, session_id, "Docker for beginners")
  _send(client, session_id, "tutorial")
  _send(client, session_id, "principiante, medio, keywords: docker, containers")
  review = _send(client, session_id, "1")
  assert review["session"]["stage"] == "review_and_confirm"
  assert review["response"]["summary"]["category"] == "Artificial Intelligence"

  confirm = _send(client, session_id, "yes")
  assert confirm["response"]["should_generate"] is True

  # TestClient runs background tasks before returning.
  session = client.get(f"/v1/blog/sessions/{session_id}").json()["session"]
  assert session["stage"] == "generation_completed"
  assert session["generation"]["state"] == "completed"
  assert session["generation"]["draft"]["content"].startswith("<h1>")

  saved = client.post(f"/v1/blog/sessions/{session_id}/save", json={"title": "Docker for Absolute Beginners"})
  assert saved.status_code == 201
  body = saved.json()
  assert body["post"]["title"] == "Docker for Absolute Beginners"
  assert body["post"]["status"] == "draft"
  assert body["post"]["author_id"] == USER
  assert body["session"]["stage"] == "draft_saved"
  assert body["session"]["status"] == "completed"
  assert len(catalog_repo.posts) == 1


def test_unknown_session_returns_error_envelope(client):
  response = client.get("/v1/blog/sessions/does-not-exist", headers={"x-request-id": "req-42"})
  assert response.status_code == 404
  assert response.json() == {"detail": {"error": "SESSION_NOT_FOUND", "message": "Session not found."}, "requestId": "req-42"}


def test_save_without_generated_content(client):
  session_id = _start(client)
  response = client.post(f"/v1/blog/sessions/{session_id}/save")
  assert response.status_code == 400
  assert response.json()["detail"]["error"] == "NO_CONTENT"


def test_generate_requires_complete_session(client):
  session_id = _start(client)
  response = client.post(f"/v1/blog/sessions/{session_id}/generate")
  assert response.status_code == 400
  assert response.json()["detail"]["error"] == "INCOMPLETE_DATA"


def test_blank_message_is_rejected(client):
  session_id = _start(client)
  response = client.post(f"/v1/blog/sessions/{session_id}/message", json={"message": "   "})
  assert response.status_code == 422
  assert "input" not in response.json()["detail"][0]


def test_oversized_message_is_rejected(client):
  session_id = _start(client)
  response = client.post(f"/v1/blog/sessions/{session_id}/message", json={"message": "x" * 2001})
  assert response.status_code == 422


def test_invalid_category_reply(client):
  session_id = _start(client)
  for message in ("Kubernetes operators", "technical", "experto"):
    _send(client, session_id, message)
  body = _send(client, session_id, "Gardening")
  assert body["response"]["success"] is False
  assert body["response"]["error_code"] == "INVALID_CATEGORY"
  assert body["session"]["stage"] == "category_selection"


def test_list_and_cancel_sessions(client):
  first = _start(client)
  _start(client)

  listed = client.get("/v1/blog/sessions", params={"limit": 1})
  assert listed.status_code == 200
  assert listed.json()["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}

  cancelled = client.delete(f"/v1/blog/sessions/{first}")
  assert cancelled.status_code == 200
  assert cancelled.json()["session"]["status"] == "cancelled"

  only_cancelled = client.get("/v1/blog/sessions", params={"status": "cancelled"}).json()
  assert [session["session_id"] for session in only_cancelled["sessions"]] == [first]


def test_missing_orchestrator_is_unavailable(client):
  del app.state.blog_orchestrator
  response = client.post("/v1/blog/sessions")
  assert response.status_code == 503
  assert response.json()["detail"] == "Internal Server Error"


def test_categories_are_cached_until_a_category_is_created(client, catalog_repo):
  first = client.get("/v1/blog/categories").json()["categories"]
  assert [category["id"] for category in first] == ["cat-ai", "cat-cloud", "cat-web"]

  catalog_repo.categories.append(Category(id="cat-data", name="Data", slug="data"))
  assert len(client.get("/v1/blog/categories").json()["categories"]) == 3

  created = client.post("/v1/blog/categories", json={"name": "Security Basics"})
  assert created.status_code == 201
  assert created.json()["category"]["slug"] == "security-basics"

  names = [category["name"] for category in client.get("/v1/blog/categories").json()["categories"]]
  assert names == ["Artificial Intelligence", "Cloud", "Data", "Security Basics", "Web Development"]


def test_create_category_rejects_bad_slug(client):
  response = client.post("/v1/blog/categories", json={"name": "Ops", "slug": "Not A Slug"})
  assert response.status_code == 422


def test_content_templates(client):
  response = client.get("/v1/content/templates")
  assert response.status_code == 200
  assert [template["key"] for template in response.json()["templates"]] == ["tutorial", "guide", "technical", "informative", "opinion"]


def test_analyze_content(client, sample_markdown):
  response = client.post(
    "/v1/content/analyze",
    json={"title": "Docker for Beginners: A Practical Guide", "content": sample_markdown, "tags": ["docker"], "category": "cat-cloud", "focus_keyphrase": "docker"},
  )
  assert response.status_code == 200
  body = response.json()
  assert 0 <= body["score"]["total"] <= 100
  assert body["score"]["grade"] in {"A+", "A", "B", "C", "D", "F"}
  assert all(suggestion["tag"].lower() != "docker" for suggestion in body["tags"]["suggested"])
  assert body["keywords"]["focus_keyphrase"] == "docker"
