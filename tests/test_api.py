import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeResponse, FakeSession, repo_json
from devhub.deps import get_ai_gateway, get_chat_widget, get_github_client, get_project_store, get_settings
from devhub.config import Settings
from devhub.libs.ai_gateway import AIGateway
from devhub.libs.chat_widget import ChatWidget
from devhub.libs.github_client import GitHubClient
from devhub.libs.models import Category
from main import create_app


@pytest.fixture
def app(store, gateway):
    app = create_app(bootstrap_schema=False)
    widget = ChatWidget(gateway)
    app.dependency_overrides[get_project_store] = lambda: store
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    app.dependency_overrides[get_chat_widget] = lambda: widget
    app.dependency_overrides[get_settings] = lambda: Settings(quick_profiles=["octo", "hubot"])
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def seed(fake_db, count):
    return [
        fake_db.add_row(title=f"Project {i}", category="Dashboard" if i % 2 else "Web3", tags=["React"])
        for i in range(count)
    ]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_catalog_view_filters_and_pages(client, fake_db):
    seed(fake_db, 12)

    body = client.get("/projects", params={"category": "Dashboard"}).json()
    assert body["filtered_total"] == 6
    assert body["total"] == 12
    assert body["visible_count"] == 9
    assert body["has_more"] is False
    assert {p["category"] for p in body["projects"]} == {"Dashboard"}

    body = client.get("/projects", params={"visible": 10}).json()
    assert body["visible_count"] == 12
    assert len(body["projects"]) == 12


def test_catalog_falls_back_when_store_is_down(client, fake_db):
    fake_db.fail_with = OSError("down")
    body = client.get("/projects").json()
    assert body["total"] == 40
    assert body["has_more"] is True


def test_create_project_multipart(client, fake_db):
    payload = {"title": "Neo", "description": "New one", "category": "AI/ML", "tags": ["Python", "Python"]}
    response = client.post("/projects", data={"project": json.dumps(payload)})

    assert response.status_code == 200
    body = response.json()
    assert body["category"] == Category.AI.value
    assert body["tags"] == ["Python"]
    assert body["image_url"].startswith("https://picsum.photos/")
    assert body["id"] in fake_db.rows


def test_create_requires_title_and_description(client):
    response = client.post("/projects", data={"project": json.dumps({"title": "only"})})
    assert response.status_code == 422


def test_create_rejects_all_category(client, fake_db):
    payload = {"title": "Neo", "description": "New one", "category": "All"}
    response = client.post("/projects", data={"project": json.dumps(payload)})
    assert response.status_code == 422
    assert fake_db.rows == {}


def test_update_project(client, fake_db):
    row = seed(fake_db, 1)[0]
    payload = {"title": "Renamed", "description": "Changed", "category": "Utility", "tags": []}
    response = client.put(f"/projects/{row['id']}", data={"project": json.dumps(payload)})
    assert response.status_code == 200
    assert fake_db.rows[str(row["id"])]["title"] == "Renamed"


def test_update_unknown_project(client, fake_db):
    seed(fake_db, 1)
    payload = {"title": "x", "description": "y"}
    response = client.put("/projects/nope", data={"project": json.dumps(payload)})
    assert response.status_code == 404


def test_delete_needs_confirmation(client, fake_db):
    row = seed(fake_db, 2)[0]
    assert client.delete(f"/projects/{row['id']}").status_code == 409
    assert str(row["id"]) in fake_db.rows

    response = client.delete(f"/projects/{row['id']}", params={"confirm": "true"})
    assert response.status_code == 200
    assert str(row["id"]) not in {p["id"] for p in response.json()}


def test_delete_failure_is_reported(client, fake_db):
    row = seed(fake_db, 1)[0]
    fake_db.delete_fails = True
    response = client.delete(f"/projects/{row['id']}", params={"confirm": "true"})
    assert response.status_code == 502


def test_chat_status_and_configure(app, client, fake_openai):
    unconfigured = AIGateway(api_key=None, client_factory=lambda key: fake_openai)
    app.dependency_overrides[get_ai_gateway] = lambda: unconfigured

    status = client.get("/chat/status").json()
    assert status == {"available": False, "code": "ai_not_configured", "message": status["message"]}

    response = client.post("/chat/stream", json={"message": "hi"})
    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "ai_not_configured"

    assert client.post("/chat/configure", json={"api_key": "sk-live"}).json()["available"] is True


def test_chat_stream_ndjson(client):
    response = client.post("/chat/stream", json={"message": "Recommend something"})
    events = [json.loads(line) for line in response.text.splitlines() if line]

    assert [e["type"] for e in events] == ["delta", "delta", "delta", "done"]
    assert "".join(e["text"] for e in events[:-1]) == "Hello, world"

    transcript = client.get("/chat/transcript").json()
    assert transcript[-1]["text"] == "Hello, world"
    assert transcript[-1]["role"] == "model"


def test_chat_stream_error_event(client, fake_openai):
    fake_openai.completions.fail_after = 0
    response = client.post("/chat/stream", json={"message": "hi"})
    events = [json.loads(line) for line in response.text.splitlines() if line]
    assert [e["type"] for e in events] == ["error", "done"]


def github_override(app, responses):
    github = GitHubClient(session=FakeSession(responses))
    app.dependency_overrides[get_github_client] = lambda: github


def test_profiles(client):
    assert client.get("/github/profiles").json() == {"profiles": ["octo", "hubot"], "sync_all": "octo,hubot"}


def test_import_preview_and_commit(app, client, fake_openai, fake_db):
    github_override(app, {
        "https://api.github.com/users/octo/repos": FakeResponse(200, [
            repo_json("tool", html_url="https://github.com/octo/tool"),
            repo_json("fork", fork=True),
        ]),
    })
    fake_openai.completions.json_content = json.dumps({"projects": [{
        "title": "tool", "description": "CLI tool", "category": "Utility",
        "tags": ["Rust"], "repo_url": None, "demo_url": None,
    }]})

    preview = client.post("/github/import/preview", json={"usernames": "octo"}).json()
    assert preview["selected"] == [0]
    assert preview["drafts"][0]["repo_url"] == "https://github.com/octo/tool"

    created = client.post("/github/import/commit", json={"drafts": preview["drafts"], "selected": [0]}).json()
    assert [p["title"] for p in created] == ["tool"]
    assert len(fake_db.rows) == 1


def test_import_errors_are_distinct(app, client):
    github_override(app, {
        "https://api.github.com/users/ghost/repos": FakeResponse(404, {"message": "Not Found"}),
        "https://api.github.com/users/busy/repos": FakeResponse(
            403, {"message": "rate limit"}, headers={"x-ratelimit-remaining": "0"},
        ),
    })
    assert client.post("/github/import/preview", json={"usernames": ["ghost"]}).status_code == 404
    assert client.post("/github/import/preview", json={"usernames": "busy"}).status_code == 429
    assert client.post("/github/import/preview", json={"usernames": " , "}).status_code == 422
