"""Shared fakes for the record store, OpenAI client and GitHub HTTP session."""

import asyncio
import json
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from devhub.libs.ai_gateway import AIGateway
from devhub.libs.models import Category, GitHubRepo, Project
from devhub.libs.project_store import ProjectStore


# ─────────────────────────────────────────────
#  Record store
# ─────────────────────────────────────────────

class FakeDatabase:
    """In-memory stand-in for the projects table."""

    def __init__(self):
        self.rows = {}
        self.fail_with = None
        self.delete_fails = False
        self.connect_delay = 0.0
        self.closed = 0
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def add_row(self, **fields):
        self._clock += timedelta(days=1)
        row = {
            "id": uuid.uuid4(),
            "title": "Untitled",
            "description": "",
            "category": Category.UTILITY.value,
            "tags": [],
            "image_url": "",
            "demo_url": None,
            "repo_url": None,
            "featured": False,
            "created_at": self._clock,
        }
        row.update(fields)
        self.rows[str(row["id"])] = row
        return row

    async def connect(self):
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.fail_with is not None:
            raise self.fail_with
        return FakeConnection(self)


class FakeConnection:
    def __init__(self, db):
        self.db = db

    async def fetch(self, sql, *params):
        return sorted((dict(r) for r in self.db.rows.values()), key=lambda r: r["created_at"], reverse=True)

    async def fetchrow(self, sql, *params):
        statement = sql.strip().split()[0].upper()
        if statement == "INSERT":
            title, description, category, tags, image_url, demo_url, repo_url, featured = params
            return dict(self.db.add_row(
                title=title, description=description, category=category, tags=tags,
                image_url=image_url, demo_url=demo_url, repo_url=repo_url, featured=featured,
            ))
        if statement == "UPDATE":
            *values, project_id = params
            row = self.db.rows.get(str(project_id))
            if row is None:
                return None
            keys = ["title", "description", "category", "tags", "image_url", "demo_url", "repo_url", "featured"]
            row.update(dict(zip(keys, values)))
            return dict(row)
        raise AssertionError(f"unexpected statement: {sql}")

    async def execute(self, sql, *params):
        if self.db.delete_fails:
            raise RuntimeError("permission denied for table projects")
        removed = self.db.rows.pop(str(params[0]), None)
        return f"DELETE {1 if removed else 0}"

    async def close(self):
        self.db.closed += 1


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    return ProjectStore(connect=fake_db.connect, fetch_timeout=0.5)


def make_project(**fields) -> Project:
    data = {
        "id": "p1",
        "title": "Sample",
        "description": "A sample project",
        "category": Category.UTILITY,
        "tags": ["Python"],
        "image_url": "https://example.com/cover.png",
    }
    data.update(fields)
    return Project(**data)


# ─────────────────────────────────────────────
#  OpenAI
# ─────────────────────────────────────────────

class FakeCompletions:
    """Mimics ``client.chat.completions`` for streaming and JSON calls."""

    def __init__(self):
        self.chunks = ["Hello", ", ", "world"]
        self.fail_after = None
        self.raise_on_create = None
        self.json_content = json.dumps({"projects": []})
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.raise_on_create is not None:
            raise self.raise_on_create
        if kwargs.get("stream"):
            return self._stream()
        message = SimpleNamespace(content=self.json_content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    async def _stream(self):
        for i, text in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise RuntimeError("connection reset")
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class FakeOpenAI:
    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def gateway(fake_openai):
    async def catalog():
        return [
            make_project(id="a", title="Neon Shop", category=Category.ECOMMERCE, tags=["React", "Stripe"]),
            make_project(id="b", title="Pulse Board", category=Category.DASHBOARD, tags=["D3.js"]),
        ]

    return AIGateway(
        api_key="sk-test",
        catalog_loader=catalog,
        client_factory=lambda key: fake_openai,
    )


# ─────────────────────────────────────────────
#  GitHub
# ─────────────────────────────────────────────

def repo_json(name, **fields):
    data = {
        "name": name,
        "description": f"{name} description",
        "html_url": f"https://github.com/someone/{name}",
        "homepage": None,
        "language": "TypeScript",
        "topics": [],
        "created_at": "2023-05-04T10:00:00Z",
        "fork": False,
        "stargazers_count": 3,
    }
    data.update(fields)
    return data


def make_repo(name, **fields) -> GitHubRepo:
    return GitHubRepo(**repo_json(name, **fields))


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    @property
    def text(self):
        return "" if self._payload is None else json.dumps(self._payload)

    def json(self):
        return self._payload


class FakeSession:
    """Routes GET requests by URL to canned responses."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "params": params})
        return self.responses[url]
