"""Shared fixtures: in-memory repositories, a controllable clock and a mocked model."""

from __future__ import annotations

import os

os.environ.setdefault("INKWELL_ALLOWED_ORIGINS", "http://localhost:3000")

from datetime import UTC, datetime, timedelta  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import msgspec  # noqa: E402
import pytest  # noqa: E402

from inkwell.ai.gateway import GenerationGateway  # noqa: E402
from inkwell.ai.providers.base import SimpleModelResponse  # noqa: E402
from inkwell.blog.models import Category, CreationSession, Post, Tag  # noqa: E402
from inkwell.blog.orchestrator import BlogSessionOrchestrator  # noqa: E402
from inkwell.blog.stages import LIVE_STATUSES, SessionStatus  # noqa: E402

SAMPLE_POST_MARKDOWN = """# Docker for Beginners: A Practical Guide

Docker lets you package an application with everything it needs so it runs the same way on every machine. In this guide we cover images, containers and the commands you will use every day.

## What is a container?

A container is a running instance of an image. Images are read-only templates built from a Dockerfile.

## Installing Docker

1. Download Docker Desktop.
2. Run the installer.
3. Check the install with `docker --version`.

## Your first Dockerfile

```dockerfile
FROM python:3.12-slim
COPY . /app
```

- Start from slim images.
- Never bake secrets into images.

## Conclusion

Containers make environments reproducible. Share this guide and leave a comment with your questions.
"""


class FakeClock:
  """Deterministic clock the orchestrator calls instead of datetime.now."""

  def __init__(self, start: datetime | None = None) -> None:
    self.now = start or datetime(2026, 1, 15, 10, 0, tzinfo=UTC)

  def __call__(self) -> datetime:
    return self.now

  def advance(self, delta: timedelta) -> None:
    self.now = self.now + delta


class InMemorySessionsRepository:
  def __init__(self) -> None:
    self.sessions: dict[str, CreationSession] = {}
    self.save_count = 0

  async def create_session(self, session: CreationSession) -> None:
    self.sessions[session.session_id] = session

  async def get_session(self, session_id: str) -> CreationSession | None:
    return self.sessions.get(session_id)

  async def save_session(self, session: CreationSession) -> None:
    self.save_count += 1
    self.sessions[session.session_id] = session

  async def list_sessions(self, user_id: str, *, status: SessionStatus | None = None, limit: int = 10, offset: int = 0) -> tuple[list[CreationSession], int]:
    matches = [session for session in self.sessions.values() if session.user_id == user_id and (status is None or session.status is status)]
    matches.sort(key=lambda session: session.created_at, reverse=True)
    return matches[offset : offset + limit], len(matches)

  async def expire_sessions(self, now: datetime) -> int:
    expired = 0
    for session_id, session in list(self.sessions.items()):
      if session.status in LIVE_STATUSES and session.expires_at <= now:
        self.sessions[session_id] = msgspec.structs.replace(session, status=SessionStatus.EXPIRED, updated_at=now)
        expired += 1
    return expired


class InMemoryCatalogRepository:
  def __init__(self, categories: list[Category] | None = None) -> None:
    self.categories: list[Category] = list(categories or [])
    self.tags: dict[str, Tag] = {}
    self.posts: list[Post] = []

  async def list_active_categories(self) -> list[Category]:
    return sorted((category for category in self.categories if category.is_active), key=lambda category: category.name)

  async def create_category(self, category: Category) -> None:
    self.categories.append(category)

  async def get_tag_by_name(self, name: str) -> Tag | None:
    return self.tags.get(name)

  async def create_tag(self, tag: Tag) -> None:
    self.tags[tag.name] = tag

  async def create_post(self, post: Post) -> None:
    self.posts.append(post)


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def sample_markdown() -> str:
  return SAMPLE_POST_MARKDOWN


@pytest.fixture
def clock() -> FakeClock:
  return FakeClock()


@pytest.fixture
def categories() -> list[Category]:
  return [
    Category(id="cat-web", name="Web Development", slug="web-development", description="Frontend and backend"),
    Category(id="cat-ai", name="Artificial Intelligence", slug="artificial-intelligence"),
    Category(id="cat-cloud", name="Cloud", slug="cloud"),
    Category(id="cat-old", name="Archive", slug="archive", is_active=False),
  ]


@pytest.fixture
def sessions_repo() -> InMemorySessionsRepository:
  return InMemorySessionsRepository()


@pytest.fixture
def catalog_repo(categories) -> InMemoryCatalogRepository:
  return InMemoryCatalogRepository(categories)


@pytest.fixture
def model() -> AsyncMock:
  mock_model = AsyncMock()
  mock_model.name = "fake-model"
  mock_model.generate.return_value = SimpleModelResponse(content=SAMPLE_POST_MARKDOWN, usage={"total_tokens": 900})
  return mock_model


@pytest.fixture
def orchestrator(sessions_repo, catalog_repo, model, clock) -> BlogSessionOrchestrator:
  return BlogSessionOrchestrator(sessions=sessions_repo, catalog=catalog_repo, gateway=GenerationGateway(model), session_ttl_hours=24, clock=clock)
