"""Storage interfaces for creation sessions and the blog catalog."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from inkwell.blog.models import Category, CreationSession, Post, Tag
from inkwell.blog.stages import SessionStatus


class SessionsRepository(Protocol):
  """Repository contract for creation-session persistence."""

  async def create_session(self, session: CreationSession) -> None:
    """Persist a new session."""

  async def get_session(self, session_id: str) -> CreationSession | None:
    """Fetch a session by identifier."""

  async def save_session(self, session: CreationSession) -> None:
    """Replace the stored copy of an existing session."""

  async def list_sessions(self, user_id: str, *, status: SessionStatus | None = None, limit: int = 10, offset: int = 0) -> tuple[list[CreationSession], int]:
    """Return one page of a user's sessions, newest first, and the total count."""

  async def expire_sessions(self, now: datetime) -> int:
    """Mark live sessions past their expiry as expired and return how many changed."""


class CatalogRepository(Protocol):
  """Repository contract for categories, tags and posts."""

  async def list_active_categories(self) -> list[Category]:
    """Return active categories sorted by name."""

  async def create_category(self, category: Category) -> None:
    """Persist a new category."""

  async def get_tag_by_name(self, name: str) -> Tag | None:
    """Find a tag by exact name."""

  async def create_tag(self, tag: Tag) -> None:
    """Persist a new tag."""

  async def create_post(self, post: Post) -> None:
    """Persist a new post."""
