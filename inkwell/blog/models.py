"""Records for creation sessions, drafts and the catalog."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

import msgspec

from inkwell.blog.stages import LIVE_STATUSES, SessionStatus, Stage, progress_for


class CollectedData(msgspec.Struct, kw_only=True):
  """Answers gathered across stages; each field is written by its own stage."""

  topic: str | None = None
  title: str | None = None
  template: str | None = None
  audience: str | None = None
  length: int | None = None
  keywords: list[str] = msgspec.field(default_factory=list)
  category: str | None = None


class SessionMessage(msgspec.Struct, kw_only=True):
  role: Literal["user", "agent"]
  content: str
  stage: Stage
  timestamp: datetime
  metadata: dict[str, Any] = msgspec.field(default_factory=dict)


class SeoBlock(msgspec.Struct, kw_only=True):
  meta_title: str
  meta_description: str
  keywords: list[str] = msgspec.field(default_factory=list)
  score: int = 0


class Draft(msgspec.Struct, kw_only=True):
  title: str
  content: str
  excerpt: str
  category_id: str | None
  seo: SeoBlock
  reading_time: int
  word_count: int
  content_format: str = "html"
  tags: list[str] = msgspec.field(default_factory=list)


class GenerationFailure(msgspec.Struct, kw_only=True):
  code: str
  message: str


class NotStarted(msgspec.Struct, kw_only=True, tag="not_started", tag_field="state"):
  pass


class Pending(msgspec.Struct, kw_only=True, tag="pending", tag_field="state"):
  generation_id: str
  started_at: datetime


class Completed(msgspec.Struct, kw_only=True, tag="completed", tag_field="state"):
  generation_id: str
  started_at: datetime
  completed_at: datetime
  content: str
  draft: Draft
  metadata: dict[str, Any] = msgspec.field(default_factory=dict)


class Failed(msgspec.Struct, kw_only=True, tag="failed", tag_field="state"):
  generation_id: str
  started_at: datetime
  completed_at: datetime
  error: GenerationFailure


GenerationState = NotStarted | Pending | Completed | Failed


class CreationSession(msgspec.Struct, kw_only=True):
  """One guided post-creation conversation."""

  session_id: str
  user_id: str
  status: SessionStatus
  stage: Stage
  created_at: datetime
  updated_at: datetime
  expires_at: datetime
  collected: CollectedData = msgspec.field(default_factory=CollectedData)
  messages: list[SessionMessage] = msgspec.field(default_factory=list)
  generation: GenerationState = msgspec.field(default_factory=NotStarted)
  created_post_id: str | None = None
  started_from: str | None = None
  regeneration_count: int = 0

  @property
  def progress(self) -> int:
    return progress_for(self.stage)

  def is_live(self, now: datetime) -> bool:
    """True while the session accepts messages: not closed and not past its TTL."""
    return self.status in LIVE_STATUSES and self.expires_at > now


class Category(msgspec.Struct, kw_only=True):
  id: str
  name: str
  slug: str
  description: str | None = None
  is_active: bool = True


class Tag(msgspec.Struct, kw_only=True):
  id: str
  name: str
  slug: str


class Post(msgspec.Struct, kw_only=True):
  id: str
  title: str
  slug: str
  content: str
  content_format: str
  excerpt: str
  category_id: str | None
  author_id: str
  created_at: datetime
  tag_ids: list[str] = msgspec.field(default_factory=list)
  status: str = "draft"
  seo: dict[str, Any] = msgspec.field(default_factory=dict)
  reading_time: int = 0
  word_count: int = 0
  ai_score: int | None = None


def session_to_view(session: CreationSession) -> dict[str, Any]:
  """Render a session as the JSON shape returned to clients."""
  view = msgspec.to_builtins(session)
  view["progress"] = session.progress
  return view
