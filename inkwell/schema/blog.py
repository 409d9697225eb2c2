from __future__ import annotations

import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.core.database import Base


class CreationSessionRow(Base):
  __tablename__ = "blog_creation_sessions"
  __table_args__ = (Index("ix_blog_creation_sessions_user_created", "user_id", "created_at"),)

  session_id: Mapped[str] = mapped_column(String, primary_key=True)
  user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  status: Mapped[str] = mapped_column(String, nullable=False, index=True)
  stage: Mapped[str] = mapped_column(String, nullable=False)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
  updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
  expires_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
  # Full msgspec document; the columns above are copies used for filtering.
  document: Mapped[dict] = mapped_column(JSONB, nullable=False)


class CategoryRow(Base):
  __tablename__ = "blog_categories"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  name: Mapped[str] = mapped_column(String, nullable=False)
  slug: Mapped[str] = mapped_column(String, unique=True, nullable=False)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class TagRow(Base):
  __tablename__ = "blog_tags"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
  slug: Mapped[str] = mapped_column(String, nullable=False, index=True)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class PostRow(Base):
  __tablename__ = "blog_posts"

  id: Mapped[str] = mapped_column(String, primary_key=True)
  title: Mapped[str] = mapped_column(String, nullable=False)
  slug: Mapped[str] = mapped_column(String, nullable=False, index=True)
  content: Mapped[str] = mapped_column(Text, nullable=False)
  content_format: Mapped[str] = mapped_column(String, nullable=False, default="html")
  excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
  category_id: Mapped[str | None] = mapped_column(ForeignKey("blog_categories.id", ondelete="SET NULL"), nullable=True, index=True)
  tag_ids: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
  author_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
  seo: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
  reading_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  ai_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
