"""Postgres-backed repository for categories, tags and posts."""

from __future__ import annotations

from sqlalchemy import select

from inkwell.blog.models import Category, Post, Tag
from inkwell.core.database import get_session_factory
from inkwell.schema.blog import CategoryRow, PostRow, TagRow
from inkwell.storage.blog_repo import CatalogRepository


class PostgresCatalogRepository(CatalogRepository):
  """Persist the blog catalog to Postgres using SQLAlchemy."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def list_active_categories(self) -> list[Category]:
    async with self._session_factory() as db:
      stmt = select(CategoryRow).where(CategoryRow.is_active.is_(True)).order_by(CategoryRow.name)
      rows = (await db.execute(stmt)).scalars().all()
      return [Category(id=row.id, name=row.name, slug=row.slug, description=row.description, is_active=row.is_active) for row in rows]

  async def create_category(self, category: Category) -> None:
    async with self._session_factory() as db:
      db.add(CategoryRow(id=category.id, name=category.name, slug=category.slug, description=category.description, is_active=category.is_active))
      await db.commit()

  async def get_tag_by_name(self, name: str) -> Tag | None:
    async with self._session_factory() as db:
      row = await db.scalar(select(TagRow).where(TagRow.name == name))
      if row is None:
        return None
      return Tag(id=row.id, name=row.name, slug=row.slug)

  async def create_tag(self, tag: Tag) -> None:
    async with self._session_factory() as db:
      db.add(TagRow(id=tag.id, name=tag.name, slug=tag.slug))
      await db.commit()

  async def create_post(self, post: Post) -> None:
    async with self._session_factory() as db:
      db.add(
        PostRow(
          id=post.id,
          title=post.title,
          slug=post.slug,
          content=post.content,
          content_format=post.content_format,
          excerpt=post.excerpt,
          category_id=post.category_id,
          tag_ids=list(post.tag_ids),
          author_id=post.author_id,
          status=post.status,
          seo=dict(post.seo),
          reading_time=post.reading_time,
          word_count=post.word_count,
          ai_score=post.ai_score,
          created_at=post.created_at,
        )
      )
      await db.commit()
