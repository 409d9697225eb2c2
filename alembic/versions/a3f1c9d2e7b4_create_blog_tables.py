"""Create blog catalog and creation-session tables.

Revision ID: a3f1c9d2e7b4
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "a3f1c9d2e7b4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
  """Upgrade schema."""
  op.create_table(
    "blog_categories",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("name", sa.String(), nullable=False),
    sa.Column("slug", sa.String(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("is_active", sa.Boolean(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("slug"),
  )
  op.create_table(
    "blog_tags",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("name", sa.String(), nullable=False),
    sa.Column("slug", sa.String(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    sa.PrimaryKeyConstraint("id"),
    sa.UniqueConstraint("name"),
  )
  op.create_index(op.f("ix_blog_tags_slug"), "blog_tags", ["slug"], unique=False)
  op.create_table(
    "blog_posts",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("title", sa.String(), nullable=False),
    sa.Column("slug", sa.String(), nullable=False),
    sa.Column("content", sa.Text(), nullable=False),
    sa.Column("content_format", sa.String(), nullable=False),
    sa.Column("excerpt", sa.Text(), nullable=False),
    sa.Column("category_id", sa.String(), nullable=True),
    sa.Column("tag_ids", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.Column("author_id", sa.String(), nullable=False),
    sa.Column("status", sa.String(), nullable=False),
    sa.Column("seo", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.Column("reading_time", sa.Integer(), nullable=False),
    sa.Column("word_count", sa.Integer(), nullable=False),
    sa.Column("ai_score", sa.Integer(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(["category_id"], ["blog_categories.id"], ondelete="SET NULL"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_blog_posts_slug"), "blog_posts", ["slug"], unique=False)
  op.create_index(op.f("ix_blog_posts_category_id"), "blog_posts", ["category_id"], unique=False)
  op.create_index(op.f("ix_blog_posts_author_id"), "blog_posts", ["author_id"], unique=False)
  op.create_table(
    "blog_creation_sessions",
    sa.Column("session_id", sa.String(), nullable=False),
    sa.Column("user_id", sa.String(), nullable=False),
    sa.Column("status", sa.String(), nullable=False),
    sa.Column("stage", sa.String(), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("document", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.PrimaryKeyConstraint("session_id"),
  )
  op.create_index(op.f("ix_blog_creation_sessions_user_id"), "blog_creation_sessions", ["user_id"], unique=False)
  op.create_index(op.f("ix_blog_creation_sessions_status"), "blog_creation_sessions", ["status"], unique=False)
  op.create_index(op.f("ix_blog_creation_sessions_expires_at"), "blog_creation_sessions", ["expires_at"], unique=False)
  op.create_index("ix_blog_creation_sessions_user_created", "blog_creation_sessions", ["user_id", "created_at"], unique=False)


def downgrade() -> None:
  """Downgrade schema."""
  op.drop_index("ix_blog_creation_sessions_user_created", table_name="blog_creation_sessions")
  op.drop_index(op.f("ix_blog_creation_sessions_expires_at"), table_name="blog_creation_sessions")
  op.drop_index(op.f("ix_blog_creation_sessions_status"), table_name="blog_creation_sessions")
  op.drop_index(op.f("ix_blog_creation_sessions_user_id"), table_name="blog_creation_sessions")
  op.drop_table("blog_creation_sessions")
  op.drop_index(op.f("ix_blog_posts_author_id"), table_name="blog_posts")
  op.drop_index(op.f("ix_blog_posts_category_id"), table_name="blog_posts")
  op.drop_index(op.f("ix_blog_posts_slug"), table_name="blog_posts")
  op.drop_table("blog_posts")
  op.drop_index(op.f("ix_blog_tags_slug"), table_name="blog_tags")
  op.drop_table("blog_tags")
  op.drop_table("blog_categories")
