"""Postgres-backed repository for creation sessions using SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import datetime

import msgspec
from sqlalchemy import func, select

from inkwell.blog.models import CreationSession
from inkwell.blog.stages import LIVE_STATUSES, SessionStatus
from inkwell.core.database import get_session_factory
from inkwell.schema.blog import CreationSessionRow
from inkwell.storage.blog_repo import SessionsRepository

logger = logging.getLogger(__name__)


class PostgresSessionsRepository(SessionsRepository):
  """Persist creation sessions as JSONB documents with indexed copies of the filter columns."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def create_session(self, session: CreationSession) -> None:
    async with self._session_factory() as db:
      db.add(self._to_row(session))
      await db.commit()

  async def get_session(self, session_id: str) -> CreationSession | None:
    async with self._session_factory() as db:
      row = await db.get(CreationSessionRow, session_id)
      if row is None:
        return None
      return self._from_row(row)

  async def save_session(self, session: CreationSession) -> None:
    async with self._session_factory() as db:
      row = await db.get(CreationSessionRow, session.session_id)
      if row is None:
        db.add(self._to_row(session))
      else:
        row.status = session.status.value
        row.stage = session.stage.value
        row.updated_at = session.updated_at
        row.expires_at = session.expires_at
        row.document = msgspec.to_builtins(session)
      await db.commit()

  async def list_sessions(self, user_id: str, *, status: SessionStatus | None = None, limit: int = 10, offset: int = 0) -> tuple[list[CreationSession], int]:
    async with self._session_factory() as db:
      filters = [CreationSessionRow.user_id == user_id]
      if status is not None:
        filters.append(CreationSessionRow.status == status.value)

      total = await db.scalar(select(func.count()).select_from(CreationSessionRow).where(*filters))
      stmt = select(CreationSessionRow).where(*filters).order_by(CreationSessionRow.created_at.desc()).limit(limit).offset(offset)
      rows = (await db.execute(stmt)).scalars().all()
      return [self._from_row(row) for row in rows], int(total or 0)

  async def expire_sessions(self, now: datetime) -> int:
    async with self._session_factory() as db:
      stmt = select(CreationSessionRow).where(CreationSessionRow.status.in_([status.value for status in LIVE_STATUSES]), CreationSessionRow.expires_at <= now)
      rows = (await db.execute(stmt)).scalars().all()
      for row in rows:
        row.status = SessionStatus.EXPIRED.value
        row.updated_at = now
        # Reassign so SQLAlchemy sees the JSONB change.
        row.document = {**row.document, "status": SessionStatus.EXPIRED.value, "updated_at": now.isoformat()}
      await db.commit()
      if rows:
        logger.info("Expired %s creation sessions", len(rows))
      return len(rows)

  @staticmethod
  def _to_row(session: CreationSession) -> CreationSessionRow:
    return CreationSessionRow(
      session_id=session.session_id,
      user_id=session.user_id,
      status=session.status.value,
      stage=session.stage.value,
      created_at=session.created_at,
      updated_at=session.updated_at,
      expires_at=session.expires_at,
      document=msgspec.to_builtins(session),
    )

  @staticmethod
  def _from_row(row: CreationSessionRow) -> CreationSession:
    return msgspec.convert(row.document, CreationSession)
