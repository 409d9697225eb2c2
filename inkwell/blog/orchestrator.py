"""Lifecycle of guided creation sessions: start, converse, generate, save, cancel."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta
from typing import Final

import msgspec

from inkwell.ai.gateway import GenerationGateway, GenerationRequest
from inkwell.blog.errors import DraftNotReadyError, IncompleteSessionError, SessionExpiredError, SessionNotFoundError
from inkwell.blog.handlers import STAGE_HANDLERS, StageContext, StageReply, cancel, move_to
from inkwell.blog.intents import DEFAULT_LENGTH
from inkwell.blog.models import Category, Completed, CreationSession, Draft, Failed, GenerationFailure, Pending, Post, SeoBlock, SessionMessage, Tag
from inkwell.blog.stages import SessionStatus, Stage, check_transition
from inkwell.content.formatting import calculate_reading_time, generate_excerpt, generate_meta_description, generate_meta_title, make_slug, markdown_to_html
from inkwell.content.scoring import ContentDocument, ScoreReport, score_content
from inkwell.content.text import count_words, strip_html
from inkwell.storage.blog_repo import CatalogRepository, SessionsRepository
from inkwell.utils.ids import generate_generation_id, generate_record_id, generate_session_id

logger = logging.getLogger(__name__)

MAX_DRAFT_TAGS: Final[int] = 8

AUDIENCE_STYLES: Final[dict[str, str]] = {"beginner": "friendly", "intermediate": "professional", "advanced": "technical", "expert": "academic"}

WELCOME_MESSAGE: Final[str] = (
  "Hi! I'm your writing assistant and I'll help you create a great article for your blog.\n\n"
  "We'll go step by step: topic, article type, audience and length, then category. "
  "After a quick review I'll generate a draft you can edit before publishing.\n\n"
  "**What topic would you like to write about?**"
)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
  return datetime.now(UTC)


@dataclass(frozen=True)
class MessageResult:
  session: CreationSession
  reply: StageReply


@dataclass(frozen=True)
class GenerationOutcome:
  success: bool
  session: CreationSession
  error: GenerationFailure | None = None


@dataclass(frozen=True)
class DraftOverrides:
  title: str | None = None
  excerpt: str | None = None
  content: str | None = None


@dataclass(frozen=True)
class SavedDraft:
  session: CreationSession
  post: Post


def _dedupe_case_insensitive(values: list[str]) -> list[str]:
  seen: set[str] = set()
  unique: list[str] = []
  for value in values:
    cleaned = value.strip()
    if not cleaned or cleaned.lower() in seen:
      continue
    seen.add(cleaned.lower())
    unique.append(cleaned)
  return unique


def _agent_message(content: str, stage: Stage, now: datetime, metadata: dict | None = None) -> SessionMessage:
  return SessionMessage(role="agent", content=content, stage=stage, timestamp=now, metadata=metadata or {})


def _reply_metadata(reply: StageReply) -> dict:
  metadata: dict = {}
  if reply.questions:
    metadata["questions"] = msgspec.to_builtins(reply.questions)
  if reply.actions:
    metadata["actions"] = msgspec.to_builtins(reply.actions)
  if reply.summary is not None:
    metadata["summary"] = reply.summary
  return metadata


class BlogSessionOrchestrator:
  """Drive creation sessions through their stages and persist every accepted step.

  Writes to one session are serialised by a per-session asyncio lock, so a
  single process never interleaves two updates of the same session.
  """

  def __init__(self, *, sessions: SessionsRepository, catalog: CatalogRepository, gateway: GenerationGateway, session_ttl_hours: int = 24, clock: Clock | None = None) -> None:
    self._sessions = sessions
    self._catalog = catalog
    self._gateway = gateway
    self._session_ttl = timedelta(hours=session_ttl_hours)
    self._clock = clock or _utc_now
    # Entries vanish once no caller holds or waits on the lock.
    self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

  def _lock_for(self, session_id: str) -> asyncio.Lock:
    lock = self._locks.get(session_id)
    if lock is None:
      lock = asyncio.Lock()
      self._locks[session_id] = lock
    return lock

  async def _load_owned(self, session_id: str, user_id: str) -> CreationSession:
    session = await self._sessions.get_session(session_id)
    # Sessions owned by someone else are indistinguishable from missing ones.
    if session is None or session.user_id != user_id:
      raise SessionNotFoundError("Session not found.")
    return session

  async def _load_active(self, session_id: str, user_id: str) -> CreationSession:
    session = await self._load_owned(session_id, user_id)
    if not session.is_live(self._clock()):
      raise SessionExpiredError("Session is no longer active.")
    return session

  async def start_session(self, user_id: str, started_from: str | None = None) -> CreationSession:
    now = self._clock()
    session = CreationSession(
      session_id=generate_session_id(),
      user_id=user_id,
      status=SessionStatus.ACTIVE,
      stage=Stage.INITIALIZED,
      created_at=now,
      updated_at=now,
      expires_at=now + self._session_ttl,
      started_from=started_from,
    )
    session = move_to(session, Stage.TOPIC_DISCOVERY, now, messages=[_agent_message(WELCOME_MESSAGE, Stage.TOPIC_DISCOVERY, now)])
    await self._sessions.create_session(session)
    logger.info("Started creation session %s for user %s", session.session_id, user_id)
    return session

  async def process_message(self, session_id: str, user_id: str, message: str) -> MessageResult:
    """Handle one user reply for the session's current stage."""
    async with self._lock_for(session_id):
      session = await self._load_active(session_id, user_id)
      now = self._clock()
      user_message = SessionMessage(role="user", content=message, stage=session.stage, timestamp=now)
      session = msgspec.structs.replace(session, messages=[*session.messages, user_message], updated_at=now)

      handler = STAGE_HANDLERS.get(session.stage)
      if handler is None:
        reply = StageReply(success=False, message=f"No reply is expected while the session is in '{session.stage.value}'.", error_code="INVALID_STAGE")
        await self._sessions.save_session(session)
        return MessageResult(session=session, reply=reply)

      try:
        outcome = await handler(session, message, StageContext(catalog=self._catalog, now=now))
      except Exception:
        logger.exception("Stage handler failed session=%s stage=%s", session_id, session.stage.value)
        stored = await self._sessions.get_session(session_id)
        reply = StageReply(success=False, message="Something went wrong while processing your message. Please try again.", error_code="STAGE_ERROR")
        return MessageResult(session=stored or session, reply=reply)

      updated = outcome.session
      if outcome.reply.success:
        agent = _agent_message(outcome.reply.message, updated.stage, now, _reply_metadata(outcome.reply))
        updated = msgspec.structs.replace(updated, messages=[*updated.messages, agent])
      await self._sessions.save_session(updated)
      return MessageResult(session=updated, reply=outcome.reply)

  async def request_generation(self, session_id: str, user_id: str) -> CreationSession:
    """Validate that a session can generate and record a regeneration when one already completed."""
    async with self._lock_for(session_id):
      session = await self._load_active(session_id, user_id)
      if not session.collected.title or not session.collected.category:
        raise IncompleteSessionError("The session needs a title and a category before generating.")
      if session.stage is not Stage.GENERATING:
        check_transition(session.stage, Stage.GENERATING)

      if isinstance(session.generation, Completed):
        session = msgspec.structs.replace(session, regeneration_count=session.regeneration_count + 1, updated_at=self._clock())
        await self._sessions.save_session(session)
        logger.info("Regeneration %s requested for session %s", session.regeneration_count, session_id)
      return session

  async def _category_for(self, category_id: str | None) -> Category | None:
    if not category_id:
      return None
    categories = await self._catalog.list_active_categories()
    return next((category for category in categories if category.id == category_id), None)

  async def generate_content(self, session_id: str) -> GenerationOutcome:
    """Call the generation gateway for a session and store the draft or the failure."""
    async with self._lock_for(session_id):
      session = await self._sessions.get_session(session_id)
      now = self._clock()
      if session is None or not session.is_live(now):
        raise SessionNotFoundError("Session not found or not active.")
      if session.stage is not Stage.GENERATING:
        check_transition(session.stage, Stage.GENERATING)

      pending = Pending(generation_id=generate_generation_id(), started_at=now)
      session = msgspec.structs.replace(session, stage=Stage.GENERATING, status=SessionStatus.GENERATING, generation=pending, updated_at=now)
      await self._sessions.save_session(session)

      logger.info("Generation %s started for session %s", pending.generation_id, session_id)
      # Anything failing after Pending is stored must end as Failed, never stay Pending.
      try:
        completed = await self._complete_generation(session, pending)
      except Exception as exc:
        logger.error("Generation %s failed for session %s: %s", pending.generation_id, session_id, exc, exc_info=True)
        return await self._store_failure(session, pending, exc)
      return GenerationOutcome(success=True, session=completed)

  async def _complete_generation(self, session: CreationSession, pending: Pending) -> CreationSession:
    """Call the gateway, build and score the draft, and persist the completed session."""
    collected = session.collected
    category = await self._category_for(collected.category)
    request = GenerationRequest(
      title=collected.title or collected.topic or "",
      category=category.name if category else "General",
      style=AUDIENCE_STYLES.get(collected.audience or "", "professional"),
      word_count=collected.length or DEFAULT_LENGTH,
      keywords=list(collected.keywords),
      template=collected.template,
    )
    result = await self._gateway.generate_full_post(request)

    completed_at = self._clock()
    draft, report = self._build_draft(request.title, collected.category, list(collected.keywords), result.content, list(result.metadata.get("suggested_tags", [])))
    metadata = {**result.metadata, "score_report": asdict(report)}
    generation = Completed(generation_id=pending.generation_id, started_at=pending.started_at, completed_at=completed_at, content=result.content, draft=draft, metadata=metadata)

    message = f"Your article is ready!\n\n**{draft.title}**\n~{draft.word_count} words, {draft.reading_time} min read. Content score: {report.total}/100 ({report.grade}).\n\nReview it and save it as a draft when you're happy."
    session = move_to(
      session,
      Stage.GENERATION_COMPLETED,
      completed_at,
      status=SessionStatus.ACTIVE,
      generation=generation,
      messages=[*session.messages, _agent_message(message, Stage.GENERATION_COMPLETED, completed_at, {"generation_id": pending.generation_id, "score": report.total})],
    )
    await self._sessions.save_session(session)
    logger.info("Generation %s completed for session %s words=%s score=%s", pending.generation_id, session.session_id, draft.word_count, report.total)
    return session

  async def _store_failure(self, session: CreationSession, pending: Pending, exc: Exception) -> GenerationOutcome:
    now = self._clock()
    failure = GenerationFailure(code="GENERATION_ERROR", message=str(exc) or type(exc).__name__)
    generation = Failed(generation_id=pending.generation_id, started_at=pending.started_at, completed_at=now, error=failure)
    message = "I couldn't generate the content this time. Confirm again to retry."
    # collected is left as it was so a retry uses the same configuration.
    session = move_to(
      session,
      Stage.FINAL_CONFIRMATION,
      now,
      status=SessionStatus.ACTIVE,
      generation=generation,
      messages=[*session.messages, _agent_message(message, Stage.FINAL_CONFIRMATION, now, {"error": failure.code})],
    )
    await self._sessions.save_session(session)
    return GenerationOutcome(success=False, session=session, error=failure)

  @staticmethod
  def _build_draft(title: str, category_id: str | None, keywords: list[str], raw_content: str, suggested_tags: list[str]) -> tuple[Draft, ScoreReport]:
    html = markdown_to_html(raw_content)
    tags = _dedupe_case_insensitive([*suggested_tags, *keywords])[:MAX_DRAFT_TAGS]
    excerpt = generate_excerpt(html)
    reading_time = calculate_reading_time(html)

    report = score_content(ContentDocument(title=title, content=html, excerpt=excerpt, tags=tags, category=category_id, reading_time=reading_time))
    seo = SeoBlock(meta_title=generate_meta_title(title), meta_description=generate_meta_description(html), keywords=keywords or tags[:5], score=report.total)
    draft = Draft(
      title=title,
      content=html,
      excerpt=excerpt,
      category_id=category_id,
      seo=seo,
      reading_time=reading_time,
      word_count=count_words(strip_html(html)),
      tags=tags,
    )
    return draft, report

  async def _resolve_tags(self, names: list[str]) -> list[Tag]:
    resolved: list[Tag] = []
    for name in _dedupe_case_insensitive(names):
      tag = await self._catalog.get_tag_by_name(name)
      if tag is None:
        tag = Tag(id=generate_record_id(), name=name, slug=make_slug(name))
        await self._catalog.create_tag(tag)
      resolved.append(tag)
    return resolved

  async def save_draft(self, session_id: str, user_id: str, *, tags: list[str] | None = None, overrides: DraftOverrides | None = None) -> SavedDraft:
    """Create a draft post from the completed generation."""
    overrides = overrides or DraftOverrides()
    async with self._lock_for(session_id):
      session = await self._load_owned(session_id, user_id)
      now = self._clock()
      # A saved session may be saved again; any other closed or stale session may not.
      if session.status is not SessionStatus.COMPLETED and not session.is_live(now):
        raise SessionExpiredError("Session is no longer active.")
      generation = session.generation
      if not isinstance(generation, Completed):
        raise DraftNotReadyError("There is no generated content to save.")
      if session.stage is not Stage.DRAFT_SAVED:
        check_transition(session.stage, Stage.DRAFT_SAVED)
      if session.created_post_id:
        logger.warning("Session %s was already saved as post %s; creating another post", session_id, session.created_post_id)

      draft = generation.draft
      resolved = await self._resolve_tags(tags if tags is not None else list(draft.tags))
      title = overrides.title or draft.title
      content = overrides.content or draft.content
      post = Post(
        id=generate_record_id(),
        title=title,
        slug=make_slug(title),
        content=content,
        content_format=draft.content_format,
        excerpt=overrides.excerpt or draft.excerpt,
        category_id=draft.category_id,
        author_id=user_id,
        created_at=now,
        tag_ids=[tag.id for tag in resolved],
        seo=msgspec.to_builtins(draft.seo),
        reading_time=calculate_reading_time(content) if overrides.content else draft.reading_time,
        word_count=count_words(strip_html(content)) if overrides.content else draft.word_count,
        ai_score=draft.seo.score,
      )
      await self._catalog.create_post(post)

      agent = _agent_message(f"Draft saved! You can find **{title}** among your posts.", Stage.DRAFT_SAVED, now, {"post_id": post.id})
      if session.stage is Stage.DRAFT_SAVED:
        session = msgspec.structs.replace(session, created_post_id=post.id, updated_at=now, messages=[*session.messages, agent])
      else:
        session = move_to(session, Stage.DRAFT_SAVED, now, status=SessionStatus.COMPLETED, created_post_id=post.id, messages=[*session.messages, agent])
      await self._sessions.save_session(session)
      logger.info("Session %s saved as draft post %s with %s tags", session_id, post.id, len(resolved))
      return SavedDraft(session=session, post=post)

  async def cancel_session(self, session_id: str, user_id: str) -> CreationSession:
    async with self._lock_for(session_id):
      session = await self._load_owned(session_id, user_id)
      if session.stage is Stage.CANCELLED:
        return session
      session = cancel(session, self._clock())
      await self._sessions.save_session(session)
      logger.info("Session %s cancelled", session_id)
      return session

  async def get_session(self, session_id: str, user_id: str) -> CreationSession:
    return await self._load_owned(session_id, user_id)

  async def list_sessions(self, user_id: str, *, status: SessionStatus | None = None, page: int = 1, limit: int = 10) -> tuple[list[CreationSession], int]:
    return await self._sessions.list_sessions(user_id, status=status, limit=limit, offset=(page - 1) * limit)

  async def cleanup_expired_sessions(self, now: datetime | None = None) -> int:
    """Mark live sessions past their expiry as expired."""
    return await self._sessions.expire_sessions(now or self._clock())
