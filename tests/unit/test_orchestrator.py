from __future__ import annotations

import asyncio
import gc
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from inkwell.ai.providers.base import SimpleModelResponse
from inkwell.blog.errors import DraftNotReadyError, IncompleteSessionError, InvalidTransitionError, SessionExpiredError, SessionNotFoundError
from inkwell.blog.models import Completed, Failed, Pending, Tag
from inkwell.blog.orchestrator import WELCOME_MESSAGE, DraftOverrides
from inkwell.blog.stages import SessionStatus, Stage

USER = "user-1"


async def _drive_to_review(orchestrator, *, category: str = "cat-web") -> str:
  session = await orchestrator.start_session(USER)
  await orchestrator.process_message(session.session_id, USER, "Next.js 14 App Router")
  await orchestrator.process_message(session.session_id, USER, "2")
  await orchestrator.process_message(session.session_id, USER, "Audiencia: avanzado, Longitud: 2000, Keywords: react, server components")
  await orchestrator.process_message(session.session_id, USER, category)
  return session.session_id


async def _drive_to_completed(orchestrator) -> str:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "sí, generar")
  outcome = await orchestrator.generate_content(session_id)
  assert outcome.success
  return session_id


@pytest.mark.anyio
async def test_start_session_greets_the_user(orchestrator, sessions_repo, clock) -> None:
  session = await orchestrator.start_session(USER, started_from="dashboard")

  assert session.stage is Stage.TOPIC_DISCOVERY
  assert session.status is SessionStatus.ACTIVE
  assert session.progress == 20
  assert session.expires_at == clock.now + timedelta(hours=24)
  assert session.started_from == "dashboard"
  assert [message.content for message in session.messages] == [WELCOME_MESSAGE]
  assert sessions_repo.sessions[session.session_id] == session


@pytest.mark.anyio
async def test_conversation_collects_every_answer(orchestrator) -> None:
  session = await orchestrator.start_session(USER)

  topic = await orchestrator.process_message(session.session_id, USER, "Next.js 14 App Router")
  assert topic.session.stage is Stage.TYPE_SELECTION
  assert topic.session.collected.title == "Next.js 14 App Router"
  assert [option.value for option in topic.reply.questions[0].options] == ["tutorial", "guide", "technical", "informative", "opinion"]

  template = await orchestrator.process_message(session.session_id, USER, "2")
  assert template.session.stage is Stage.DETAILS_COLLECTION
  assert template.session.collected.template == "guide"

  details = await orchestrator.process_message(session.session_id, USER, "Audiencia: avanzado, Longitud: 2000, Keywords: react, server components")
  assert details.session.stage is Stage.CATEGORY_SELECTION
  assert details.session.collected.audience == "advanced"
  assert details.session.collected.length == 2000
  assert details.session.collected.keywords == ["react", "server components"]
  # Inactive categories are not offered.
  assert [option.value for option in details.reply.questions[0].options] == ["cat-ai", "cat-cloud", "cat-web"]

  category = await orchestrator.process_message(session.session_id, USER, "cat-web")
  assert category.session.stage is Stage.REVIEW_AND_CONFIRM
  assert category.session.collected.category == "cat-web"
  assert category.reply.summary["category"] == "Web Development"
  assert category.reply.summary["reading_time"] == 10
  assert [action.id for action in category.reply.actions] == ["confirm_generate", "modify", "cancel"]

  confirm = await orchestrator.process_message(session.session_id, USER, "sí, generar")
  assert confirm.session.stage is Stage.GENERATING
  assert confirm.reply.should_generate is True

  # Welcome plus one user and one agent message per answer.
  assert len(confirm.session.messages) == 11
  assert [message.role for message in confirm.session.messages[-2:]] == ["user", "agent"]


@pytest.mark.anyio
async def test_category_ordinal_follows_sorted_active_categories(orchestrator) -> None:
  session_id = await _drive_to_review(orchestrator, category="2")
  session = await orchestrator.get_session(session_id, USER)
  assert session.collected.category == "cat-cloud"


@pytest.mark.anyio
async def test_category_can_be_named(orchestrator) -> None:
  session_id = await _drive_to_review(orchestrator, category='{"category": "artificial intelligence"}')
  session = await orchestrator.get_session(session_id, USER)
  assert session.collected.category == "cat-ai"


@pytest.mark.anyio
async def test_unknown_category_keeps_the_stage(orchestrator) -> None:
  session = await orchestrator.start_session(USER)
  for message in ("Docker basics", "tutorial", "principiante, corto"):
    await orchestrator.process_message(session.session_id, USER, message)

  result = await orchestrator.process_message(session.session_id, USER, "Archive")

  assert result.reply.success is False
  assert result.reply.error_code == "INVALID_CATEGORY"
  assert result.session.stage is Stage.CATEGORY_SELECTION
  assert result.session.collected.category is None
  assert result.session.messages[-1].role == "user"


@pytest.mark.anyio
async def test_message_in_generating_stage_is_rejected(orchestrator, sessions_repo) -> None:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "yes")

  result = await orchestrator.process_message(session_id, USER, "are you done?")

  assert result.reply.error_code == "INVALID_STAGE"
  assert result.session.stage is Stage.GENERATING
  assert sessions_repo.sessions[session_id].messages[-1].content == "are you done?"


@pytest.mark.anyio
async def test_handler_failure_leaves_stored_session_untouched(orchestrator, sessions_repo, catalog_repo) -> None:
  session = await orchestrator.start_session(USER)
  await orchestrator.process_message(session.session_id, USER, "Docker basics")
  await orchestrator.process_message(session.session_id, USER, "tutorial")
  before = sessions_repo.sessions[session.session_id]
  catalog_repo.list_active_categories = AsyncMock(side_effect=RuntimeError("catalog down"))

  result = await orchestrator.process_message(session.session_id, USER, "beginner")

  assert result.reply.success is False
  assert result.reply.error_code == "STAGE_ERROR"
  assert result.session == before
  assert sessions_repo.sessions[session.session_id] == before


@pytest.mark.anyio
async def test_review_modify_goes_back_to_details(orchestrator) -> None:
  session_id = await _drive_to_review(orchestrator)
  result = await orchestrator.process_message(session_id, USER, "quiero modificar algo")
  assert result.session.stage is Stage.DETAILS_COLLECTION
  assert result.session.collected.category == "cat-web"


@pytest.mark.anyio
async def test_review_cancel_closes_the_session(orchestrator) -> None:
  session_id = await _drive_to_review(orchestrator)
  result = await orchestrator.process_message(session_id, USER, "cancelar")
  assert result.session.stage is Stage.CANCELLED
  assert result.session.status is SessionStatus.CANCELLED

  with pytest.raises(SessionExpiredError):
    await orchestrator.process_message(session_id, USER, "hello again")


@pytest.mark.anyio
async def test_review_other_asks_for_final_confirmation(orchestrator) -> None:
  session_id = await _drive_to_review(orchestrator)
  result = await orchestrator.process_message(session_id, USER, "hmm, not sure")
  assert result.session.stage is Stage.FINAL_CONFIRMATION
  assert result.reply.actions[0].id == "start_generation"

  proceed = await orchestrator.process_message(session_id, USER, "go ahead")
  assert proceed.session.stage is Stage.GENERATING
  assert proceed.reply.should_generate is True


@pytest.mark.anyio
async def test_generate_content_builds_the_draft(orchestrator, model) -> None:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "sí, generar")

  outcome = await orchestrator.generate_content(session_id)

  assert outcome.success is True
  session = outcome.session
  assert session.stage is Stage.GENERATION_COMPLETED
  assert session.status is SessionStatus.ACTIVE
  assert isinstance(session.generation, Completed)

  draft = session.generation.draft
  assert draft.title == "Next.js 14 App Router"
  assert draft.category_id == "cat-web"
  assert draft.content.startswith("<h1>")
  assert draft.excerpt.startswith("Docker lets you package")
  assert len(draft.tags) <= 8
  assert "react" in draft.tags
  assert draft.seo.meta_title == "Next.js 14 App Router"
  assert draft.seo.keywords == ["react", "server components"]
  assert draft.seo.score == session.generation.metadata["score_report"]["total"]
  assert draft.reading_time >= 1

  kwargs = model.generate.await_args.kwargs
  assert kwargs["max_tokens"] == 3000
  assert "Tone: technical" in model.generate.await_args.args[0]


@pytest.mark.anyio
async def test_pending_generation_is_persisted_before_the_model_call(orchestrator, sessions_repo, model, sample_markdown) -> None:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "yes")
  seen = {}

  async def fake_generate(prompt, **kwargs):
    stored = sessions_repo.sessions[session_id]
    seen["generation"] = stored.generation
    seen["status"] = stored.status
    return SimpleModelResponse(content=sample_markdown)

  model.generate.side_effect = fake_generate
  await orchestrator.generate_content(session_id)

  assert isinstance(seen["generation"], Pending)
  assert seen["status"] is SessionStatus.GENERATING


@pytest.mark.anyio
async def test_generation_failure_allows_retry(orchestrator, model, sample_markdown) -> None:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "sí")
  model.generate.side_effect = RuntimeError("rate limited")

  failed = await orchestrator.generate_content(session_id)

  assert failed.success is False
  assert failed.error.code == "GENERATION_ERROR"
  assert failed.session.stage is Stage.FINAL_CONFIRMATION
  assert failed.session.status is SessionStatus.ACTIVE
  assert isinstance(failed.session.generation, Failed)
  assert failed.session.collected.keywords == ["react", "server components"]

  model.generate.side_effect = None
  model.generate.return_value = SimpleModelResponse(content=sample_markdown)
  retry = await orchestrator.process_message(session_id, USER, "try again")
  assert retry.reply.should_generate is True

  outcome = await orchestrator.generate_content(session_id)
  assert outcome.success is True
  assert outcome.session.stage is Stage.GENERATION_COMPLETED


@pytest.mark.anyio
async def test_catalog_failure_during_generation_is_stored_as_failed(orchestrator, sessions_repo, catalog_repo, model) -> None:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "yes")
  catalog_repo.list_active_categories = AsyncMock(side_effect=RuntimeError("db down"))

  outcome = await orchestrator.generate_content(session_id)

  assert outcome.success is False
  assert outcome.error.code == "GENERATION_ERROR"
  stored = sessions_repo.sessions[session_id]
  assert stored.status is SessionStatus.ACTIVE
  assert stored.stage is Stage.FINAL_CONFIRMATION
  assert isinstance(stored.generation, Failed)
  model.generate.assert_not_awaited()


@pytest.mark.anyio
async def test_draft_build_failure_is_stored_as_failed(orchestrator, sessions_repo, monkeypatch) -> None:
  session_id = await _drive_to_review(orchestrator)
  await orchestrator.process_message(session_id, USER, "yes")

  def broken_score(document):
    raise ValueError("scoring exploded")

  monkeypatch.setattr("inkwell.blog.orchestrator.score_content", broken_score)
  outcome = await orchestrator.generate_content(session_id)

  assert outcome.success is False
  stored = sessions_repo.sessions[session_id]
  assert isinstance(stored.generation, Failed)
  assert stored.generation.error.message == "scoring exploded"
  assert stored.status is SessionStatus.ACTIVE

  retry = await orchestrator.process_message(session_id, USER, "try again")
  assert retry.reply.should_generate is True


@pytest.mark.anyio
async def test_generate_content_for_unknown_session(orchestrator) -> None:
  with pytest.raises(SessionNotFoundError):
    await orchestrator.generate_content("missing")


@pytest.mark.anyio
async def test_request_generation_requires_title_and_category(orchestrator) -> None:
  session = await orchestrator.start_session(USER)
  with pytest.raises(IncompleteSessionError):
    await orchestrator.request_generation(session.session_id, USER)


@pytest.mark.anyio
async def test_request_generation_from_review_is_allowed(orchestrator) -> None:
  session_id = await _drive_to_review(orchestrator)
  session = await orchestrator.request_generation(session_id, USER)
  assert session.regeneration_count == 0


@pytest.mark.anyio
async def test_regeneration_is_counted(orchestrator) -> None:
  session_id = await _drive_to_completed(orchestrator)

  session = await orchestrator.request_generation(session_id, USER)
  assert session.regeneration_count == 1

  outcome = await orchestrator.generate_content(session_id)
  assert outcome.session.regeneration_count == 1
  assert outcome.session.stage is Stage.GENERATION_COMPLETED


@pytest.mark.anyio
async def test_save_draft_without_content(orchestrator, catalog_repo) -> None:
  session_id = await _drive_to_review(orchestrator)
  with pytest.raises(DraftNotReadyError):
    await orchestrator.save_draft(session_id, USER)
  assert catalog_repo.posts == []


@pytest.mark.anyio
async def test_save_draft_creates_post_and_tags(orchestrator, catalog_repo) -> None:
  session_id = await _drive_to_completed(orchestrator)
  catalog_repo.tags["Docker"] = Tag(id="tag-docker", name="Docker", slug="docker")

  saved = await orchestrator.save_draft(session_id, USER, tags=["Docker", "docker", "Server Components"], overrides=DraftOverrides(title="Next.js App Router in Depth"))

  post = saved.post
  assert catalog_repo.posts == [post]
  assert post.title == "Next.js App Router in Depth"
  assert post.slug == "next-js-app-router-in-depth"
  assert post.status == "draft"
  assert post.author_id == USER
  assert post.category_id == "cat-web"
  assert post.tag_ids[0] == "tag-docker"
  assert len(post.tag_ids) == 2
  assert catalog_repo.tags["Server Components"].slug == "server-components"
  assert post.ai_score == post.seo["score"]

  assert saved.session.stage is Stage.DRAFT_SAVED
  assert saved.session.status is SessionStatus.COMPLETED
  assert saved.session.created_post_id == post.id


@pytest.mark.anyio
async def test_save_draft_uses_draft_tags_by_default(orchestrator, catalog_repo) -> None:
  session_id = await _drive_to_completed(orchestrator)
  session = await orchestrator.get_session(session_id, USER)

  saved = await orchestrator.save_draft(session_id, USER)

  assert len(saved.post.tag_ids) == len(session.generation.draft.tags)
  assert set(catalog_repo.tags) == set(session.generation.draft.tags)


@pytest.mark.anyio
async def test_saving_twice_creates_a_second_post(orchestrator, catalog_repo) -> None:
  session_id = await _drive_to_completed(orchestrator)
  first = await orchestrator.save_draft(session_id, USER)
  second = await orchestrator.save_draft(session_id, USER)

  assert len(catalog_repo.posts) == 2
  assert second.session.created_post_id == second.post.id != first.post.id
  assert second.session.stage is Stage.DRAFT_SAVED


@pytest.mark.anyio
async def test_expired_session_cannot_be_saved(orchestrator, sessions_repo, catalog_repo, clock) -> None:
  session_id = await _drive_to_completed(orchestrator)
  clock.advance(timedelta(hours=25))
  assert await orchestrator.cleanup_expired_sessions() == 1

  with pytest.raises(SessionExpiredError):
    await orchestrator.save_draft(session_id, USER)

  assert catalog_repo.posts == []
  assert sessions_repo.sessions[session_id].status is SessionStatus.EXPIRED


@pytest.mark.anyio
async def test_session_past_ttl_cannot_be_saved_before_cleanup(orchestrator, catalog_repo, clock) -> None:
  session_id = await _drive_to_completed(orchestrator)
  clock.advance(timedelta(hours=25))
  with pytest.raises(SessionExpiredError):
    await orchestrator.save_draft(session_id, USER)
  assert catalog_repo.posts == []


@pytest.mark.anyio
async def test_sessions_of_other_users_are_not_found(orchestrator) -> None:
  session = await orchestrator.start_session(USER)
  with pytest.raises(SessionNotFoundError):
    await orchestrator.get_session(session.session_id, "someone-else")
  with pytest.raises(SessionNotFoundError):
    await orchestrator.process_message(session.session_id, "someone-else", "hi")


@pytest.mark.anyio
async def test_expired_session_rejects_messages(orchestrator, clock) -> None:
  session = await orchestrator.start_session(USER)
  clock.advance(timedelta(hours=25))
  with pytest.raises(SessionExpiredError):
    await orchestrator.process_message(session.session_id, USER, "Docker")


@pytest.mark.anyio
async def test_cancel_session_is_idempotent(orchestrator) -> None:
  session = await orchestrator.start_session(USER)
  cancelled = await orchestrator.cancel_session(session.session_id, USER)
  again = await orchestrator.cancel_session(session.session_id, USER)
  assert cancelled.stage is Stage.CANCELLED
  assert again == cancelled


@pytest.mark.anyio
async def test_saved_session_cannot_be_cancelled(orchestrator) -> None:
  session_id = await _drive_to_completed(orchestrator)
  await orchestrator.save_draft(session_id, USER)
  with pytest.raises(InvalidTransitionError):
    await orchestrator.cancel_session(session_id, USER)


@pytest.mark.anyio
async def test_list_sessions_pages_newest_first(orchestrator, clock) -> None:
  created = []
  for _ in range(3):
    created.append(await orchestrator.start_session(USER))
    clock.advance(timedelta(minutes=1))
  await orchestrator.start_session("other-user")

  page, total = await orchestrator.list_sessions(USER, page=1, limit=2)
  assert total == 3
  assert [session.session_id for session in page] == [created[2].session_id, created[1].session_id]

  second_page, _ = await orchestrator.list_sessions(USER, page=2, limit=2)
  assert [session.session_id for session in second_page] == [created[0].session_id]


@pytest.mark.anyio
async def test_cleanup_expires_stale_sessions(orchestrator, sessions_repo, clock) -> None:
  stale = await orchestrator.start_session(USER)
  cancelled = await orchestrator.start_session(USER)
  await orchestrator.cancel_session(cancelled.session_id, USER)
  clock.advance(timedelta(hours=25))
  fresh = await orchestrator.start_session(USER)

  assert await orchestrator.cleanup_expired_sessions() == 1
  assert sessions_repo.sessions[stale.session_id].status is SessionStatus.EXPIRED
  assert sessions_repo.sessions[cancelled.session_id].status is SessionStatus.CANCELLED
  assert sessions_repo.sessions[fresh.session_id].status is SessionStatus.ACTIVE

  listed, total = await orchestrator.list_sessions(USER, status=SessionStatus.EXPIRED)
  assert total == 1
  assert listed[0].session_id == stale.session_id


@pytest.mark.anyio
async def test_concurrent_messages_are_applied_one_at_a_time(orchestrator) -> None:
  session = await orchestrator.start_session(USER)

  first, second = await asyncio.gather(
    orchestrator.process_message(session.session_id, USER, "Rust ownership"),
    orchestrator.process_message(session.session_id, USER, "1"),
  )

  assert first.session.stage is Stage.TYPE_SELECTION
  assert second.session.stage is Stage.DETAILS_COLLECTION
  assert second.session.collected.topic == "Rust ownership"
  assert second.session.collected.template == "tutorial"
  assert len(second.session.messages) == 5


@pytest.mark.anyio
async def test_lock_registry_does_not_keep_unknown_sessions(orchestrator) -> None:
  for index in range(200):
    with pytest.raises(SessionNotFoundError):
      await orchestrator.process_message(f"missing-{index}", USER, "hello")
  gc.collect()
  assert len(orchestrator._locks) == 0


@pytest.mark.anyio
async def test_lock_registry_is_empty_after_a_finished_session(orchestrator) -> None:
  session_id = await _drive_to_completed(orchestrator)
  await orchestrator.save_draft(session_id, USER)
  gc.collect()
  assert session_id not in orchestrator._locks
