"""Stage handlers for the guided creation conversation.

Each handler reads the user's reply for the current stage and returns the
agent reply together with the updated session. Handlers never persist; the
orchestrator saves the returned session only when the handler completes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

import msgspec

from inkwell.blog.intents import FinalIntent, ReviewIntent, classify_final_intent, classify_review_intent, generate_title_from_topic, parse_category_reference, parse_details, parse_template_choice
from inkwell.blog.models import Category, CollectedData, CreationSession
from inkwell.blog.stages import SessionStatus, Stage, check_transition
from inkwell.content.formatting import WORDS_PER_MINUTE
from inkwell.content.templates import get_template, list_templates
from inkwell.storage.blog_repo import CatalogRepository

logger = logging.getLogger(__name__)

AUDIENCE_LABELS: Final[dict[str, str]] = {"beginner": "Beginners", "intermediate": "Intermediate", "advanced": "Advanced", "expert": "Experts"}

LENGTH_OPTIONS: Final[tuple[tuple[int, str], ...]] = ((800, "Short"), (1200, "Medium"), (2000, "Long"), (3000, "Very long"))


class Option(msgspec.Struct, kw_only=True):
  value: str
  label: str
  description: str = ""


class Question(msgspec.Struct, kw_only=True):
  id: str
  question: str
  type: str
  required: bool = True
  options: list[Option] = msgspec.field(default_factory=list)
  placeholder: str | None = None


class Action(msgspec.Struct, kw_only=True):
  id: str
  label: str
  type: str
  description: str = ""


class StageReply(msgspec.Struct, kw_only=True):
  """What the agent says back after handling one user message."""

  success: bool
  message: str
  questions: list[Question] = msgspec.field(default_factory=list)
  actions: list[Action] = msgspec.field(default_factory=list)
  should_generate: bool = False
  error_code: str | None = None
  summary: dict[str, Any] | None = None


@dataclass(frozen=True)
class StageContext:
  catalog: CatalogRepository
  now: datetime


@dataclass(frozen=True)
class StageOutcome:
  session: CreationSession
  reply: StageReply


StageHandler = Callable[[CreationSession, str, StageContext], Awaitable[StageOutcome]]


def move_to(session: CreationSession, target: Stage, now: datetime, **changes: Any) -> CreationSession:
  """Return a copy of the session at `target` with `changes` applied in the same step."""
  check_transition(session.stage, target)
  logger.info("Session %s stage %s -> %s", session.session_id, session.stage.value, target.value)
  return msgspec.structs.replace(session, stage=target, updated_at=now, **changes)


def cancel(session: CreationSession, now: datetime) -> CreationSession:
  return move_to(session, Stage.CANCELLED, now, status=SessionStatus.CANCELLED)


def _template_question() -> Question:
  return Question(
    id="post_type",
    question="What kind of article do you want to write?",
    type="select",
    options=[Option(value=template["key"], label=str(template["name"]), description=str(template["description"])) for template in list_templates()],
  )


def _details_questions() -> list[Question]:
  return [
    Question(id="audience", question="Who is the article for?", type="select", options=[Option(value=key, label=label) for key, label in AUDIENCE_LABELS.items()]),
    Question(
      id="length",
      question="How long should it be?",
      type="select",
      options=[Option(value=str(words), label=f"{label} ({words} words)", description=f"~{math.ceil(words / WORDS_PER_MINUTE)} min read") for words, label in LENGTH_OPTIONS],
    ),
    Question(id="keywords", question="Any specific keywords? (optional)", type="tags", required=False, placeholder="Press Enter after each keyword"),
  ]


def _category_question(categories: list[Category]) -> Question:
  return Question(id="category", question="Pick a category", type="select", options=[Option(value=category.id, label=category.name, description=category.description or "") for category in categories])


def _review_actions() -> list[Action]:
  return [
    Action(id="confirm_generate", label="Yes, generate the content", type="primary", description="Start generating the article"),
    Action(id="modify", label="Modify the configuration", type="secondary", description="Change audience, length or keywords"),
    Action(id="cancel", label="Cancel", type="danger", description="Stop and come back later"),
  ]


def build_summary(collected: CollectedData, category: Category | None) -> dict[str, Any]:
  template = get_template(collected.template)
  length = collected.length or 0
  return {
    "title": collected.title,
    "type": template.name,
    "audience": AUDIENCE_LABELS.get(collected.audience or "", "General"),
    "length": length,
    "reading_time": math.ceil(length / WORDS_PER_MINUTE),
    "category": category.name if category else None,
    "keywords": list(collected.keywords),
    "structure": list(template.structure),
  }


def _summary_text(summary: dict[str, Any]) -> str:
  keywords = ", ".join(summary["keywords"]) or "None"
  structure = "\n".join(f"  {index}. {item}" for index, item in enumerate(summary["structure"], start=1))
  return (
    f"**Title:** {summary['title']}\n"
    f"**Type:** {summary['type']}\n"
    f"**Audience:** {summary['audience']}\n"
    f"**Length:** ~{summary['length']} words (~{summary['reading_time']} min read)\n"
    f"**Category:** {summary['category']}\n"
    f"**Keywords:** {keywords}\n\n"
    f"**Structure:**\n{structure}"
  )


def resolve_category(reference: str, categories: list[Category]) -> Category | None:
  """Find a category by 1-based ordinal, id, slug or case-insensitive name."""
  if reference.isdigit():
    index = int(reference) - 1
    if 0 <= index < len(categories):
      return categories[index]
  lowered = reference.lower()
  for category in categories:
    if reference == category.id or lowered in {category.slug.lower(), category.name.lower()}:
      return category
  return None


async def handle_topic_discovery(session: CreationSession, message: str, context: StageContext) -> StageOutcome:
  topic = message.strip()
  title = generate_title_from_topic(topic)
  collected = msgspec.structs.replace(session.collected, topic=topic, title=title)
  updated = move_to(session, Stage.TYPE_SELECTION, context.now, collected=collected)

  reply = StageReply(
    success=True,
    message=f'Great choice! **"{topic}"** is an interesting topic.\n\nWorking title: **"{title}"** (you can change it later).\n\nWhat kind of article do you want to write?',
    questions=[_template_question()],
  )
  return StageOutcome(session=updated, reply=reply)


async def handle_type_selection(session: CreationSession, message: str, context: StageContext) -> StageOutcome:
  choice = parse_template_choice(message)
  if choice.used_fallback:
    logger.debug("Session %s defaulted template to %s", session.session_id, choice.key)
  template = get_template(choice.key)
  collected = msgspec.structs.replace(session.collected, template=choice.key)
  updated = move_to(session, Stage.DETAILS_COLLECTION, context.now, collected=collected)

  outline = "\n".join(f"{index}. {item}" for index, item in enumerate(template.structure, start=1))
  reply = StageReply(success=True, message=f"You chose a **{template.name}**.\n\nThis format includes:\n{outline}\n\nNow a few details to tailor the content:", questions=_details_questions())
  return StageOutcome(session=updated, reply=reply)


async def handle_details_collection(session: CreationSession, message: str, context: StageContext) -> StageOutcome:
  details = parse_details(message)
  collected = msgspec.structs.replace(session.collected, audience=details.audience, length=details.length, keywords=list(details.keywords))
  categories = await context.catalog.list_active_categories()
  updated = move_to(session, Stage.CATEGORY_SELECTION, context.now, collected=collected)

  keywords = ", ".join(details.keywords) or "None"
  reply = StageReply(
    success=True,
    message=(
      f"Almost there.\n\n**Configuration so far:**\nType: {collected.template}\nAudience: {AUDIENCE_LABELS[details.audience]}\n"
      f"Length: ~{details.length} words\nKeywords: {keywords}\n\nLast question: **which blog category should it go in?**"
    ),
    questions=[_category_question(categories)],
  )
  return StageOutcome(session=updated, reply=reply)


async def handle_category_selection(session: CreationSession, message: str, context: StageContext) -> StageOutcome:
  categories = await context.catalog.list_active_categories()
  category = resolve_category(parse_category_reference(message), categories)
  if category is None:
    reply = StageReply(success=False, message="Category not found. Please pick one of the listed categories.", error_code="INVALID_CATEGORY", questions=[_category_question(categories)])
    return StageOutcome(session=session, reply=reply)

  collected = msgspec.structs.replace(session.collected, category=category.id)
  updated = move_to(session, Stage.REVIEW_AND_CONFIRM, context.now, collected=collected)
  summary = build_summary(collected, category)

  reply = StageReply(
    success=True,
    message=f"**Category: {category.name}**\n\nHere is what I am going to generate:\n\n{_summary_text(summary)}\n\nShall I generate the content now?",
    summary=summary,
    actions=_review_actions(),
  )
  return StageOutcome(session=updated, reply=reply)


async def _review_modify(session: CreationSession, context: StageContext) -> StageOutcome:
  updated = move_to(session, Stage.DETAILS_COLLECTION, context.now)
  reply = StageReply(success=True, message="Sure, let's go back. You can change the audience, the length or the keywords.", questions=_details_questions())
  return StageOutcome(session=updated, reply=reply)


async def _review_cancel(session: CreationSession, context: StageContext) -> StageOutcome:
  return StageOutcome(session=cancel(session, context.now), reply=StageReply(success=True, message="Session cancelled. Come back whenever you want to write."))


async def _review_confirm(session: CreationSession, context: StageContext) -> StageOutcome:
  updated = move_to(session, Stage.GENERATING, context.now)
  return StageOutcome(session=updated, reply=StageReply(success=True, message="Starting content generation...", should_generate=True))


async def _review_other(session: CreationSession, context: StageContext) -> StageOutcome:
  updated = move_to(session, Stage.FINAL_CONFIRMATION, context.now)
  reply = StageReply(success=True, message="Confirm to start the generation.", actions=[Action(id="start_generation", label="Start generation", type="primary")])
  return StageOutcome(session=updated, reply=reply)


REVIEW_BRANCHES: Final[dict[ReviewIntent, Callable[[CreationSession, StageContext], Awaitable[StageOutcome]]]] = {
  ReviewIntent.MODIFY: _review_modify,
  ReviewIntent.CANCEL: _review_cancel,
  ReviewIntent.CONFIRM: _review_confirm,
  ReviewIntent.OTHER: _review_other,
}


async def handle_review_and_confirm(session: CreationSession, message: str, context: StageContext) -> StageOutcome:
  intent = classify_review_intent(message)
  logger.debug("Session %s review intent %s", session.session_id, intent.value)
  return await REVIEW_BRANCHES[intent](session, context)


async def handle_final_confirmation(session: CreationSession, message: str, context: StageContext) -> StageOutcome:
  if classify_final_intent(message) is FinalIntent.CANCEL:
    return StageOutcome(session=cancel(session, context.now), reply=StageReply(success=True, message="Session cancelled."))
  updated = move_to(session, Stage.GENERATING, context.now)
  return StageOutcome(session=updated, reply=StageReply(success=True, message="Starting content generation...", should_generate=True))


STAGE_HANDLERS: Final[dict[Stage, StageHandler]] = {
  Stage.TOPIC_DISCOVERY: handle_topic_discovery,
  Stage.TYPE_SELECTION: handle_type_selection,
  Stage.DETAILS_COLLECTION: handle_details_collection,
  Stage.CATEGORY_SELECTION: handle_category_selection,
  Stage.REVIEW_AND_CONFIRM: handle_review_and_confirm,
  Stage.FINAL_CONFIRMATION: handle_final_confirmation,
}
