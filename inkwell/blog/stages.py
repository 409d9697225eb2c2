"""Stages of the guided post-creation conversation and the transitions between them."""

from __future__ import annotations

from enum import Enum
from typing import Final

from inkwell.blog.errors import InvalidTransitionError


class Stage(str, Enum):
  INITIALIZED = "initialized"
  TOPIC_DISCOVERY = "topic_discovery"
  TYPE_SELECTION = "type_selection"
  DETAILS_COLLECTION = "details_collection"
  CATEGORY_SELECTION = "category_selection"
  REVIEW_AND_CONFIRM = "review_and_confirm"
  FINAL_CONFIRMATION = "final_confirmation"
  GENERATING = "generating"
  GENERATION_COMPLETED = "generation_completed"
  DRAFT_SAVED = "draft_saved"
  CANCELLED = "cancelled"


class SessionStatus(str, Enum):
  ACTIVE = "active"
  GENERATING = "generating"
  COMPLETED = "completed"
  CANCELLED = "cancelled"
  EXPIRED = "expired"


STAGE_PROGRESS: Final[dict[Stage, int]] = {
  Stage.INITIALIZED: 5,
  Stage.TOPIC_DISCOVERY: 20,
  Stage.TYPE_SELECTION: 35,
  Stage.DETAILS_COLLECTION: 50,
  Stage.CATEGORY_SELECTION: 65,
  Stage.REVIEW_AND_CONFIRM: 80,
  Stage.FINAL_CONFIRMATION: 90,
  Stage.GENERATING: 95,
  Stage.GENERATION_COMPLETED: 100,
  Stage.DRAFT_SAVED: 100,
  Stage.CANCELLED: 0,
}

TERMINAL_STAGES: Final[frozenset[Stage]] = frozenset({Stage.DRAFT_SAVED, Stage.CANCELLED})

# Statuses in which a session still accepts work.
LIVE_STATUSES: Final[frozenset[SessionStatus]] = frozenset({SessionStatus.ACTIVE, SessionStatus.GENERATING})

_FORWARD_ORDER: Final[tuple[Stage, ...]] = (
  Stage.INITIALIZED,
  Stage.TOPIC_DISCOVERY,
  Stage.TYPE_SELECTION,
  Stage.DETAILS_COLLECTION,
  Stage.CATEGORY_SELECTION,
  Stage.REVIEW_AND_CONFIRM,
  Stage.FINAL_CONFIRMATION,
  Stage.GENERATING,
  Stage.GENERATION_COMPLETED,
  Stage.DRAFT_SAVED,
)


def _build_transitions() -> dict[Stage, frozenset[Stage]]:
  allowed: dict[Stage, set[Stage]] = {stage: set() for stage in Stage}
  for current, following in zip(_FORWARD_ORDER, _FORWARD_ORDER[1:], strict=False):
    allowed[current].add(following)

  allowed[Stage.REVIEW_AND_CONFIRM].update({Stage.DETAILS_COLLECTION, Stage.GENERATING})
  # A failed generation returns to confirmation so the user can retry.
  allowed[Stage.GENERATING].add(Stage.FINAL_CONFIRMATION)
  allowed[Stage.GENERATION_COMPLETED].add(Stage.GENERATING)

  for stage in Stage:
    if stage not in TERMINAL_STAGES:
      allowed[stage].add(Stage.CANCELLED)
  return {stage: frozenset(targets) for stage, targets in allowed.items()}


ALLOWED_TRANSITIONS: Final[dict[Stage, frozenset[Stage]]] = _build_transitions()


def can_transition(current: Stage, target: Stage) -> bool:
  return target in ALLOWED_TRANSITIONS[current]


def check_transition(current: Stage, target: Stage) -> None:
  """Raise `InvalidTransitionError` unless `current -> target` is allowed."""
  if not can_transition(current, target):
    raise InvalidTransitionError(f"Cannot move a session from '{current.value}' to '{target.value}'.")


def progress_for(stage: Stage) -> int:
  return STAGE_PROGRESS[stage]
