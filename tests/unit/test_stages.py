from __future__ import annotations

import pytest

from inkwell.blog.errors import InvalidTransitionError
from inkwell.blog.stages import ALLOWED_TRANSITIONS, STAGE_PROGRESS, TERMINAL_STAGES, Stage, can_transition, check_transition, progress_for


def test_progress_covers_every_stage() -> None:
  assert set(STAGE_PROGRESS) == set(Stage)
  assert progress_for(Stage.INITIALIZED) == 5
  assert progress_for(Stage.CATEGORY_SELECTION) == 65
  assert progress_for(Stage.GENERATION_COMPLETED) == 100
  assert progress_for(Stage.CANCELLED) == 0


def test_forward_order_and_extra_edges_are_allowed() -> None:
  assert can_transition(Stage.TOPIC_DISCOVERY, Stage.TYPE_SELECTION)
  assert can_transition(Stage.REVIEW_AND_CONFIRM, Stage.DETAILS_COLLECTION)
  assert can_transition(Stage.REVIEW_AND_CONFIRM, Stage.GENERATING)
  assert can_transition(Stage.GENERATING, Stage.FINAL_CONFIRMATION)
  assert can_transition(Stage.GENERATION_COMPLETED, Stage.GENERATING)


def test_skipping_stages_is_rejected() -> None:
  assert not can_transition(Stage.TOPIC_DISCOVERY, Stage.GENERATING)
  with pytest.raises(InvalidTransitionError) as exc_info:
    check_transition(Stage.TYPE_SELECTION, Stage.REVIEW_AND_CONFIRM)
  assert exc_info.value.code == "INVALID_TRANSITION"
  assert exc_info.value.status_code == 409


def test_terminal_stages_have_no_exits_and_everything_else_can_cancel() -> None:
  for stage in TERMINAL_STAGES:
    assert ALLOWED_TRANSITIONS[stage] == frozenset()
  for stage in set(Stage) - TERMINAL_STAGES:
    assert can_transition(stage, Stage.CANCELLED)
