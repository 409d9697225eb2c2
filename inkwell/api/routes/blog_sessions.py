import logging
import math
from typing import Any

import msgspec
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from inkwell.api.deps import get_blog_orchestrator
from inkwell.api.models import SaveDraftRequest, SessionMessageRequest, StartSessionRequest
from inkwell.blog.errors import BlogError
from inkwell.blog.models import session_to_view
from inkwell.blog.orchestrator import BlogSessionOrchestrator, DraftOverrides
from inkwell.blog.stages import SessionStatus
from inkwell.config import Settings, get_settings
from inkwell.core.security import AuthenticatedUser, get_current_user

router = APIRouter()
logger = logging.getLogger("inkwell.api.routes.blog_sessions")


async def _run_generation(orchestrator: BlogSessionOrchestrator, session_id: str) -> None:
  """Background entry point; the response has already been sent."""
  try:
    outcome = await orchestrator.generate_content(session_id)
  except BlogError as exc:
    logger.warning("Generation for session %s did not run: %s (%s)", session_id, exc.message, exc.code)
    return
  except Exception:
    # Nothing awaits a background task; log instead of losing the error.
    logger.exception("Generation for session %s crashed", session_id)
    return
  if not outcome.success and outcome.error is not None:
    logger.info("Generation for session %s finished with %s", session_id, outcome.error.code)


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_session(  # noqa: B008
  payload: StartSessionRequest | None = None,
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  """Start a guided creation session and return the welcome message."""
  session = await orchestrator.start_session(current_user.uid, started_from=payload.started_from if payload else None)
  return {"session": session_to_view(session), "message": session.messages[-1].content}


@router.get("")
async def list_sessions(  # noqa: B008
  status_filter: SessionStatus | None = Query(default=None, alias="status"),  # noqa: B008
  page: int = Query(default=1, ge=1),  # noqa: B008
  limit: int = Query(default=10, ge=1, le=50),  # noqa: B008
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  """List the caller's sessions, newest first."""
  sessions, total = await orchestrator.list_sessions(current_user.uid, status=status_filter, page=page, limit=limit)
  return {
    "sessions": [session_to_view(session) for session in sessions],
    "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
  }


@router.get("/{session_id}")
async def get_session(  # noqa: B008
  session_id: str,
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  session = await orchestrator.get_session(session_id, current_user.uid)
  return {"session": session_to_view(session)}


@router.post("/{session_id}/message")
async def send_message(  # noqa: B008
  session_id: str,
  payload: SessionMessageRequest,
  background_tasks: BackgroundTasks,
  settings: Settings = Depends(get_settings),  # noqa: B008
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  """Handle one user reply and schedule generation when the conversation asks for it."""
  if len(payload.message) > settings.max_message_chars:
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Message must be at most {settings.max_message_chars} characters")

  result = await orchestrator.process_message(session_id, current_user.uid, payload.message)
  if result.reply.should_generate:
    background_tasks.add_task(_run_generation, orchestrator, session_id)
  return {"session": session_to_view(result.session), "response": msgspec.to_builtins(result.reply)}


@router.post("/{session_id}/generate", status_code=status.HTTP_202_ACCEPTED)
async def generate(  # noqa: B008
  session_id: str,
  background_tasks: BackgroundTasks,
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  """Schedule (re)generation of the draft for a configured session."""
  session = await orchestrator.request_generation(session_id, current_user.uid)
  background_tasks.add_task(_run_generation, orchestrator, session_id)
  return {"session": session_to_view(session), "message": "Content generation started"}


@router.post("/{session_id}/save", status_code=status.HTTP_201_CREATED)
async def save_draft(  # noqa: B008
  session_id: str,
  payload: SaveDraftRequest | None = None,
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  """Save the generated draft as a post owned by the caller."""
  payload = payload or SaveDraftRequest()
  overrides = DraftOverrides(title=payload.title, excerpt=payload.excerpt, content=payload.content)
  saved = await orchestrator.save_draft(session_id, current_user.uid, tags=payload.tags, overrides=overrides)
  return {"post": msgspec.to_builtins(saved.post), "session": session_to_view(saved.session)}


@router.delete("/{session_id}")
async def cancel_session(  # noqa: B008
  session_id: str,
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  orchestrator: BlogSessionOrchestrator = Depends(get_blog_orchestrator),  # noqa: B008
) -> dict[str, Any]:
  session = await orchestrator.cancel_session(session_id, current_user.uid)
  return {"session": session_to_view(session)}
