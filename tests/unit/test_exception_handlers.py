"""Unit tests for API exception sanitization behavior."""

from __future__ import annotations

import json

import pytest
from starlette.requests import Request

from inkwell.blog.errors import GenerationError, SessionNotFoundError
from inkwell.core.exceptions import _sanitize_validation_errors, blog_exception_handler


def _request(request_id: str | None = "req-123") -> Request:
  scope = {"type": "http", "method": "POST", "path": "/v1/blog/sessions/abc/message", "headers": [], "query_string": b"", "state": {}}
  if request_id:
    scope["state"]["request_id"] = request_id
  return Request(scope)


def test_sanitize_validation_errors_removes_input_and_serializes_exception_ctx() -> None:
  """Ensure validation errors stay JSON-serializable and redact raw request payloads."""
  errors = [{"type": "value_error", "loc": ("body",), "msg": "Value error, Message must not be blank.", "input": {"message": "   "}, "ctx": {"error": ValueError("Message must not be blank."), "input": {"message": "   "}}}]
  sanitized = _sanitize_validation_errors(errors)
  assert "input" not in sanitized[0]
  assert sanitized[0]["ctx"]["error"] == "ValueError: Message must not be blank."
  assert "input" not in sanitized[0]["ctx"]
  assert sanitized[0]["loc"] == ["body"]


@pytest.mark.anyio
async def test_blog_exception_handler_renders_code_and_request_id() -> None:
  response = await blog_exception_handler(_request(), SessionNotFoundError("Session not found."))
  assert response.status_code == 404
  assert json.loads(response.body) == {"detail": {"error": "SESSION_NOT_FOUND", "message": "Session not found."}, "requestId": "req-123"}


@pytest.mark.anyio
async def test_blog_exception_handler_without_request_id() -> None:
  response = await blog_exception_handler(_request(None), GenerationError("Model unavailable"))
  assert response.status_code == 502
  assert json.loads(response.body) == {"detail": {"error": "GENERATION_ERROR", "message": "Model unavailable"}}
