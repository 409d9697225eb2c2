"""Domain errors raised by the guided blog-creation flow."""

from __future__ import annotations


class BlogError(Exception):
  """Base error carrying a stable client-facing code and an HTTP status."""

  code = "BLOG_ERROR"
  status_code = 400

  def __init__(self, message: str, *, code: str | None = None) -> None:
    super().__init__(message)
    self.message = message
    if code is not None:
      self.code = code


class SessionNotFoundError(BlogError):
  """The session does not exist or belongs to another user."""

  code = "SESSION_NOT_FOUND"
  status_code = 404


class SessionExpiredError(BlogError):
  """The session exists but is cancelled, completed or past its TTL."""

  code = "SESSION_EXPIRED"
  status_code = 410


class DraftNotReadyError(BlogError):
  code = "NO_CONTENT"
  status_code = 400


class IncompleteSessionError(BlogError):
  code = "INCOMPLETE_DATA"
  status_code = 400


class InvalidTransitionError(BlogError):
  code = "INVALID_TRANSITION"
  status_code = 409


class GenerationError(BlogError):
  """The external text-generation call failed."""

  code = "GENERATION_ERROR"
  status_code = 502
