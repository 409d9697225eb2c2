"""Identifier utilities."""

from __future__ import annotations

import secrets
import string
import time
import uuid

_BASE36 = string.digits + string.ascii_lowercase


def generate_record_id() -> str:
  """Return a new identifier for catalog rows (categories, tags, posts)."""
  return str(uuid.uuid4())


def generate_nanoid(size: int = 16, *, alphabet: str = string.ascii_letters + string.digits) -> str:
  """Return a short non-sequential id suitable for public references."""
  return "".join(secrets.choice(alphabet) for _ in range(size))


def _timestamped_id(prefix: str) -> str:
  millis = int(time.time() * 1000)
  return f"{prefix}_{millis}_{generate_nanoid(9, alphabet=_BASE36)}"


def generate_session_id() -> str:
  """Return a new creation-session identifier (`sess_<epoch-ms>_<suffix>`)."""
  return _timestamped_id("sess")


def generate_generation_id() -> str:
  """Return a new generation-attempt identifier (`gen_<epoch-ms>_<suffix>`)."""
  return _timestamped_id("gen")
