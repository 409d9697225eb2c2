"""Minimal .env support so local runs pick up INKWELL_* settings."""

from __future__ import annotations

import os
from pathlib import Path


def default_env_path() -> Path:
  """Return the .env path next to the project root."""
  return Path(__file__).resolve().parents[2] / ".env"


def parse_env_line(raw_line: str) -> tuple[str, str] | None:
  """Split one `KEY=value` line, ignoring comments, blanks and `export` prefixes."""
  line = raw_line.strip()
  if not line or line.startswith("#") or "=" not in line:
    return None

  line = line.removeprefix("export ").lstrip()
  key, _, value = line.partition("=")
  key = key.strip()
  if not key:
    return None

  value = value.strip()
  # Quoted values keep inner whitespace verbatim.
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    value = value[1:-1]

  return key, value


def load_env_file(path: Path, *, override: bool = False) -> None:
  """Populate os.environ from a .env file when it exists."""
  if not path.is_file():
    return

  for raw_line in path.read_text(encoding="utf-8").splitlines():
    parsed = parse_env_line(raw_line)
    if parsed is None:
      continue

    key, value = parsed
    if override or key not in os.environ:
      os.environ[key] = value
