"""Small in-process TTL cache for read-mostly catalog listings."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any


class TTLCache:
  """Map keys to values that expire `ttl_seconds` after they were stored."""

  def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
    if ttl_seconds <= 0:
      raise ValueError("ttl_seconds must be positive.")
    self._ttl = ttl_seconds
    self._clock = clock
    self._entries: dict[str, tuple[float, Any]] = {}

  def get(self, key: str) -> Any | None:
    entry = self._entries.get(key)
    if entry is None:
      return None
    expires_at, value = entry
    if self._clock() >= expires_at:
      del self._entries[key]
      return None
    return value

  def set(self, key: str, value: Any) -> None:
    self._entries[key] = (self._clock() + self._ttl, value)

  def invalidate(self, key: str | None = None) -> None:
    """Drop one key, or every key when none is given."""
    if key is None:
      self._entries.clear()
    else:
      self._entries.pop(key, None)

  def __len__(self) -> int:
    return len(self._entries)
