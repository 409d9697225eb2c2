from __future__ import annotations

import pytest

from inkwell.services.cache import TTLCache


class _Ticker:
  def __init__(self) -> None:
    self.value = 0.0

  def __call__(self) -> float:
    return self.value


def test_entries_expire_after_ttl() -> None:
  ticker = _Ticker()
  cache = TTLCache(300, clock=ticker)
  cache.set("categories:active", ["web"])

  ticker.value = 299.9
  assert cache.get("categories:active") == ["web"]

  ticker.value = 300
  assert cache.get("categories:active") is None
  assert len(cache) == 0


def test_invalidate_one_key_or_all() -> None:
  cache = TTLCache(60)
  cache.set("a", 1)
  cache.set("b", 2)

  cache.invalidate("a")
  assert cache.get("a") is None
  assert cache.get("b") == 2

  cache.invalidate()
  assert len(cache) == 0


@pytest.mark.parametrize("ttl", [0, -5])
def test_rejects_non_positive_ttl(ttl: int) -> None:
  with pytest.raises(ValueError):
    TTLCache(ttl)
