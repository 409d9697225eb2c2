"""Tests for deterministic dummy AI responses."""

from __future__ import annotations

import pytest

from inkwell.ai.providers.base import AIModel
from inkwell.ai.providers.openrouter import OpenRouterModel


def test_load_dummy_response_resolves_repo_fixtures(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("INKWELL_USE_DUMMY_BLOG_POST_RESPONSE", "1")
  monkeypatch.delenv("INKWELL_DUMMY_BLOG_POST_RESPONSE_PATH", raising=False)
  # The repo ships `fixtures/dummy_blog_post_response.md`.
  text = AIModel.load_dummy_response("BLOG_POST")
  assert text is not None
  assert text.lstrip().startswith("#")


def test_load_dummy_response_is_off_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.delenv("INKWELL_USE_DUMMY_BLOG_POST_RESPONSE", raising=False)
  assert AIModel.load_dummy_response("BLOG_POST") is None


def test_load_dummy_response_with_unreadable_path(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
  monkeypatch.setenv("INKWELL_USE_DUMMY_BLOG_POST_RESPONSE", "true")
  monkeypatch.setenv("INKWELL_DUMMY_BLOG_POST_RESPONSE_PATH", str(tmp_path / "missing.md"))
  assert AIModel.load_dummy_response("BLOG_POST") is None


@pytest.mark.anyio
async def test_model_returns_dummy_without_calling_the_api(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
  fixture = tmp_path / "post.md"
  fixture.write_text("# Canned post\n\nBody.", encoding="utf-8")
  monkeypatch.setenv("INKWELL_USE_DUMMY_BLOG_POST_RESPONSE", "yes")
  monkeypatch.setenv("INKWELL_DUMMY_BLOG_POST_RESPONSE_PATH", str(fixture))

  response = await OpenRouterModel("openai/gpt-oss-20b:free", api_key="test-key").generate("prompt", temperature=0.7, max_tokens=100)

  assert response.content == "# Canned post\n\nBody."
  assert response.usage is None
