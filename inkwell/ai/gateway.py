"""Generation gateway: turns structured post parameters into a prompt and calls the model."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Final

from inkwell.ai.providers.base import AIModel
from inkwell.blog.errors import GenerationError
from inkwell.content.semantic import extract_keywords
from inkwell.content.templates import PromptParams, get_template, validate_content
from inkwell.content.text import strip_html

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE: Final[float] = 0.7
MAX_GENERATION_TOKENS: Final[int] = 3000

_HEADER_RE = re.compile(r"##|<h[2-6][^>]*>", re.IGNORECASE)
_LIST_RE = re.compile(r"^[-*]\s|<(?:ul|ol)[^>]*>", re.IGNORECASE | re.MULTILINE)
_CODE_RE = re.compile(r"```|<(?:pre|code)[^>]*>", re.IGNORECASE)
_BOLD_RE = re.compile(r"\*\*|<strong>", re.IGNORECASE)
_CONCLUSION_WORDS: Final[tuple[str, ...]] = ("conclusión", "conclusion", "resumen", "in summary", "summary")


@dataclass(frozen=True)
class GenerationRequest:
  title: str
  category: str = "General"
  style: str = "professional"
  word_count: int = 1200
  keywords: list[str] = field(default_factory=list)
  template: str | None = None


@dataclass(frozen=True)
class GenerationResult:
  content: str
  metadata: dict[str, Any]


def max_tokens_for(word_count: int) -> int:
  return min(word_count * 2, MAX_GENERATION_TOKENS)


def basic_seo_score(content: str, title: str) -> int:
  """Quick pre-score of raw model output; starts at 40 and caps at 100."""
  score = 40

  word_count = len(content.split())
  for threshold in (300, 600, 800):
    if word_count >= threshold:
      score += 5

  if _HEADER_RE.search(content):
    score += 10
  if _LIST_RE.search(content):
    score += 5
  if _CODE_RE.search(content):
    score += 5
  if _BOLD_RE.search(content):
    score += 3

  content_lower = content.lower()
  title_words = [word for word in title.lower().split(" ") if len(word) > 3]
  matches = sum(1 for word in title_words if word in content_lower)
  score += min(matches * 3, 12)

  paragraphs = [paragraph for paragraph in content.split("\n\n") if paragraph.strip()]
  if len(paragraphs) >= 4:
    score += 5
  if len(paragraphs) >= 6:
    score += 5

  if paragraphs:
    avg_words = sum(len(paragraph.split()) for paragraph in paragraphs) / len(paragraphs)
    if avg_words <= 80:
      score += 5
    if avg_words <= 60:
      score += 3

  if any(word in content_lower for word in _CONCLUSION_WORDS):
    score += 5

  return min(score, 100)


class GenerationGateway:
  """Thin adapter over an `AIModel`; no retries, failures surface as `GenerationError`."""

  def __init__(self, model: AIModel) -> None:
    self._model = model

  async def generate_full_post(self, request: GenerationRequest) -> GenerationResult:
    template = get_template(request.template)
    prompt = template.build_prompt(PromptParams(title=request.title, category=request.category, word_count=request.word_count, style=request.style, keywords=list(request.keywords)))
    max_tokens = max_tokens_for(request.word_count)

    logger.info("Generating post title=%r template=%s word_count=%s max_tokens=%s", request.title, template.key, request.word_count, max_tokens)
    try:
      response = await self._model.generate(prompt, temperature=GENERATION_TEMPERATURE, max_tokens=max_tokens)
    except Exception as exc:
      logger.error("Model call failed model=%s error_type=%s", getattr(self._model, "name", "unknown"), type(exc).__name__, exc_info=True)
      raise GenerationError(f"Content generation failed: {exc}") from exc

    content = (response.content or "").strip()
    if not content:
      raise GenerationError("Content generation returned an empty response")

    validation = validate_content(content, template.key)
    metadata = {
      "word_count": len(content.split()),
      "seo_score": basic_seo_score(content, request.title),
      "suggested_tags": [keyword.word for keyword in extract_keywords(strip_html(content), 10)[:5]],
      "template": template.key,
      "validation": asdict(validation),
      "generated_at": datetime.now(UTC).isoformat(),
    }
    if response.usage:
      metadata["usage"] = dict(response.usage)
    return GenerationResult(content=content, metadata=metadata)
