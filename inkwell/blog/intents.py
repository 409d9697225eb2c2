"""Pure classifiers that turn free-form user replies into structured choices."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final

from inkwell.content.templates import DEFAULT_TEMPLATE, TEMPLATE_ORDER, TEMPLATES
from inkwell.content.text import capitalize_first

logger = logging.getLogger(__name__)

DEFAULT_AUDIENCE: Final[str] = "intermediate"
DEFAULT_LENGTH: Final[int] = 1200

AUDIENCES: Final[tuple[str, ...]] = ("beginner", "intermediate", "advanced", "expert")

# Checked in order; the first vocabulary hit wins.
_AUDIENCE_VOCABULARY: Final[tuple[tuple[tuple[str, ...], str], ...]] = (
  (("principiante", "beginner"), "beginner"),
  (("intermedio", "intermediate"), "intermediate"),
  (("avanzado", "advanced"), "advanced"),
  (("experto", "expert"), "expert"),
)

# "muy largo" must be tested before "largo".
_LENGTH_VOCABULARY: Final[tuple[tuple[tuple[str, ...], int], ...]] = (
  (("muy largo", "very long", "3000"), 3000),
  (("corto", "short", "800"), 800),
  (("medio", "medium", "1200"), 1200),
  (("largo", "long", "2000"), 2000),
)

_TEMPLATE_ALIASES: Final[dict[str, tuple[str, ...]]] = {
  "tutorial": ("tutorial",),
  "guide": ("guide", "guía", "guia"),
  "technical": ("technical", "técnico", "tecnico"),
  "informative": ("informative", "informativo"),
  "opinion": ("opinion", "opinión", "analysis", "análisis"),
}

_KEYWORDS_RE = re.compile(r"keywords?:?\s*([^\n]+)", re.IGNORECASE)
_WORD_RE = re.compile(r"\w+")


def _whole_terms(terms: tuple[str, ...]) -> re.Pattern[str]:
  return re.compile(r"(?<!\w)(?:" + "|".join(re.escape(term) for term in terms) + r")(?!\w)", re.IGNORECASE)


# Whole words only: "intermedio" is not "medio" and "longitud" is not "long".
_LENGTH_PATTERNS: Final[tuple[tuple[re.Pattern[str], int], ...]] = tuple((_whole_terms(vocabulary), value) for vocabulary, value in _LENGTH_VOCABULARY)

_AFFIRMATIVE_WORDS: Final[frozenset[str]] = frozenset({"sí", "si", "yes", "ok"})
_AFFIRMATIVE_FRAGMENTS: Final[tuple[str, ...]] = ("generar", "confirm", "generate")
_MODIFY_FRAGMENTS: Final[tuple[str, ...]] = ("modify", "modificar", "cambiar")


class ReviewIntent(str, Enum):
  MODIFY = "modify"
  CANCEL = "cancel"
  CONFIRM = "confirm"
  OTHER = "other"


class FinalIntent(str, Enum):
  CANCEL = "cancel"
  PROCEED = "proceed"


@dataclass(frozen=True)
class TemplateChoice:
  key: str
  used_fallback: bool = False


@dataclass(frozen=True)
class Details:
  audience: str = DEFAULT_AUDIENCE
  length: int = DEFAULT_LENGTH
  keywords: list[str] = field(default_factory=list)


def _normalize(message: str) -> str:
  return message.strip().lower()


def classify_review_intent(message: str) -> ReviewIntent:
  """Map a review-stage reply to an intent; modify wins over cancel, cancel over confirm."""
  text = _normalize(message)
  if any(fragment in text for fragment in _MODIFY_FRAGMENTS):
    return ReviewIntent.MODIFY
  # "cancel" also covers "cancelar".
  if "cancel" in text:
    return ReviewIntent.CANCEL
  words = set(_WORD_RE.findall(text))
  if words & _AFFIRMATIVE_WORDS or any(fragment in text for fragment in _AFFIRMATIVE_FRAGMENTS):
    return ReviewIntent.CONFIRM
  return ReviewIntent.OTHER


def classify_final_intent(message: str) -> FinalIntent:
  if "cancel" in _normalize(message):
    return FinalIntent.CANCEL
  return FinalIntent.PROCEED


def parse_template_choice(message: str) -> TemplateChoice:
  """Resolve a template key, a 1-based ordinal or free text naming a template.

  Anything unrecognised resolves to DEFAULT_TEMPLATE; that is a permissive
  policy, not a validation failure.
  """
  text = _normalize(message)
  if text in TEMPLATES:
    return TemplateChoice(key=text)

  if text.isdigit():
    index = int(text) - 1
    if 0 <= index < len(TEMPLATE_ORDER):
      return TemplateChoice(key=TEMPLATE_ORDER[index])

  words = set(_WORD_RE.findall(text))
  for key, aliases in _TEMPLATE_ALIASES.items():
    if words.intersection(aliases):
      return TemplateChoice(key=key)

  logger.debug("Unrecognised template choice %r; using %s", message, DEFAULT_TEMPLATE)
  return TemplateChoice(key=DEFAULT_TEMPLATE, used_fallback=True)


def _coerce_length(value: Any) -> int:
  try:
    length = int(value)
  except (TypeError, ValueError):
    return DEFAULT_LENGTH
  return length if length > 0 else DEFAULT_LENGTH


def _coerce_keywords(value: Any) -> list[str]:
  if isinstance(value, str):
    value = value.split(",")
  if not isinstance(value, list):
    return []
  return [str(item).strip() for item in value if str(item).strip()]


def _details_from_json(payload: dict[str, Any]) -> Details:
  audience = payload.get("audience")
  return Details(
    audience=audience if audience in AUDIENCES else DEFAULT_AUDIENCE,
    length=_coerce_length(payload.get("length")),
    keywords=_coerce_keywords(payload.get("keywords")),
  )


def _details_from_text(message: str) -> Details:
  text = message.lower()
  audience = next((value for vocabulary, value in _AUDIENCE_VOCABULARY if any(term in text for term in vocabulary)), DEFAULT_AUDIENCE)
  # Keyword values are free text and must not pick the length.
  length_text = _KEYWORDS_RE.sub("", message)
  length = next((value for pattern, value in _LENGTH_PATTERNS if pattern.search(length_text)), DEFAULT_LENGTH)

  keywords: list[str] = []
  match = _KEYWORDS_RE.search(message)
  if match:
    keywords = _coerce_keywords(match.group(1))
  return Details(audience=audience, length=length, keywords=keywords)


def parse_details(message: str) -> Details:
  """Read audience, length and keywords from a JSON object or free text."""
  try:
    payload = json.loads(message)
  except ValueError:
    payload = None
  if isinstance(payload, dict):
    return _details_from_json(payload)
  return _details_from_text(message)


def parse_category_reference(message: str) -> str:
  """Extract the category reference from raw text or a `{"category": ...}` payload."""
  reference = message.strip()
  try:
    payload = json.loads(reference)
  except ValueError:
    return reference
  if isinstance(payload, dict) and payload.get("category") is not None:
    return str(payload["category"]).strip()
  if isinstance(payload, int):
    return str(payload)
  return reference


def generate_title_from_topic(topic: str) -> str:
  """Capitalise the first character of the trimmed topic; applying it twice changes nothing."""
  return capitalize_first(topic.strip())
