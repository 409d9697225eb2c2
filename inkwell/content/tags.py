"""Tag and keyword suggestions derived from the semantic extractors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from inkwell.content.semantic import extract_entities, extract_keywords, extract_topics
from inkwell.content.text import capitalize_first

MAX_TAG_SUGGESTIONS: Final[int] = 10


@dataclass(frozen=True)
class TagSuggestion:
  tag: str
  source: str
  confidence: float
  reason: str


@dataclass(frozen=True)
class TagSuggestions:
  current: list[str]
  suggested: list[TagSuggestion]
  optimal: bool
  recommendation: str


@dataclass(frozen=True)
class KeywordSuggestion:
  keyword: str
  type: str
  frequency: int
  density: str
  recommendation: str


@dataclass(frozen=True)
class KeywordSuggestions:
  suggested: list[KeywordSuggestion] = field(default_factory=list)
  focus_keyphrase: str | None = None
  total_unique: int = 0


def _tag_recommendation(tag_count: int) -> str:
  if tag_count < 3:
    return "Add at least 3 tags for better SEO"
  if tag_count > 7:
    return "Reduce to at most 7 tags to avoid dilution"
  return "Tag count is optimal"


def suggest_tags(clean_text: str, existing_tags: list[str] | None = None) -> TagSuggestions:
  """Merge keyword, technology and topic candidates into a ranked tag list.

  Candidates whose lowercased name matches an existing tag, or an earlier
  candidate, are dropped. The list is sorted by confidence and capped at 10.
  """
  current = [tag.lower() for tag in existing_tags or []]
  candidates: list[TagSuggestion] = []

  for keyword in extract_keywords(clean_text, 15)[:5]:
    candidates.append(TagSuggestion(tag=capitalize_first(keyword.word), source="keyword", confidence=min(keyword.relevance * 10, 1), reason=f"Appears {keyword.frequency} times in the content"))

  for tech in extract_entities(clean_text).technologies:
    candidates.append(TagSuggestion(tag=capitalize_first(tech.name), source="technology", confidence=0.9, reason=f"Technology mentioned {tech.occurrences} times"))

  for topic in extract_topics(clean_text)[:3]:
    label = " ".join(capitalize_first(part) for part in topic.name.split("-"))
    candidates.append(TagSuggestion(tag=label, source="topic", confidence=topic.confidence, reason=f"Main topic of the content (weight {topic.weight})"))

  candidates.sort(key=lambda candidate: candidate.confidence, reverse=True)

  seen = set(current)
  suggested: list[TagSuggestion] = []
  for candidate in candidates:
    key = candidate.tag.lower()
    slug_key = key.replace(" ", "-")
    if key in seen or slug_key in seen:
      continue
    seen.update({key, slug_key})
    suggested.append(candidate)
    if len(suggested) == MAX_TAG_SUGGESTIONS:
      break

  return TagSuggestions(current=current, suggested=suggested, optimal=3 <= len(current) <= 7, recommendation=_tag_recommendation(len(current)))


def _focus_recommendation(occurrences: int, density: float) -> str:
  if occurrences == 0:
    return "The focus keyphrase does not appear in the content"
  if density > 3:
    return "Over-optimised: reduce the keyphrase density"
  if density < 0.5:
    return "Rarely used: mention the keyphrase more naturally"
  return "Optimal density (0.5-3%)"


def suggest_keywords(clean_text: str, focus_keyphrase: str | None = None) -> KeywordSuggestions:
  """Suggest long-tail keywords and check the focus keyphrase density."""
  keywords = extract_keywords(clean_text, 20)
  total_words = len(clean_text.split())
  if total_words == 0:
    return KeywordSuggestions(focus_keyphrase=focus_keyphrase)

  suggestions: list[KeywordSuggestion] = []
  for keyword in [keyword for keyword in keywords if len(keyword.word) > 6][:5]:
    ratio = keyword.frequency / total_words
    suggestions.append(
      KeywordSuggestion(
        keyword=keyword.word,
        type="long-tail",
        frequency=keyword.frequency,
        density=f"{ratio * 100:.2f}%",
        recommendation="High density, consider reducing" if ratio > 0.03 else "Optimal density",
      )
    )

  if focus_keyphrase:
    occurrences = len(re.findall(re.escape(focus_keyphrase.lower()), clean_text.lower()))
    density = occurrences / total_words * 100
    suggestions.append(KeywordSuggestion(keyword=focus_keyphrase, type="focus", frequency=occurrences, density=f"{density:.2f}%", recommendation=_focus_recommendation(occurrences, density)))

  resolved_focus = focus_keyphrase or (keywords[0].word if keywords else None)
  return KeywordSuggestions(suggested=suggestions, focus_keyphrase=resolved_focus, total_unique=len(keywords))
