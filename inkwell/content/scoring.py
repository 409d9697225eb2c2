"""Heuristic content scoring: SEO, readability, structure and engagement.

All functions are pure. The aggregate is computed in integer arithmetic so the
same sub-scores always produce the same total and grade.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final, Literal

from inkwell.content.semantic import analyze_readability
from inkwell.content.text import count_words, split_paragraphs, strip_html, strip_html_keep_paragraphs

Priority = Literal["critical", "high", "medium", "low"]

# Sub-score weights as integer percentages.
WEIGHTS: Final[dict[str, int]] = {"seo": 35, "readability": 25, "structure": 25, "engagement": 15}

_H1_RE = re.compile(r"<h1[^>]*>", re.IGNORECASE)
_H2_RE = re.compile(r"<h2[^>]*>", re.IGNORECASE)
_LIST_RE = re.compile(r"<(?:ul|ol)[^>]*>", re.IGNORECASE)
_IMG_RE = re.compile(r"<img[^>]*>", re.IGNORECASE)
_LINK_RE = re.compile(r"<a[^>]*href", re.IGNORECASE)
_CTA_RE = re.compile(r"descargar|registr|suscrib|compartir|comentar|contactar|download|sign up|subscrib|share|comment|contact", re.IGNORECASE)
_SOCIAL_RE = re.compile(r"compartir|síguenos|redes sociales|share|follow us|social media", re.IGNORECASE)


@dataclass(frozen=True)
class ContentDocument:
  """The fields of a post that scoring looks at."""

  title: str | None
  content: str
  excerpt: str | None = None
  tags: list[str] = field(default_factory=list)
  category: str | None = None
  featured_image: str | None = None
  allow_comments: bool = True
  reading_time: int | None = None


@dataclass(frozen=True)
class Suggestion:
  field: str
  priority: Priority
  issue: str
  suggestion: str


@dataclass(frozen=True)
class SubScore:
  score: int
  improvements: list[Suggestion]
  status: str
  max_score: int = 100


@dataclass(frozen=True)
class ScoreReport:
  seo: SubScore
  readability: SubScore
  structure: SubScore
  engagement: SubScore
  total: int
  grade: str
  status: str
  breakdown: dict[str, int]


def _seo_status(score: int) -> str:
  if score >= 80:
    return "excellent"
  if score >= 60:
    return "good"
  if score >= 40:
    return "fair"
  return "poor"


def _issue_status(issue_count: int) -> str:
  if issue_count == 0:
    return "excellent"
  if issue_count <= 2:
    return "good"
  if issue_count <= 4:
    return "fair"
  return "poor"


def score_seo(document: ContentDocument) -> SubScore:
  """Award points for title, excerpt, image, tags, category and length targets."""
  improvements: list[Suggestion] = []
  score = 0

  title_length = len(document.title or "")
  if not document.title:
    improvements.append(Suggestion("title", "critical", "Missing title", "Add a descriptive title of 50-60 characters"))
  elif title_length < 30:
    improvements.append(Suggestion("title", "high", f"Title too short ({title_length} characters)", "Expand it to 50-60 characters"))
  elif title_length > 60:
    improvements.append(Suggestion("title", "medium", f"Title too long ({title_length} characters)", "Shorten it to 50-60 characters to avoid truncation"))
  else:
    score += 20
    if title_length < 50:
      improvements.append(Suggestion("title", "low", f"Title could be longer ({title_length} characters)", "50-60 characters is the ideal range"))

  excerpt_length = len(document.excerpt or "")
  if not document.excerpt:
    improvements.append(Suggestion("excerpt", "critical", "Missing meta description", "Add a 150-160 character summary"))
  elif excerpt_length < 120:
    improvements.append(Suggestion("excerpt", "high", f"Meta description too short ({excerpt_length} characters)", "Expand it to 150-160 characters"))
  elif excerpt_length > 160:
    improvements.append(Suggestion("excerpt", "medium", f"Meta description too long ({excerpt_length} characters)", "Shorten it to 150-160 characters"))
  else:
    score += 20
    if excerpt_length < 150:
      improvements.append(Suggestion("excerpt", "low", f"Meta description could be longer ({excerpt_length} characters)", "150-160 characters is the ideal range"))

  if document.featured_image:
    score += 15
  else:
    improvements.append(Suggestion("featured_image", "high", "No featured image", "Add a 1200x630 image for social previews"))

  tag_count = len(document.tags)
  if tag_count == 0:
    improvements.append(Suggestion("tags", "high", "No tags", "Add 3-7 relevant tags"))
  elif tag_count < 3:
    improvements.append(Suggestion("tags", "medium", f"Few tags ({tag_count})", "Add at least 3 tags"))
  elif tag_count > 7:
    improvements.append(Suggestion("tags", "low", f"Too many tags ({tag_count})", "Keep the 5-7 most relevant tags"))
  else:
    score += 15

  if document.category:
    score += 10
  else:
    improvements.append(Suggestion("category", "critical", "No category", "Assign a main category"))

  word_count = count_words(strip_html(document.content))
  if word_count < 300:
    improvements.append(Suggestion("content", "critical", f"Content too short ({word_count} words)", "Write at least 300 words"))
  elif word_count < 500:
    improvements.append(Suggestion("content", "medium", f"Short content ({word_count} words)", "Consider expanding to 800-1500 words"))
  elif word_count > 3000:
    improvements.append(Suggestion("content", "low", f"Very long content ({word_count} words)", "Consider splitting it into several posts"))
  else:
    score += 20
    if not 800 <= word_count <= 1500:
      improvements.append(Suggestion("content", "low", f"Content length is {word_count} words", "800-1500 words tends to rank best"))

  return SubScore(score=score, improvements=improvements, status=_seo_status(score))


def score_readability(document: ContentDocument) -> SubScore:
  readability = analyze_readability(strip_html(document.content))
  improvements: list[Suggestion] = []

  if readability.avg_sentence_length > 25:
    improvements.append(Suggestion("sentence_length", "high", f"Long sentences (average {readability.avg_sentence_length} words)", "Split long sentences"))
  if readability.avg_word_length > 7:
    improvements.append(Suggestion("word_complexity", "medium", "Complex vocabulary", "Prefer simpler words where possible"))
  if readability.reading_level in {"difficult", "very-difficult"}:
    improvements.append(Suggestion("reading_level", "medium", f"Reading level: {readability.reading_level}", "Simplify the language to reach a wider audience"))

  return SubScore(score=max(0, 100 - 10 * len(improvements)), improvements=improvements, status=_issue_status(len(improvements)))


def score_structure(document: ContentDocument) -> SubScore:
  """Look for headings, lists, images, links and over-long paragraphs in HTML."""
  markup = document.content or ""
  improvements: list[Suggestion] = []

  if not _H1_RE.search(markup):
    improvements.append(Suggestion("h1", "high", "No H1 heading", "Add a main H1 heading"))

  h2_count = len(_H2_RE.findall(markup))
  if h2_count == 0:
    improvements.append(Suggestion("h2", "medium", "No H2 subheadings", "Break the content up with H2 headings"))
  elif h2_count < 2:
    improvements.append(Suggestion("h2", "low", "Few subheadings", "Add more H2 headings"))

  if not _LIST_RE.search(markup):
    improvements.append(Suggestion("lists", "low", "No lists", "Use lists for structured information"))

  image_count = len(_IMG_RE.findall(markup))
  word_count = count_words(strip_html(markup))
  if image_count == 0 and word_count > 500:
    improvements.append(Suggestion("images", "medium", "No images", "Add an image every 300-500 words"))
  elif word_count > 1000 and image_count / (word_count / 300) < 0.5:
    improvements.append(Suggestion("images", "low", "Few images for the length", "Consider adding more illustrations"))

  if not _LINK_RE.search(markup):
    improvements.append(Suggestion("links", "low", "No links", "Link to relevant resources"))

  # Paragraphs are split before whitespace is collapsed.
  paragraphs = split_paragraphs(strip_html_keep_paragraphs(markup))
  long_paragraphs = sum(1 for paragraph in paragraphs if count_words(paragraph) > 150)
  if long_paragraphs > len(paragraphs) * 0.3:
    improvements.append(Suggestion("paragraphs", "medium", "Paragraphs too long", "Keep paragraphs under 100-150 words"))

  return SubScore(score=max(0, 100 - 10 * len(improvements)), improvements=improvements, status=_issue_status(len(improvements)))


def score_engagement(document: ContentDocument) -> SubScore:
  content = document.content or ""
  improvements: list[Suggestion] = []

  if not _CTA_RE.search(content):
    improvements.append(Suggestion("call_to_action", "medium", "No visible call to action", "End with a call to action such as comments or a subscription"))
  if not document.allow_comments:
    improvements.append(Suggestion("comments", "low", "Comments disabled", "Enable comments to encourage interaction"))
  if not _SOCIAL_RE.search(content):
    improvements.append(Suggestion("social_sharing", "low", "No social media mention", "Invite readers to share the post"))
  if not document.reading_time or document.reading_time > 15:
    improvements.append(Suggestion("reading_time", "low", "Reading time missing or too long", "Consider splitting it into a shorter series"))

  return SubScore(score=max(0, 100 - 15 * len(improvements)), improvements=improvements, status=_issue_status(len(improvements)))


def weighted_total(seo: int, readability: int, structure: int, engagement: int) -> int:
  """Weighted sum of the sub-scores rounded half-up to an integer."""
  weighted = WEIGHTS["seo"] * seo + WEIGHTS["readability"] * readability + WEIGHTS["structure"] * structure + WEIGHTS["engagement"] * engagement
  return (weighted + 50) // 100


def grade_for(total: int) -> str:
  if total >= 90:
    return "A+"
  if total >= 80:
    return "A"
  if total >= 70:
    return "B"
  if total >= 60:
    return "C"
  if total >= 50:
    return "D"
  return "F"


def status_for(total: int) -> str:
  if total >= 80:
    return "excellent"
  if total >= 60:
    return "good"
  if total >= 40:
    return "fair"
  return "needs-work"


def score_content(document: ContentDocument) -> ScoreReport:
  """Run every sub-score and aggregate them into a total, grade and status."""
  seo = score_seo(document)
  readability = score_readability(document)
  structure = score_structure(document)
  engagement = score_engagement(document)

  total = weighted_total(seo.score, readability.score, structure.score, engagement.score)
  return ScoreReport(
    seo=seo,
    readability=readability,
    structure=structure,
    engagement=engagement,
    total=total,
    grade=grade_for(total),
    status=status_for(total),
    breakdown={"seo": seo.score, "readability": readability.score, "structure": structure.score, "engagement": engagement.score},
  )
