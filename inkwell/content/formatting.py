"""Draft formatting helpers: HTML conversion, excerpts, slugs and reading time."""

from __future__ import annotations

import math
import re
from typing import Final

import markdown as md_lib
from slugify import slugify

from inkwell.content.text import collapse_whitespace, count_words, split_paragraphs, strip_html

WORDS_PER_MINUTE: Final[int] = 220
EXCERPT_MAX_LENGTH: Final[int] = 160
META_DESCRIPTION_MAX_LENGTH: Final[int] = 155
META_TITLE_MAX_LENGTH: Final[int] = 60

_HTML_MARKERS_RE = re.compile(r"<(?:h[1-6]|p)[\s>]", re.IGNORECASE)
_HTML_PARAGRAPH_RE = re.compile(r"<p[^>]*>(.*?)</p>", re.IGNORECASE | re.DOTALL)
_MARKDOWN_MARKUP_RE = re.compile(r"(\*\*|__|`+|^>\s?|!\[[^\]]*\]\([^)]*\))", re.MULTILINE)
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")


def looks_like_html(content: str) -> bool:
  return _HTML_MARKERS_RE.search(content) is not None


def markdown_to_html(content: str | None) -> str:
  """Convert Markdown model output to HTML, leaving HTML output untouched."""
  if not content:
    return ""
  if looks_like_html(content):
    return content
  return md_lib.markdown(content, extensions=["tables", "fenced_code"])


def _truncate(text: str, max_length: int) -> str:
  if len(text) <= max_length:
    return text
  return text[: max_length - 3].rstrip() + "..."


def _first_body_paragraph(content: str) -> str:
  if looks_like_html(content):
    for match in _HTML_PARAGRAPH_RE.finditer(content):
      text = strip_html(match.group(1))
      if text:
        return text
    return strip_html(content)

  for block in split_paragraphs(content):
    # Headings, fences and list blocks are not prose.
    if block.startswith(("#", "```", "- ", "* ", "|")):
      continue
    text = _MARKDOWN_LINK_RE.sub(r"\1", block)
    text = _MARKDOWN_MARKUP_RE.sub("", text)
    return collapse_whitespace(text)
  return collapse_whitespace(content)


def generate_excerpt(content: str | None, max_length: int = EXCERPT_MAX_LENGTH) -> str:
  """Take the first non-heading paragraph as plain text, cut to `max_length` with '...'."""
  if not content:
    return ""
  return _truncate(_first_body_paragraph(content), max_length)


def generate_meta_description(content: str | None) -> str:
  return generate_excerpt(content, META_DESCRIPTION_MAX_LENGTH)


def generate_meta_title(title: str) -> str:
  return title[:META_TITLE_MAX_LENGTH]


def make_slug(value: str) -> str:
  return slugify(value, max_length=80)


def calculate_reading_time(html_content: str | None) -> int:
  """Minutes to read at 220 words per minute, rounded up, never below one."""
  words = count_words(strip_html(html_content))
  return max(1, math.ceil(words / WORDS_PER_MINUTE))
