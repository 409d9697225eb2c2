"""Plain-text helpers shared by the scoring, tagging and formatting modules."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_BLOCK_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol", "pre", "blockquote", "div", "table", "tr"]
_INLINE_SPACE_RE = re.compile(r"[ \t\r\f\v\xa0]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n+")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_html_keep_paragraphs(markup: str | None) -> str:
  """Remove tags but keep block boundaries as blank lines."""
  if not markup:
    return ""
  soup = BeautifulSoup(markup, "html.parser")
  for node in soup(["script", "style"]):
    node.decompose()
  for line_break in soup.find_all("br"):
    line_break.replace_with("\n")
  for block in soup.find_all(_BLOCK_TAGS):
    block.append("\n\n")

  text = _INLINE_SPACE_RE.sub(" ", soup.get_text())
  lines = [line.strip() for line in text.split("\n")]
  return "\n".join(lines).strip()


def strip_html(markup: str | None) -> str:
  """Remove tags and collapse every whitespace run into a single space."""
  return collapse_whitespace(strip_html_keep_paragraphs(markup))


def collapse_whitespace(text: str) -> str:
  return _WHITESPACE_RE.sub(" ", text).strip()


def split_paragraphs(text: str) -> list[str]:
  """Split text on blank lines, dropping empty chunks."""
  return [chunk.strip() for chunk in _PARAGRAPH_SPLIT_RE.split(text) if chunk.strip()]


def count_words(text: str | None) -> int:
  """Count whitespace-separated tokens."""
  if not text:
    return 0
  return len(text.split())


def capitalize_first(value: str) -> str:
  """Uppercase the first character and leave the rest untouched."""
  if not value:
    return value
  return value[0].upper() + value[1:]
