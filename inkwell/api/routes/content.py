from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends

from inkwell.api.models import AnalyzeContentRequest
from inkwell.content.formatting import markdown_to_html
from inkwell.content.scoring import ContentDocument, score_content
from inkwell.content.tags import suggest_keywords, suggest_tags
from inkwell.content.templates import list_templates
from inkwell.content.text import strip_html
from inkwell.core.security import get_current_user

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/templates")
async def get_templates() -> dict[str, Any]:
  return {"templates": list_templates()}


@router.post("/analyze")
async def analyze_content(payload: AnalyzeContentRequest) -> dict[str, Any]:
  """Score a post and suggest tags and keywords for it."""
  html = markdown_to_html(payload.content)
  document = ContentDocument(
    title=payload.title,
    content=html,
    excerpt=payload.excerpt,
    tags=list(payload.tags),
    category=payload.category,
    featured_image=payload.featured_image,
    allow_comments=payload.allow_comments,
    reading_time=payload.reading_time,
  )
  report = score_content(document)
  clean_text = strip_html(html)
  return {
    "score": asdict(report),
    "tags": asdict(suggest_tags(clean_text, list(payload.tags))),
    "keywords": asdict(suggest_keywords(clean_text, payload.focus_keyphrase)),
  }
