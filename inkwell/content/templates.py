"""Named content templates used to shape generation prompts and validate output."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final

DEFAULT_TEMPLATE: Final[str] = "informative"

_LIST_RE = re.compile(r"^\s*(?:[-*]|\d+\.)\s", re.MULTILINE)


@dataclass(frozen=True)
class PromptParams:
  """Inputs every template prompt builder understands."""

  title: str
  category: str = "General"
  word_count: int = 1200
  style: str = "professional"
  keywords: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ContentTemplate:
  key: str
  name: str
  description: str
  structure: tuple[str, ...]
  seo_keywords: tuple[str, ...]
  min_word_count: int
  required_elements: tuple[str, ...]
  instructions: str

  def build_prompt(self, params: PromptParams) -> str:
    return _render_prompt(self, params)


@dataclass
class TemplateValidation:
  valid: bool = True
  errors: list[str] = field(default_factory=list)
  warnings: list[str] = field(default_factory=list)
  score: int = 0


_FORMAT_RULES = """FORMAT RULES:
- Use ## for main sections and ### for subsections
- Use **bold** for key terms
- Use bulleted lists for concepts and numbered lists for steps
- Keep paragraphs short (60-80 words)
- Wrap code in fenced blocks with a language tag when code is relevant
- Close with a clear call to action inviting readers to comment, subscribe or share"""


def _render_prompt(template: ContentTemplate, params: PromptParams) -> str:
  keywords_line = f"\nTarget keywords: {', '.join(params.keywords)}" if params.keywords else ""
  return (
    f"Write a {template.name.lower()} for a blog.\n\n"
    f"Title: {params.title}\n"
    f"Category: {params.category}\n"
    f"Tone: {params.style}\n"
    f"Length: about {params.word_count} words{keywords_line}\n\n"
    f"REQUIRED STRUCTURE:\n{template.instructions}\n\n"
    f"{_FORMAT_RULES}\n\n"
    "Return only the finished article in Markdown."
  )


TEMPLATES: Final[dict[str, ContentTemplate]] = {
  "tutorial": ContentTemplate(
    key="tutorial",
    name="Technical Tutorial",
    description="Step-by-step guides with code and hands-on examples",
    structure=("Introduction (context and goals)", "Prerequisites", "Detailed steps with code", "Practical examples", "Troubleshooting common problems", "Conclusion and next steps"),
    seo_keywords=("tutorial", "guide", "step by step", "how to", "example"),
    min_word_count=800,
    required_elements=("headers", "code", "lists", "bold"),
    instructions=(
      "## Introduction\n- The problem or need, what readers will build or learn\n"
      "## Prerequisites\n- Prior knowledge, tools and versions\n"
      "## Tutorial Steps\n### Step 1: <descriptive title>\n- Explanation followed by a commented code block\n### Step 2..N\n"
      "## Practical Examples\n- Real use cases and variations\n"
      "## Troubleshooting\n- Typical errors and their fixes\n"
      "## Conclusion\n- Summary, next steps and further resources"
    ),
  ),
  "guide": ContentTemplate(
    key="guide",
    name="Complete Guide",
    description="Thorough documentation of a single subject",
    structure=("Executive summary", "Fundamentals", "Key concepts", "Implementation", "Best practices", "Case studies", "Conclusion"),
    seo_keywords=("complete guide", "documentation", "manual", "reference"),
    min_word_count=1000,
    required_elements=("headers", "lists", "bold"),
    instructions=(
      "## Executive Summary\n- What the guide covers and who it is for\n"
      "## Fundamentals\n- Basic concepts and terminology with **bold definitions**\n"
      "## Key Concepts\n### Concept 1..N\n- Explanation, examples and why it matters\n"
      "## Implementation\n### Approach 1..N\n- Trade-offs and when to use each\n"
      "## Best Practices\n- Patterns to follow and anti-patterns to avoid\n"
      "## Case Studies\n- Real implementations and lessons learned\n"
      "## Conclusion\n- Key points and resources to go deeper"
    ),
  ),
  "technical": ContentTemplate(
    key="technical",
    name="Technical Article",
    description="In-depth analysis of a technology or concept",
    structure=("Introduction", "Technical context", "Detailed analysis", "Comparisons", "Implementation", "Conclusions"),
    seo_keywords=("analysis", "architecture", "performance", "comparison", "technical"),
    min_word_count=900,
    required_elements=("headers", "code", "lists", "bold"),
    instructions=(
      "## Introduction\n- The subject and why it matters now\n"
      "## Technical Context\n- History, the problem it solves and related concepts\n"
      "## Detailed Analysis\n### Architecture\n### Main Features\n### Comparison with Alternatives\n"
      "## Implementation and Use Cases\n- A commented code example and usage scenarios\n"
      "## Performance and Optimization\n- Metrics, techniques and trade-offs\n"
      "## Conclusions\n- Findings, recommendations and future trends"
    ),
  ),
  "informative": ContentTemplate(
    key="informative",
    name="Informative Post",
    description="General articles and industry news",
    structure=("Engaging introduction", "Development through subtopics", "Examples and cases", "Conclusion and call to action"),
    seo_keywords=("information", "guide", "advice", "tips", "how"),
    min_word_count=600,
    required_elements=("headers", "lists", "bold"),
    instructions=(
      "## Introduction\n- An opening hook and why the subject matters to the reader\n"
      "## <Subtopic 1>\n- Main point with data or examples\n### Key Points\n- A bulleted list of relevant aspects\n"
      "## <Subtopic 2>\n## <Subtopic 3>\n"
      "## Real Examples\n- Success stories and lessons learned\n"
      "## Conclusion and Next Steps\n- Summary and a clear call to action"
    ),
  ),
  "opinion": ContentTemplate(
    key="opinion",
    name="Analysis and Opinion",
    description="Well-argued opinion pieces and critical analysis",
    structure=("Main thesis", "Arguments", "Counterarguments", "Analysis", "Conclusion"),
    seo_keywords=("analysis", "opinion", "perspective", "evaluation", "critique"),
    min_word_count=800,
    required_elements=("headers", "lists", "bold"),
    instructions=(
      "## Main Thesis\n- Context and the central position\n"
      "## Arguments in Favor\n### Argument 1..3\n- Evidence and concrete examples\n"
      "## Counterarguments\n### Counterargument 1..N\n- Fair presentation and reasoned rebuttal\n"
      "## Critical Analysis\n- Balanced evaluation and nuance\n"
      "## Implications\n- Practical impact and trends\n"
      "## Conclusion\n- Final position and a question for the reader"
    ),
  ),
}

# Ordinal choices offered to users during the conversation.
TEMPLATE_ORDER: Final[tuple[str, ...]] = ("tutorial", "guide", "technical", "informative", "opinion")


def get_template(key: str | None) -> ContentTemplate:
  """Return the named template, falling back to the informative template."""
  if key and key in TEMPLATES:
    return TEMPLATES[key]
  return TEMPLATES[DEFAULT_TEMPLATE]


def list_templates() -> list[dict[str, object]]:
  return [
    {
      "key": template.key,
      "name": template.name,
      "description": template.description,
      "structure": list(template.structure),
      "min_word_count": template.min_word_count,
      "required_elements": list(template.required_elements),
    }
    for template in (TEMPLATES[key] for key in TEMPLATE_ORDER)
  ]


def _has_headers(content: str) -> bool:
  return "##" in content or re.search(r"<h[2-6][^>]*>", content, re.IGNORECASE) is not None


def _has_lists(content: str) -> bool:
  return _LIST_RE.search(content) is not None or re.search(r"<(?:ul|ol)[^>]*>", content, re.IGNORECASE) is not None


def _has_code(content: str) -> bool:
  return "```" in content or re.search(r"<(?:pre|code)[^>]*>", content, re.IGNORECASE) is not None


def _has_bold(content: str) -> bool:
  return "**" in content or re.search(r"<(?:strong|b)>", content, re.IGNORECASE) is not None


_ELEMENT_CHECKS: Final[dict[str, tuple[Callable[[str], bool], str, bool]]] = {
  # element: (detector, message, missing is an error)
  "headers": (_has_headers, "Missing section headers", True),
  "lists": (_has_lists, "Lists are recommended", False),
  "code": (_has_code, "No code blocks found", False),
  "bold": (_has_bold, "No bold key terms", False),
}


def validate_content(content: str, template_key: str | None) -> TemplateValidation:
  """Check generated text against the template's length and element requirements."""
  template = get_template(template_key)
  validation = TemplateValidation()

  word_count = len(content.split())
  if word_count < template.min_word_count:
    validation.warnings.append(f"Short content: {word_count} words (minimum {template.min_word_count})")
  else:
    validation.score += 20

  for element in template.required_elements:
    detector, message, is_error = _ELEMENT_CHECKS[element]
    if detector(content):
      validation.score += 20
    elif is_error:
      validation.errors.append(message)
      validation.valid = False
    else:
      validation.warnings.append(message)

  return validation
