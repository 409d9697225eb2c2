from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

MAX_DRAFT_TAGS = 20


def _require_text(value: str) -> str:
  if not value.strip():
    raise ValueError("Value must not be blank.")
  return value


class StartSessionRequest(BaseModel):
  """Optional context for a new creation session."""

  started_from: StrictStr | None = Field(default=None, max_length=200, description="Where in the client the user started the flow.", examples=["dashboard"])
  model_config = ConfigDict(extra="forbid")


class SessionMessageRequest(BaseModel):
  """A single user reply in the creation conversation."""

  message: StrictStr = Field(min_length=1, description="User reply for the current stage.", examples=["Docker for beginners"])
  model_config = ConfigDict(extra="forbid")

  @field_validator("message")
  @classmethod
  def message_not_blank(cls, value: str) -> str:
    return _require_text(value)


class SaveDraftRequest(BaseModel):
  """Optional edits applied when the generated draft is saved as a post."""

  tags: list[StrictStr] | None = Field(default=None, max_length=MAX_DRAFT_TAGS, description="Tag names; defaults to the draft's tags.")
  title: StrictStr | None = Field(default=None, min_length=1, max_length=200)
  excerpt: StrictStr | None = Field(default=None, min_length=1, max_length=500)
  content: StrictStr | None = Field(default=None, min_length=1)
  model_config = ConfigDict(extra="forbid")


class CreateCategoryRequest(BaseModel):
  name: StrictStr = Field(min_length=1, max_length=100, examples=["Web Development"])
  slug: StrictStr | None = Field(default=None, min_length=1, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
  description: StrictStr | None = Field(default=None, max_length=500)
  model_config = ConfigDict(extra="forbid")

  @field_validator("name")
  @classmethod
  def name_not_blank(cls, value: str) -> str:
    return _require_text(value).strip()


class AnalyzeContentRequest(BaseModel):
  """Post fields to score; content may be HTML or Markdown."""

  title: StrictStr | None = Field(default=None, max_length=300)
  content: StrictStr = Field(min_length=1)
  excerpt: StrictStr | None = Field(default=None, max_length=1000)
  tags: list[StrictStr] = Field(default_factory=list, max_length=50)
  category: StrictStr | None = None
  featured_image: StrictStr | None = None
  allow_comments: StrictBool = True
  reading_time: StrictInt | None = Field(default=None, ge=0)
  focus_keyphrase: StrictStr | None = Field(default=None, min_length=1, max_length=100)
  model_config = ConfigDict(extra="forbid")
