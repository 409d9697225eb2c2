"""OpenRouter provider implementation using openai SDK."""

from __future__ import annotations

import logging
import os
from typing import Any, Final

from openai import AsyncOpenAI

from inkwell.ai.providers.base import AIModel, ModelResponse, Provider, SimpleModelResponse

logger = logging.getLogger(__name__)


class OpenRouterModel(AIModel):
  """OpenRouter chat-completions client."""

  def __init__(self, name: str, api_key: str | None = None, base_url: str | None = None) -> None:
    self.name: str = name

    api_key = api_key or os.getenv("OPENROUTER_API_KEY")
    if not api_key:
      raise ValueError("OPENROUTER_API_KEY environment variable is required")

    # OpenRouter uses the OpenAI-compatible API; attribution headers are optional.
    default_headers = {}
    referer = os.getenv("OPENROUTER_HTTP_REFERER")
    if referer:
      default_headers["HTTP-Referer"] = referer
    title = os.getenv("OPENROUTER_TITLE")
    if title:
      default_headers["X-Title"] = title

    self._client = AsyncOpenAI(api_key=api_key, base_url=base_url or "https://openrouter.ai/api/v1", default_headers=default_headers or None)

  async def generate(self, prompt: str, *, temperature: float | None = None, max_tokens: int | None = None) -> ModelResponse:
    """Generate text response from OpenRouter."""
    dummy = AIModel.load_dummy_response("BLOG_POST")
    if dummy is not None:
      logger.info("OpenRouter BLOG_POST dummy response (%d chars)", len(dummy))
      return SimpleModelResponse(content=dummy, usage=None)

    options: dict[str, Any] = {}
    if temperature is not None:
      options["temperature"] = temperature
    if max_tokens is not None:
      options["max_tokens"] = max_tokens

    response = await self._client.chat.completions.create(model=self.name, messages=[{"role": "user", "content": prompt}], **options)

    content = response.choices[0].message.content or ""
    logger.info("OpenRouter response model=%s chars=%d", self.name, len(content))
    usage = None
    if response.usage:
      usage = {"prompt_tokens": response.usage.prompt_tokens, "completion_tokens": response.usage.completion_tokens, "total_tokens": response.usage.total_tokens}

    return SimpleModelResponse(content=content, usage=usage)


class OpenRouterProvider(Provider):
  """OpenRouter provider."""

  _DEFAULT_MODEL: Final[str] = "meta-llama/llama-3.3-70b-instruct:free"
  _AVAILABLE_MODELS: Final[set[str]] = {
    "meta-llama/llama-3.3-70b-instruct:free",
    "meta-llama/llama-3.1-405b-instruct:free",
    "deepseek/deepseek-r1-0528:free",
    "openai/gpt-oss-120b:free",
    "openai/gpt-oss-20b:free",
    "google/gemma-3-27b-it:free",
  }

  def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
    self.name: str = "openrouter"
    self._api_key = api_key
    self._base_url = base_url

  def get_model(self, model: str | None = None) -> AIModel:
    """Return an OpenRouter model client."""
    model_name = model or self._DEFAULT_MODEL
    if model_name not in self._AVAILABLE_MODELS:
      raise ValueError(f"Unsupported OpenRouter model '{model_name}'.")
    return OpenRouterModel(model_name, api_key=self._api_key, base_url=self._base_url)
