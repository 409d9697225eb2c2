"""Routing utilities for provider/model selection."""

from __future__ import annotations

from enum import Enum

from inkwell.ai.providers.base import AIModel, Provider
from inkwell.ai.providers.gemini import GeminiProvider
from inkwell.ai.providers.openrouter import OpenRouterProvider
from inkwell.config import Settings


class ProviderMode(str, Enum):
  """Supported provider modes."""

  GEMINI = "gemini"
  OPENROUTER = "openrouter"


def get_provider_for_mode(mode: str | ProviderMode, *, api_key: str | None = None) -> Provider:
  """Return a provider instance for the given mode."""
  key = mode.value if isinstance(mode, ProviderMode) else mode
  if key == ProviderMode.GEMINI.value:
    return GeminiProvider(api_key=api_key)
  if key == ProviderMode.OPENROUTER.value:
    return OpenRouterProvider(api_key=api_key)
  raise ValueError(f"Unsupported provider mode '{mode}'.")


def get_model_for_mode(mode: str | ProviderMode, model: str | None = None, *, api_key: str | None = None) -> AIModel:
  """Return a model client for the given mode and model name."""
  provider = get_provider_for_mode(mode, api_key=api_key)
  return provider.get_model(model)


def get_model_for_settings(settings: Settings) -> AIModel:
  """Build the blog generation model from configured provider settings."""
  api_key = settings.gemini_api_key if settings.llm_provider == ProviderMode.GEMINI.value else settings.openrouter_api_key
  return get_model_for_mode(settings.llm_provider, settings.llm_model, api_key=api_key)
