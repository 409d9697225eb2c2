"""Provider implementations."""

from inkwell.ai.providers.base import AIModel, ModelResponse, Provider, SimpleModelResponse
from inkwell.ai.providers.gemini import GeminiModel, GeminiProvider
from inkwell.ai.providers.openrouter import OpenRouterModel, OpenRouterProvider

__all__ = ["AIModel", "ModelResponse", "SimpleModelResponse", "Provider", "GeminiModel", "GeminiProvider", "OpenRouterModel", "OpenRouterProvider"]
