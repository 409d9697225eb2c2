"""Base interfaces for AI providers and models."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[3]


class ModelResponse(Protocol):
  """Response contract for model outputs."""

  content: str
  usage: dict[str, int] | None


@dataclass
class SimpleModelResponse:
  """Minimal model response structure."""

  content: str
  usage: dict[str, int] | None = None


class AIModel(ABC):
  """Abstract base class for AI models."""

  name: str

  @abstractmethod
  async def generate(self, prompt: str, *, temperature: float | None = None, max_tokens: int | None = None) -> ModelResponse:
    """Generate a response for the given prompt."""

  @staticmethod
  def load_dummy_response(agent_key: str) -> str | None:
    """Return canned output when INKWELL_USE_DUMMY_<AGENT>_RESPONSE is enabled."""
    flag = os.getenv(f"INKWELL_USE_DUMMY_{agent_key}_RESPONSE", "")
    if flag.strip().lower() not in {"1", "true", "yes", "on"}:
      return None

    # An explicit path wins over the fixture shipped with the repo.
    raw_path = os.getenv(f"INKWELL_DUMMY_{agent_key}_RESPONSE_PATH")
    path = Path(raw_path) if raw_path else _REPO_ROOT / "fixtures" / f"dummy_{agent_key.lower()}_response.md"
    if not path.is_absolute():
      path = _REPO_ROOT / path

    try:
      return path.read_text(encoding="utf-8")
    except OSError:
      logger.warning("Dummy response for %s requested but %s is unreadable.", agent_key, path)
      return None


class Provider(ABC):
  """Abstract base class for AI providers."""

  name: str

  @abstractmethod
  def get_model(self, model: str | None = None) -> AIModel:
    """Return the model client for the provider."""
