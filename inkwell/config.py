"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from inkwell.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_SUPPORTED_LLM_PROVIDERS = {"gemini", "openrouter"}


@dataclass(frozen=True)
class Settings:
  """Typed settings for the Inkwell service."""

  environment: str
  allowed_origins: tuple[str, ...]
  debug: bool
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  pg_dsn: str | None
  pg_connect_timeout: int
  firebase_project_id: str | None
  firebase_service_account_json_path: str | None
  llm_provider: str
  llm_model: str | None
  gemini_api_key: str | None
  openrouter_api_key: str | None
  session_ttl_hours: int
  max_message_chars: int
  category_cache_ttl_seconds: int


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    raise ValueError("INKWELL_ALLOWED_ORIGINS must be set to one or more origins.")

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if not origins:
    raise ValueError("INKWELL_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("INKWELL_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _positive_int(name: str, default: str) -> int:
  """Read an integer env var and reject zero or negative values."""
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("INKWELL_ENV", "development").lower()

  # Toggle verbose error output and diagnostics in non-production environments.
  debug = _parse_bool(os.getenv("INKWELL_DEBUG"))

  log_max_bytes = _positive_int("INKWELL_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = int(os.getenv("INKWELL_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("INKWELL_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
  log_http_4xx = _parse_bool(os.getenv("INKWELL_LOG_HTTP_4XX"))

  llm_provider = (os.getenv("INKWELL_LLM_PROVIDER") or "gemini").strip().lower()
  if llm_provider not in _SUPPORTED_LLM_PROVIDERS:
    raise ValueError(f"INKWELL_LLM_PROVIDER must be one of: {', '.join(sorted(_SUPPORTED_LLM_PROVIDERS))}.")

  session_ttl_hours = _positive_int("INKWELL_SESSION_TTL_HOURS", "24")
  max_message_chars = _positive_int("INKWELL_MAX_MESSAGE_CHARS", "2000")
  category_cache_ttl_seconds = _positive_int("INKWELL_CATEGORY_CACHE_TTL_SECONDS", "300")

  return Settings(
    environment=environment,
    allowed_origins=_parse_origins(os.getenv("INKWELL_ALLOWED_ORIGINS")),
    debug=debug,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=log_http_4xx,
    pg_dsn=os.getenv("INKWELL_PG_DSN") or os.getenv("DATABASE_URL"),
    pg_connect_timeout=_positive_int("INKWELL_PG_CONNECT_TIMEOUT", "5"),
    firebase_project_id=_optional_str(os.getenv("INKWELL_FIREBASE_PROJECT_ID")),
    firebase_service_account_json_path=_optional_str(os.getenv("INKWELL_FIREBASE_SERVICE_ACCOUNT_JSON_PATH")),
    llm_provider=llm_provider,
    llm_model=_optional_str(os.getenv("INKWELL_LLM_MODEL")),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    openrouter_api_key=_optional_str(os.getenv("OPENROUTER_API_KEY")),
    session_ttl_hours=session_ttl_hours,
    max_message_chars=max_message_chars,
    category_cache_ttl_seconds=category_cache_ttl_seconds,
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration like CORS."""
  # Keep database configuration isolated so migrations don't require unrelated env vars.
  debug = _parse_bool(os.getenv("INKWELL_DEBUG"))
  pg_connect_timeout = _positive_int("INKWELL_PG_CONNECT_TIMEOUT", "5")
  pg_dsn = os.getenv("INKWELL_PG_DSN") or os.getenv("DATABASE_URL")
  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)
