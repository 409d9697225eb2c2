import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI

from inkwell.ai.gateway import GenerationGateway
from inkwell.ai.router import get_model_for_settings
from inkwell.blog.orchestrator import BlogSessionOrchestrator
from inkwell.config import Settings
from inkwell.core.database import dispose_engine, get_session_factory
from inkwell.core.firebase import initialize_firebase
from inkwell.core.logging import initialize_logging
from inkwell.services.cache import TTLCache
from inkwell.storage.postgres_catalog_repo import PostgresCatalogRepository
from inkwell.storage.postgres_sessions_repo import PostgresSessionsRepository


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging and build the blog services once uvicorn starts."""
  from inkwell.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("inkwell.core.lifespan")

  try:
    initialize_logging(settings)
    logger.info("Startup complete - logging verified.")
    initialize_firebase()
  except Exception:
    # Log initialization failures but allow the app to continue starting.
    logger.warning("Initial logging or Firebase setup failed; continuing startup.", exc_info=True)

  app.state.category_cache = TTLCache(settings.category_cache_ttl_seconds)
  await _build_blog_services(app, settings, logger=logger)

  yield

  await dispose_engine()


async def _build_blog_services(app: FastAPI, settings: Settings, *, logger: logging.Logger) -> None:
  """Attach the repositories and orchestrator to app.state, leaving them unset when a dependency is missing."""
  if get_session_factory() is None:
    logger.warning("Database not configured (INKWELL_PG_DSN=%s); blog routes will return 503.", _redact_dsn(settings.pg_dsn))
    return

  sessions = PostgresSessionsRepository()
  catalog = PostgresCatalogRepository()
  app.state.catalog_repo = catalog

  try:
    model = get_model_for_settings(settings)
  except ValueError:
    logger.warning("LLM provider %s could not be configured; blog sessions are unavailable.", settings.llm_provider, exc_info=True)
    return

  orchestrator = BlogSessionOrchestrator(sessions=sessions, catalog=catalog, gateway=GenerationGateway(model), session_ttl_hours=settings.session_ttl_hours)
  app.state.blog_orchestrator = orchestrator
  logger.info("Blog orchestrator ready provider=%s model=%s", settings.llm_provider, getattr(model, "name", "unknown"))

  try:
    expired = await orchestrator.cleanup_expired_sessions()
    logger.info("Expired-session sweep marked %s sessions", expired)
  except Exception:
    logger.warning("Expired-session sweep failed at startup.", exc_info=True)


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  user = parsed.username or ""
  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  netloc = f"{user}@{host}{port}" if user else f"{host}{port}"
  database = parsed.path.lstrip("/")
  path = f"/{database}" if database else ""
  return f"{parsed.scheme}://{netloc}{path}"
