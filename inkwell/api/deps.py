"""Shared FastAPI dependencies for the blog services built at startup."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from inkwell.blog.orchestrator import BlogSessionOrchestrator
from inkwell.services.cache import TTLCache
from inkwell.storage.blog_repo import CatalogRepository

logger = logging.getLogger(__name__)


def _service_unavailable(name: str) -> HTTPException:
  logger.error("%s requested before it was initialized", name)
  return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Blog service is not available")


def get_blog_orchestrator(request: Request) -> BlogSessionOrchestrator:
  """Return the orchestrator built by the lifespan."""
  orchestrator = getattr(request.app.state, "blog_orchestrator", None)
  if orchestrator is None:
    raise _service_unavailable("Blog orchestrator")
  return orchestrator


def get_catalog_repo(request: Request) -> CatalogRepository:
  catalog = getattr(request.app.state, "catalog_repo", None)
  if catalog is None:
    raise _service_unavailable("Catalog repository")
  return catalog


def get_category_cache(request: Request) -> TTLCache:
  cache = getattr(request.app.state, "category_cache", None)
  if cache is None:
    raise _service_unavailable("Category cache")
  return cache
