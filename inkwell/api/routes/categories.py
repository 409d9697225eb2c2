import logging
from typing import Any

import msgspec
from fastapi import APIRouter, Depends, status

from inkwell.api.deps import get_catalog_repo, get_category_cache
from inkwell.api.models import CreateCategoryRequest
from inkwell.blog.models import Category
from inkwell.content.formatting import make_slug
from inkwell.core.security import AuthenticatedUser, get_current_user
from inkwell.services.cache import TTLCache
from inkwell.storage.blog_repo import CatalogRepository
from inkwell.utils.ids import generate_record_id

router = APIRouter()
logger = logging.getLogger("inkwell.api.routes.categories")

_ACTIVE_CATEGORIES_KEY = "categories:active"


@router.get("", dependencies=[Depends(get_current_user)])
async def list_categories(  # noqa: B008
  catalog: CatalogRepository = Depends(get_catalog_repo),  # noqa: B008
  cache: TTLCache = Depends(get_category_cache),  # noqa: B008
) -> dict[str, Any]:
  """List active categories sorted by name."""
  categories = cache.get(_ACTIVE_CATEGORIES_KEY)
  if categories is None:
    categories = msgspec.to_builtins(await catalog.list_active_categories())
    cache.set(_ACTIVE_CATEGORIES_KEY, categories)
  return {"categories": categories}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(  # noqa: B008
  payload: CreateCategoryRequest,
  current_user: AuthenticatedUser = Depends(get_current_user),  # noqa: B008
  catalog: CatalogRepository = Depends(get_catalog_repo),  # noqa: B008
  cache: TTLCache = Depends(get_category_cache),  # noqa: B008
) -> dict[str, Any]:
  category = Category(id=generate_record_id(), name=payload.name, slug=payload.slug or make_slug(payload.name), description=payload.description)
  await catalog.create_category(category)
  cache.invalidate()
  logger.info("Category %s (%s) created by %s", category.slug, category.id, current_user.uid)
  return {"category": msgspec.to_builtins(category)}
