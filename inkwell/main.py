from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from inkwell.api.routes import blog_sessions, categories, content
from inkwell.blog.errors import BlogError
from inkwell.config import get_settings
from inkwell.core.exceptions import blog_exception_handler, global_exception_handler, http_exception_handler, request_validation_exception_handler
from inkwell.core.json import InkwellJSONResponse
from inkwell.core.lifespan import lifespan
from inkwell.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

settings = get_settings()

app = FastAPI(default_response_class=InkwellJSONResponse, lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

app.add_middleware(CORSMiddleware, allow_origins=settings.allowed_origins, allow_credentials=True, allow_methods=["GET", "POST", "DELETE", "OPTIONS"], allow_headers=["content-type", "authorization"], expose_headers=["content-length"])


# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(BlogError, blog_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": "0.1.0"}


app.include_router(blog_sessions.router, prefix="/v1/blog/sessions", tags=["blog-sessions"])
app.include_router(categories.router, prefix="/v1/blog/categories", tags=["categories"])
app.include_router(content.router, prefix="/v1/content", tags=["content"])
