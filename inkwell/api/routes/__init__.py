from . import blog_sessions, categories, content

__all__ = ["blog_sessions", "categories", "content"]
