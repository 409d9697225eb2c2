"""Schema package exports."""

from .blog import CategoryRow, CreationSessionRow, PostRow, TagRow

__all__ = ["CategoryRow", "CreationSessionRow", "PostRow", "TagRow"]
