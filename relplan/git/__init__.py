"""Git access for library checkouts."""

from .repository import GitError, Repository

__all__ = ["GitError", "Repository"]
