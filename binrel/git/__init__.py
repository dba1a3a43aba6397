"""Git operations used by the release pipeline."""

from .repository import GitError, Repository

__all__ = ["GitError", "Repository"]
