from .base import RevisionInfo, VcsAdapter
from .git_adapter import GitAdapter, resolve_revision
from .locator import default_fallback_roots, locate_git

__all__ = [
    "GitAdapter",
    "RevisionInfo",
    "VcsAdapter",
    "default_fallback_roots",
    "locate_git",
    "resolve_revision",
]
