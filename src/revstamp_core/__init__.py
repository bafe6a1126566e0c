"""Core types for resolving working tree revision metadata."""

from .errors import (
    ConfigError,
    DirtyTreeRejectedError,
    InputMissingError,
    NoVcsBinaryError,
    RevstampError,
    UnresolvedRevisionError,
    UnsupportedOutputFormatError,
)
from .vcs import GitAdapter, RevisionInfo, locate_git, resolve_revision

__version__ = "0.3.0"

__all__ = [
    "ConfigError",
    "DirtyTreeRejectedError",
    "GitAdapter",
    "InputMissingError",
    "NoVcsBinaryError",
    "RevisionInfo",
    "RevstampError",
    "UnresolvedRevisionError",
    "UnsupportedOutputFormatError",
    "locate_git",
    "resolve_revision",
]
