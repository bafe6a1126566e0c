"""Stamping workflow: resolve the revision once, then print it or patch a file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from revstamp_core.config import StampSettings
from revstamp_core.errors import (
    DirtyTreeRejectedError,
    InputMissingError,
    NoVcsBinaryError,
    UnresolvedRevisionError,
)
from revstamp_core.vcs import GitAdapter, RevisionInfo, locate_git

from .patcher import PatchResult, bracket_style_for, patch_file
from .template_engine import TemplateEngine

logger = logging.getLogger(__name__)


def resolve_working_copy(
    working_dir: Path,
    settings: Optional[StampSettings] = None,
    ignore_missing: bool = False,
) -> RevisionInfo:
    """Query git for ``working_dir``.

    A missing git binary raises :class:`NoVcsBinaryError` unless
    ``ignore_missing`` is set, in which case the unresolved value is
    returned. git's own error output is suppressed under ``ignore_missing``
    or the ``quiet`` setting.
    """
    settings = settings or StampSettings()
    quiet = settings.quiet or ignore_missing

    git = locate_git(configured=settings.git_executable, fallback_roots=settings.fallback_roots)
    if git is None:
        if not ignore_missing:
            raise NoVcsBinaryError("Git not installed or not found.")
        logger.debug("Git not found; continuing without revision")
        return RevisionInfo.unresolved()

    adapter = GitAdapter(git=git, timeout_ms=settings.timeout_ms, quiet=quiet)
    return adapter.get_revision(working_dir)


def ensure_revision(info: RevisionInfo, ignore_missing: bool = False) -> RevisionInfo:
    """Return a usable revision, substituting the sentinel when allowed."""
    if info.is_resolved:
        return info
    if ignore_missing:
        return RevisionInfo.sentinel()
    raise UnresolvedRevisionError("Not a Git working directory.")


def format_revision(
    template: str,
    info: RevisionInfo,
    ignore_missing: bool = False,
    engine: Optional[TemplateEngine] = None,
) -> str:
    info = ensure_revision(info, ignore_missing)
    return (engine or TemplateEngine()).render(template, info)


def stamp_file(
    input_path: Path,
    output_path: Path,
    info: RevisionInfo,
    ignore_missing: bool = False,
    stop_if_modified: bool = False,
    engine: Optional[TemplateEngine] = None,
) -> PatchResult:
    """Patch ``output_path`` from the template ``input_path``.

    Every check runs before the output is opened, so a rejected stamp
    leaves any existing output untouched.
    """
    info = ensure_revision(info, ignore_missing)

    if stop_if_modified and info.dirty:
        raise DirtyTreeRejectedError(
            "Git working directory contains uncommitted changes, stop requested by option."
        )

    input_path = Path(input_path)
    if not input_path.is_file():
        raise InputMissingError(f"Input file doesn't exist: {input_path}")

    bracket_style_for(output_path)

    return patch_file(input_path, output_path, info, engine=engine)
