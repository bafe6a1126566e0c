"""Locate an installed git executable."""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

GIT_ENV_VAR = "REVSTAMP_GIT"

# Program Files style roots; each is globbed for git* install directories.
_WINDOWS_ROOT_VARS = ("ProgramFiles", "ProgramW6432", "ProgramFiles(x86)")
_POSIX_ROOTS = ("/opt", "/usr/local")


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def _binary_suffixes() -> List[Path]:
    if _is_windows():
        return [Path("bin") / "git.exe", Path("cmd") / "git.exe"]
    return [Path("bin") / "git"]


def default_fallback_roots() -> List[Path]:
    """Install roots probed after PATH, in order."""
    roots: List[Path] = []
    for var in _WINDOWS_ROOT_VARS:
        value = os.environ.get(var)
        if value:
            path = Path(value)
            if path not in roots:
                roots.append(path)
    if not _is_windows():
        roots.extend(Path(p) for p in _POSIX_ROOTS)
    return roots


def _existing_file(candidate: Path) -> Optional[Path]:
    try:
        if candidate.is_file():
            return candidate
    except OSError:
        return None
    return None


def _from_explicit(executable: Optional[str], search_path: Optional[str]) -> Optional[Path]:
    if not executable:
        return None
    candidate = Path(executable).expanduser()
    if candidate.parent != Path("."):
        found = _existing_file(candidate)
    else:
        which = shutil.which(executable, path=search_path)
        found = Path(which) if which else None
    if found is None:
        logger.warning(f"Configured git executable not found: {executable}")
    return found


def _from_path(search_path: Optional[str]) -> Optional[Path]:
    which = shutil.which("git", path=search_path)
    return Path(which) if which else None


def _from_roots(roots: Iterable[Path]) -> Optional[Path]:
    for root in roots:
        try:
            install_dirs = sorted(d for d in Path(root).glob("git*") if d.is_dir())
        except OSError:
            continue
        for install_dir in install_dirs:
            for suffix in _binary_suffixes():
                found = _existing_file(install_dir / suffix)
                if found is not None:
                    return found
    return None


def locate_git(
    executable: Optional[str] = None,
    fallback_roots: Optional[Sequence[Path]] = None,
    search_path: Optional[str] = None,
    configured: Optional[str] = None,
) -> Optional[Path]:
    """Find a git executable, or return None when every strategy fails.

    Strategies run in order and the first existing file wins:

    1. ``executable``, else the ``REVSTAMP_GIT`` environment variable, else
       the ``configured`` value from the config file
    2. ``git`` on the executable search path
    3. ``git*`` install directories under ``fallback_roots``
    4. ``git*`` install directories under the platform default roots
    """
    explicit = executable or os.environ.get(GIT_ENV_VAR) or configured
    strategies: List[Callable[[], Optional[Path]]] = [
        lambda: _from_explicit(explicit, search_path),
        lambda: _from_path(search_path),
        lambda: _from_roots(fallback_roots or []),
        lambda: _from_roots(default_fallback_roots()),
    ]

    for strategy in strategies:
        found = strategy()
        if found is not None:
            logger.debug(f"Using git executable {found}")
            return found

    logger.debug("No git executable found")
    return None
