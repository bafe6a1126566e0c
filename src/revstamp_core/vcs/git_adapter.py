"""Git VCS adapter."""

from __future__ import annotations

import logging
import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from .base import RevisionInfo
from .locator import locate_git

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 1000

LOG_ARGS = ["log", "-n", "1", "--format=format:%H %ci"]
STATUS_ARGS = ["status", "--porcelain"]

_LOG_LINE_RE = re.compile(r"^([0-9a-fA-F]{40}) ([0-9-]{10} [0-9:]{8} [0-9+-]{5})")


def parse_log_line(line: str) -> Optional[tuple[str, datetime]]:
    """Parse ``<hash> <date> <time> <offset>``; None if the line does not match."""
    match = _LOG_LINE_RE.match(line)
    if not match:
        return None
    try:
        timestamp = datetime.strptime(match.group(2), "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        return None
    return match.group(1).lower(), timestamp


def is_dirty_status(lines: Sequence[str]) -> bool:
    """Any non-blank porcelain line means the tree has changes."""
    return any(line.strip() for line in lines)


class GitAdapter:
    """Git VCS adapter.

    Every query is a separate ``git`` child process bounded by ``timeout_ms``;
    a child still running at the deadline is killed.
    """

    def __init__(
        self,
        git: Optional[Path] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        quiet: bool = False,
        executable: Optional[str] = None,
        fallback_roots: Optional[Sequence[Path]] = None,
    ):
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        self._git = git
        self._timeout_ms = timeout_ms
        self._quiet = quiet
        self._executable = executable
        self._fallback_roots = list(fallback_roots or [])

    def _resolve_binary(self) -> Optional[Path]:
        if self._git is None:
            self._git = locate_git(executable=self._executable, fallback_roots=self._fallback_roots)
        return self._git

    def _run(self, git: Path, args: List[str], cwd: Path) -> Optional[List[str]]:
        """Run one git query; None on launch failure or timeout."""
        try:
            result = subprocess.run(
                [str(git), *args],
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL if self._quiet else None,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout_ms / 1000.0,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"git {args[0]} did not finish within {self._timeout_ms} ms; killed")
            return None
        except OSError as e:
            logger.warning(f"Failed to run {git}: {e}")
            return None

        if result.returncode != 0:
            logger.debug(f"git {args[0]} exited with {result.returncode}")
        return result.stdout.splitlines()

    def get_revision(self, working_dir: Path) -> RevisionInfo:
        """Resolve the latest commit and dirty state for a working directory."""
        git = self._resolve_binary()
        if git is None:
            if not self._quiet:
                logger.error("Git not installed or not found.")
            return RevisionInfo.unresolved()

        lines = self._run(git, LOG_ARGS, working_dir)
        parsed = None
        for line in lines or []:
            parsed = parse_log_line(line)
            if parsed:
                break

        if parsed is None:
            logger.debug(f"No commit resolved in {working_dir}")
            return RevisionInfo.unresolved()

        commit_hash, timestamp = parsed
        logger.debug(f"Revision = {commit_hash}")
        logger.debug(f"RevTime  = {timestamp.isoformat()}")

        status = self._run(git, STATUS_ARGS, working_dir)
        dirty = is_dirty_status(status or [])
        logger.debug(f"isModified = {dirty}")

        return RevisionInfo(hash=commit_hash, timestamp=timestamp, dirty=dirty)


def resolve_revision(
    working_dir: Path,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    quiet: bool = False,
    git: Optional[Path] = None,
    executable: Optional[str] = None,
    fallback_roots: Optional[Sequence[Path]] = None,
) -> RevisionInfo:
    """Resolve revision metadata; returns ``RevisionInfo.unresolved()`` on any failure."""
    adapter = GitAdapter(
        git=git,
        timeout_ms=timeout_ms,
        quiet=quiet,
        executable=executable,
        fallback_roots=fallback_roots,
    )
    return adapter.get_revision(Path(working_dir))
