import stat
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from hypothesis import settings

from revstamp_core.vcs import RevisionInfo, locator

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("revstamp-tests", database=None)
settings.load_profile("revstamp-tests")

SAMPLE_HASH = "45d4e32f0b5c9a1e8d7f6a5b4c3d2e1f0a9b8c7d"
SAMPLE_TIME = datetime(2011, 12, 31, 14, 5, 9, tzinfo=timezone(timedelta(hours=1)))
SAMPLE_LOG_LINE = f"{SAMPLE_HASH} 2011-12-31 14:05:09 +0100"

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="fake git is a POSIX shell script")


def _heredoc(text: str) -> str:
    if not text:
        return "  :"
    return f"  cat <<'__OUT__'\n{text}\n__OUT__"


def write_fake_git(
    directory: Path,
    log: str = SAMPLE_LOG_LINE,
    status: str = "",
    hang: Optional[str] = None,
) -> Path:
    """Write an executable stand-in for git that answers ``log`` and ``status``.

    ``hang`` names the subcommand that sleeps instead of answering; the
    sleeping process records its pid in ``<directory>/hang.pid``.
    """
    directory.mkdir(parents=True, exist_ok=True)
    calls = directory / "calls.log"
    pid_file = directory / "hang.pid"

    def body(cmd: str, text: str) -> str:
        if hang == cmd:
            return f"  echo $$ > '{pid_file}'\n  exec sleep 30"
        return _heredoc(text)

    script = directory / "git"
    script.write_text(
        "#!/bin/sh\n"
        "PATH=\"/usr/bin:/bin:$PATH\"; export PATH\n"
        f"echo \"$1\" >> '{calls}'\n"
        "if [ \"$1\" = \"log\" ]; then\n"
        f"{body('log', log)}\n"
        "fi\n"
        "if [ \"$1\" = \"status\" ]; then\n"
        f"{body('status', status)}\n"
        "fi\n",
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def read_calls(directory: Path) -> list[str]:
    calls = directory / "calls.log"
    if not calls.exists():
        return []
    return calls.read_text(encoding="utf-8").split()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Hide every real git: empty PATH, no override, no default install roots."""
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()
    monkeypatch.setenv("PATH", str(empty_bin))
    monkeypatch.delenv(locator.GIT_ENV_VAR, raising=False)
    monkeypatch.delenv("REVSTAMP_CONFIG_PATH", raising=False)
    monkeypatch.setattr(locator, "default_fallback_roots", lambda: [])
    return empty_bin


@pytest.fixture
def sample_info():
    return RevisionInfo(hash=SAMPLE_HASH, timestamp=SAMPLE_TIME, dirty=False)


@pytest.fixture
def dirty_info():
    return RevisionInfo(hash=SAMPLE_HASH, timestamp=SAMPLE_TIME, dirty=True)
