"""VCS abstraction base types."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

SENTINEL_HASH = "0" * 40
_HASH_RE = re.compile(r"^[0-9a-f]{40}$")


@dataclass(frozen=True)
class RevisionInfo:
    """Revision metadata of a working tree, resolved once per run."""
    hash: Optional[str]  # 40 lowercase hex chars, None when unresolved
    timestamp: Optional[datetime]  # commit time with its own UTC offset
    dirty: bool = False  # only meaningful when hash is set

    def __post_init__(self) -> None:
        if self.hash is not None and not _HASH_RE.match(self.hash):
            raise ValueError(f"hash must be 40 lowercase hex characters: {self.hash!r}")
        if self.timestamp is not None and self.timestamp.utcoffset() is None:
            raise ValueError("timestamp must carry a UTC offset")

    @property
    def is_resolved(self) -> bool:
        return self.hash is not None

    @classmethod
    def unresolved(cls) -> "RevisionInfo":
        return cls(hash=None, timestamp=None, dirty=False)

    @classmethod
    def sentinel(cls, now: Optional[datetime] = None) -> "RevisionInfo":
        """All-zero revision stamped with the current local time.

        Used when a build runs outside a working copy and the caller opted
        into ignoring the missing metadata.
        """
        if now is None:
            now = datetime.now().astimezone()
        elif now.utcoffset() is None:
            now = now.astimezone()
        return cls(hash=SENTINEL_HASH, timestamp=now, dirty=False)


class VcsAdapter(Protocol):
    """VCS adapter protocol."""

    def get_revision(self, working_dir: Path) -> RevisionInfo:
        """Resolve the latest commit and dirty state for a working directory."""
        ...
