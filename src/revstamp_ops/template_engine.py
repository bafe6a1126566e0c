"""
template_engine.py - Placeholder expansion for revision stamps.

Supports:
- {!} and {!:text} for the dirty marker
- {commit} and {commit:n} (n = 5..40) for the commit hash
- {date}, {date:ymd-} and the {time:...} family for the commit timestamp
- {xmin:year} and {xmin:year:len} for hex minutes since Jan 1 of a year

Anything else is left as written.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Tuple

from revstamp_core.vcs import RevisionInfo

# Fixed tokens and the strftime pattern of the timestamp they expand to.
TIME_TOKENS: List[Tuple[str, str]] = [
    ("{date}", "%Y%m%d"),
    ("{date:ymd-}", "%Y-%m-%d"),
    ("{time}", "%H%M%S"),
    ("{time:hms}", "%H%M%S"),
    ("{time:hms:}", "%H:%M:%S"),
    ("{time:hm}", "%H%M"),
    ("{time:hm:}", "%H:%M"),
    ("{time:h}", "%H"),
    ("{time:o}", "%z"),
]

DIRTY_TEXT_RE = re.compile(r"\{!:([^}]*)\}")
COMMIT_PREFIX_RE = re.compile(r"\{commit:(40|[1-3][0-9]|[5-9])\}")
XMIN_RE = re.compile(r"\{xmin:([0-9]{4})\}")
XMIN_WIDTH_RE = re.compile(r"\{xmin:([0-9]{4}):([0-9]{1,2})\}")


def hex_minutes(timestamp: datetime, base_year: int, length: int = 1) -> str:
    """Minutes from Jan 1 ``base_year`` to ``timestamp`` as zero-padded hex.

    The epoch is midnight at the timestamp's own UTC offset, so the value does
    not depend on the machine running the build. Negative spans get a ``-``
    in front of the padded magnitude.
    """
    epoch = datetime(base_year, 1, 1, tzinfo=timestamp.tzinfo)
    minutes = int((timestamp - epoch) / timedelta(minutes=1))
    digits = format(abs(minutes), "x").rjust(length, "0")
    return "-" + digits if minutes < 0 else digits


class TemplateEngine:
    def render(self, template: str, info: RevisionInfo) -> str:
        """Expand every recognized directive in ``template``."""
        value = template.replace("{!}", "!" if info.dirty else "")
        if info.hash is not None:
            value = value.replace("{commit}", info.hash)
        else:
            value = value.replace("{commit}", "")

        timestamp = info.timestamp
        if timestamp is not None:
            for token, pattern in TIME_TOKENS:
                if token in value:
                    value = value.replace(token, timestamp.strftime(pattern))

        value = DIRTY_TEXT_RE.sub(lambda m: m.group(1) if info.dirty else "", value)
        value = COMMIT_PREFIX_RE.sub(lambda m: (info.hash or "")[: int(m.group(1))], value)

        if timestamp is not None:
            value = XMIN_RE.sub(self._xmin(timestamp, width=False), value)
            value = XMIN_WIDTH_RE.sub(self._xmin(timestamp, width=True), value)
        return value

    @staticmethod
    def _xmin(timestamp: datetime, width: bool) -> Callable[[re.Match], str]:
        def replace(match: re.Match) -> str:
            length = int(match.group(2)) if width else 1
            try:
                return hex_minutes(timestamp, int(match.group(1)), length)
            except (ValueError, OverflowError):
                # year 0000 or an epoch outside the datetime range
                return match.group(0)
        return replace


_default_engine = TemplateEngine()


def render(template: str, info: RevisionInfo) -> str:
    return _default_engine.render(template, info)


def directive_help() -> Dict[str, str]:
    """Placeholder summary used by the CLI help text."""
    return {
        "{!}": "Prints ! if modified",
        "{!:<text>}": "Prints <text> if modified",
        "{commit}": "Prints full commit hash",
        "{commit:<length>}": "Prints first <length> chars of commit hash (5-40)",
        "{date}": "Prints commit date as YYYYMMDD",
        "{date:ymd-}": "Prints commit date as YYYY-MM-DD",
        "{time}": "Prints commit time as HHMMSS",
        "{time:hms}": "Prints commit time as HHMMSS",
        "{time:hms:}": "Prints commit time as HH:MM:SS",
        "{time:hm}": "Prints commit time as HHMM",
        "{time:hm:}": "Prints commit time as HH:MM",
        "{time:h}": "Prints commit hour as HH",
        "{time:o}": "Prints time zone like +0100",
        "{xmin:<year>}": "Prints minutes since year <year> in hex",
        "{xmin:<year>:<length>}": "Same, zero-padded to <length> hex digits",
    }
