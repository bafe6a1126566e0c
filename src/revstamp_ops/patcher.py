"""
patcher.py - Rewrite the AssemblyInformationalVersion line of a source file.

The input is streamed line by line; the one attribute declaration that
matches the bracket style of the output language gets its quoted value
expanded through the template engine. Everything else is copied verbatim,
in the input's own encoding.
"""

from __future__ import annotations

import codecs
import io
import locale
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Tuple

from revstamp_core.errors import UnsupportedOutputFormatError
from revstamp_core.vcs import RevisionInfo

from .template_engine import TemplateEngine

logger = logging.getLogger(__name__)

BRACKET_STYLES = {
    ".cs": ("[", "]"),
    ".vb": ("<", ">"),
}

# Longest BOMs first: the UTF-32 LE BOM starts with the UTF-16 LE one.
_BOMS = [
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
]


@dataclass(frozen=True)
class SourceEncoding:
    name: str
    bom: bytes = b""


@dataclass
class PatchResult:
    input_path: Path
    output_path: Path
    encoding: str
    lines: int
    patched: int


def bracket_style_for(output_path: Path) -> Tuple[str, str]:
    """Attribute brackets implied by the output extension (``.cs`` or ``.vb``)."""
    suffix = Path(output_path).suffix.lower()
    try:
        return BRACKET_STYLES[suffix]
    except KeyError:
        raise UnsupportedOutputFormatError(
            f"Invalid AssemblyInfo file extension: {suffix or '(none)'}"
        ) from None


def attribute_pattern(attr_start: str, attr_end: str) -> re.Pattern:
    return re.compile(
        r'^(\s*' + re.escape(attr_start)
        + r'\s*assembly\s*:\s*AssemblyInformationalVersion\s*\(\s*")(.*)("\s*\)\s*'
        + re.escape(attr_end) + r'.*)$',
        re.IGNORECASE,
    )


def detect_encoding(data: bytes) -> SourceEncoding:
    """Sniff a byte-order mark; without one try UTF-8, the locale encoding, then Latin-1."""
    for bom, name in _BOMS:
        if data.startswith(bom):
            return SourceEncoding(name=name, bom=bom)
    for name in ("utf-8", locale.getpreferredencoding(False)):
        try:
            data.decode(name)
        except (UnicodeDecodeError, LookupError):
            continue
        return SourceEncoding(name=name)
    # decodes any byte sequence
    return SourceEncoding(name="latin-1")


def patch_lines(
    lines: Iterable[str],
    pattern: re.Pattern,
    render_value: Callable[[str], str],
) -> Iterator[Tuple[str, bool]]:
    """Yield ``(line, patched)`` for every input line.

    Line terminators are kept as they were; only the quoted attribute value
    of a matching line is replaced.
    """
    for raw in lines:
        body = raw.rstrip("\r\n")
        ending = raw[len(body):]
        match = pattern.match(body)
        if match is None:
            yield raw, False
            continue
        value = render_value(match.group(2))
        yield match.group(1) + value + match.group(3) + ending, True


def patch_file(
    input_path: Path,
    output_path: Path,
    info: RevisionInfo,
    engine: Optional[TemplateEngine] = None,
) -> PatchResult:
    """Write ``output_path`` from ``input_path`` with the version attribute stamped.

    The output is written to a temporary file next to it and moved into
    place, so a failure never leaves a half-written file behind.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    attr_start, attr_end = bracket_style_for(output_path)
    pattern = attribute_pattern(attr_start, attr_end)
    engine = engine or TemplateEngine()

    data = input_path.read_bytes()
    encoding = detect_encoding(data)
    text = data[len(encoding.bom):].decode(encoding.name)
    logger.debug(f"Patching {input_path.name} ({encoding.name})...")

    total = 0
    patched = 0
    out_parts = []
    lines = io.StringIO(text, newline="")
    for line, hit in patch_lines(lines, pattern, lambda v: engine.render(v, info)):
        total += 1
        if hit:
            patched += 1
            logger.debug("Found AssemblyInformationalVersion attribute")
        out_parts.append(line)

    payload = encoding.bom + "".join(out_parts).encode(encoding.name)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.name}.", dir=str(output_path.parent))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
        if output_path.exists():
            shutil.copymode(output_path, tmp_name)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f"Patched {input_path.name}")
    return PatchResult(
        input_path=input_path,
        output_path=output_path,
        encoding=encoding.name,
        lines=total,
        patched=patched,
    )
