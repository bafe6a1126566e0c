from .patcher import PatchResult, attribute_pattern, bracket_style_for, detect_encoding, patch_file, patch_lines
from .stamp import ensure_revision, format_revision, resolve_working_copy, stamp_file
from .template_engine import TemplateEngine, hex_minutes, render

__all__ = [
    "PatchResult",
    "TemplateEngine",
    "attribute_pattern",
    "bracket_style_for",
    "detect_encoding",
    "ensure_revision",
    "format_revision",
    "hex_minutes",
    "patch_file",
    "patch_lines",
    "render",
    "resolve_working_copy",
    "stamp_file",
]
