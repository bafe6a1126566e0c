"""Configuration loading: defaults, project files and an explicit override file."""

from __future__ import annotations

import copy
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "REVSTAMP_CONFIG_PATH"
PROJECT_CONFIG_NAME = ".revstamp.toml"
PYPROJECT_NAME = "pyproject.toml"

DEFAULT_FORMAT = "{!}{commit}"
DEFAULT_CONFIG: Dict[str, Any] = {
    "git": {
        "executable": None,
        "fallback_roots": [],
        "timeout_ms": 1000,
        "quiet": False,
    },
    "format": {
        "default": DEFAULT_FORMAT,
    },
}


@dataclass
class StampSettings:
    """Effective settings after all config layers are merged."""
    git_executable: Optional[str] = None
    fallback_roots: List[Path] = field(default_factory=list)
    timeout_ms: int = 1000
    quiet: bool = False
    default_format: str = DEFAULT_FORMAT
    sources: List[Path] = field(default_factory=list)


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    if not config or not path:
        return default
    current: Any = config
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return default
        current = current[segment]
    return current


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config TOML: {path} ({exc})") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config: {path} ({exc})") from exc


def _find_upwards(start: Path, name: str) -> Optional[Path]:
    for parent in [start, *start.parents]:
        candidate = parent / name
        if candidate.is_file():
            return candidate
    return None


def discover_layers(start: Path, config_path: Optional[Path] = None) -> List[tuple[Path, Dict[str, Any]]]:
    """Return (path, table) pairs in increasing precedence."""
    start = start.resolve()
    layers: List[tuple[Path, Dict[str, Any]]] = []

    pyproject = _find_upwards(start, PYPROJECT_NAME)
    if pyproject is not None:
        table = get_config_value(_read_toml(pyproject), "tool.revstamp")
        if isinstance(table, dict):
            layers.append((pyproject, table))

    project_file = _find_upwards(start, PROJECT_CONFIG_NAME)
    if project_file is not None:
        layers.append((project_file, _read_toml(project_file)))

    explicit = config_path or (
        Path(os.environ[CONFIG_PATH_ENV_VAR]) if os.environ.get(CONFIG_PATH_ENV_VAR) else None
    )
    if explicit is not None:
        explicit = explicit.expanduser()
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        layers.append((explicit, _read_toml(explicit)))

    return layers


def _validate(cfg: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    executable = get_config_value(cfg, "git.executable")
    if executable is not None and (not isinstance(executable, str) or not executable.strip()):
        errors.append("git.executable must be a non-empty string")

    roots = get_config_value(cfg, "git.fallback_roots")
    if not isinstance(roots, list) or not all(isinstance(r, str) for r in roots):
        errors.append("git.fallback_roots must be a list of paths")

    timeout = get_config_value(cfg, "git.timeout_ms")
    if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
        errors.append("git.timeout_ms must be a positive integer")

    if not isinstance(get_config_value(cfg, "git.quiet"), bool):
        errors.append("git.quiet must be true or false")

    if not isinstance(get_config_value(cfg, "format.default"), str):
        errors.append("format.default must be a string")
    return errors


def load_settings(start: Optional[Path] = None, config_path: Optional[Path] = None) -> StampSettings:
    """Merge defaults with every discovered config layer and validate the result."""
    start = start or Path.cwd()
    cfg = default_config()
    sources: List[Path] = []
    for path, table in discover_layers(start, config_path):
        logger.debug(f"Loaded config layer {path}")
        cfg = merge_defaults(cfg, table)
        sources.append(path)

    errors = _validate(cfg)
    if errors:
        raise ConfigError("; ".join(errors))

    return StampSettings(
        git_executable=get_config_value(cfg, "git.executable"),
        fallback_roots=[Path(r).expanduser() for r in get_config_value(cfg, "git.fallback_roots")],
        timeout_ms=get_config_value(cfg, "git.timeout_ms"),
        quiet=get_config_value(cfg, "git.quiet"),
        default_format=get_config_value(cfg, "format.default"),
        sources=sources,
    )
