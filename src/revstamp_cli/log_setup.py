"""Logging setup for the revstamp CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(is_debug: bool = False) -> None:
    """Route log records to stderr through rich; DEBUG with ``-D``, else WARNING."""
    log_level = logging.DEBUG if is_debug else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True, soft_wrap=True),
        level=log_level,
        rich_tracebacks=True,
        show_time=is_debug,
        show_path=is_debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
