from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from revstamp_core import InputMissingError, RevstampError, __version__
from revstamp_core.config import load_settings
from revstamp_ops.stamp import format_revision, resolve_working_copy, stamp_file
from revstamp_ops.template_engine import directive_help

from .log_setup import setup_logging

logger = logging.getLogger(__name__)


def _placeholder_block() -> str:
    lines = ["Placeholders:"]
    for directive, text in directive_help().items():
        lines.append(f"  {directive:<24}{text}")
    return "\n".join(lines)


EPILOG = f"""\
The input file should point to a template version of the AssemblyInfo file
inside the Git working directory. The output file should be the
AssemblyInfo.cs/vb file. Use it as a pre-build step:

\b
  revstamp "AssemblyInfo.cs.in" "AssemblyInfo.cs"

\b
Supported attribute:
  AssemblyInformationalVersion("... {{commit}} {{date}} {{time}} ...")

\b
{_placeholder_block()}

\b
Example for C#:
  [assembly: AssemblyInformationalVersion("MyApp {{commit:8}}/{{date}}")]
Will be replaced with:
  [assembly: AssemblyInformationalVersion("MyApp 45d4e32f/20111231")]

\b
Example for a shell script:
  revstamp --format "revid={{commit:8}}" > /tmp/revid.env
(Write outside the working directory to avoid a false modification.)
"""

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    help="Stamp build files with the Git revision of their working copy.",
    add_completion=False,
    rich_markup_mode=None,
    context_settings=CONTEXT_SETTINGS,
)
err_console = Console(stderr=True, soft_wrap=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"revstamp {__version__}")
        raise typer.Exit()


def _fail(message: str, exit_code: int = 1) -> typer.Exit:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    return typer.Exit(exit_code)


@app.command(epilog=EPILOG, context_settings=CONTEXT_SETTINGS)
def stamp(
    input_file: Optional[Path] = typer.Argument(None, help="Template file inside the working copy"),
    output_file: Optional[Path] = typer.Argument(None, help="AssemblyInfo.cs/.vb file to write"),
    format_: Optional[str] = typer.Option(
        None, "--format", "-f", help="Prints the passed string with the specified format"
    ),
    ignore_missing: bool = typer.Option(
        False, "--ignore-missing", "-i", help="Continue even if not a Git working directory"
    ),
    stop_if_modified: bool = typer.Option(
        False, "--stop-if-modified", "-M", help="Stop if the working copy contains uncommitted changes"
    ),
    revision: bool = typer.Option(False, "--revision", "-r", help="Shows the working copy revision"),
    debug: bool = typer.Option(False, "--debug", "-D", help="Shows debug information"),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", min=1, help="Time limit for each git query in milliseconds"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Extra TOML config file"),
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Shows product version"
    ),
):
    """Print the working copy revision or patch an AssemblyInfo file with it."""
    setup_logging(debug)

    if input_file is None and output_file is None:
        revision = True
    working_dir = input_file.parent if input_file is not None else Path.cwd()
    logger.debug(f"Working on path {working_dir}")

    try:
        settings = load_settings(working_dir if working_dir.is_dir() else Path.cwd(), config)
        if timeout_ms is not None:
            settings.timeout_ms = timeout_ms

        info = resolve_working_copy(working_dir, settings, ignore_missing=ignore_missing)

        if revision:
            template = format_ if format_ is not None else settings.default_format
            typer.echo(format_revision(template, info, ignore_missing=ignore_missing))
            return

        if input_file is None:
            raise InputMissingError("Input file not specified.")
        if output_file is None:
            raise _fail("Output file not specified.")

        stamp_file(
            input_file,
            output_file,
            info,
            ignore_missing=ignore_missing,
            stop_if_modified=stop_if_modified,
        )
    except RevstampError as e:
        raise _fail(str(e), e.exit_code) from e
    except OSError as e:
        raise _fail(f"{e.strerror or e}: {e.filename}" if e.filename else str(e)) from e


def main():
    app()
