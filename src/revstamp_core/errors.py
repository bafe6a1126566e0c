"""Error types reported by the stamping workflow."""

from __future__ import annotations


class RevstampError(Exception):
    """Base error; every subclass maps to a non-zero process exit."""

    exit_code = 1


class NoVcsBinaryError(RevstampError):
    """No git executable could be located."""


class UnresolvedRevisionError(RevstampError):
    """No commit could be parsed for the working directory."""


class DirtyTreeRejectedError(RevstampError):
    """The working tree has uncommitted changes and the caller refused them."""


class InputMissingError(RevstampError):
    """The template input file does not exist."""


class UnsupportedOutputFormatError(RevstampError):
    """The output file extension has no known attribute syntax."""


class ConfigError(RevstampError):
    """A configuration file is unreadable or holds invalid values."""
