# topmark:header:start
#
#   project      : Doc2Readme
#   file         : errors.py
#   file_relpath : src/doc2readme/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions for the Doc2Readme CLI.

Raise these from the command to stop with a message and a sysexits-aligned exit
code. The message is printed through the project console when one is present in
the Click context.
"""

from __future__ import annotations

from typing import IO, Any

import click

from doc2readme.cli.exit_codes import ExitCode


class Doc2ReadmeError(click.ClickException):
    """Base class for all Doc2Readme CLI errors."""

    exit_code = ExitCode.FAILURE

    def format_message(self) -> str:  # pragma: no cover - trivial
        """Return the plain error message text (colors are applied in `show`)."""
        return str(getattr(self, "message", ""))

    def show(self, file: IO[Any] | None = None) -> None:  # pragma: no cover - Click prints errors
        """Display the error using the project console if available."""
        ctx = click.get_current_context(silent=True)
        if ctx is not None and isinstance(getattr(ctx, "obj", None), dict):
            console = ctx.obj.get("console")
            if console is not None:
                console.error(console.styled(f"error: {self.format_message()}", fg="bright_red"))
                return
        super().show(file)


class Doc2ReadmeUsageError(Doc2ReadmeError):
    """Invalid command line usage."""

    exit_code = ExitCode.USAGE_ERROR


class Doc2ReadmeDataError(Doc2ReadmeError):
    """Malformed crate source or template."""

    exit_code = ExitCode.DATA_ERROR


class Doc2ReadmeFileNotFoundError(Doc2ReadmeError):
    """A required input file does not exist."""

    exit_code = ExitCode.FILE_NOT_FOUND


class Doc2ReadmeExternalError(Doc2ReadmeError):
    """cargo or rustc failed."""

    exit_code = ExitCode.EXTERNAL_ERROR


class Doc2ReadmeIOError(Doc2ReadmeError):
    """Reading or writing a file failed."""

    exit_code = ExitCode.IO_ERROR


class Doc2ReadmeConfigError(Doc2ReadmeError):
    """Invalid configuration."""

    exit_code = ExitCode.CONFIG_ERROR
