# topmark:header:start
#
#   project      : Doc2Readme
#   file         : errors.py
#   file_relpath : src/doc2readme/input/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Errors raised while collecting the input of a render pass.

These are plain exceptions; the CLI maps them to exit codes.
"""

from __future__ import annotations


class InputError(Exception):
    """Base class for input collection failures."""


class CargoCommandError(InputError):
    """A cargo invocation failed.

    Attributes:
        command (list[str]): The command line that was run.
        returncode (int | None): Exit status, or None when cargo could not be started.
        stderr (str): Captured standard error, relayed to the user verbatim.
    """

    def __init__(
        self, message: str, command: list[str], returncode: int | None = None, stderr: str = ""
    ) -> None:
        super().__init__(message)
        self.command: list[str] = command
        self.returncode: int | None = returncode
        self.stderr: str = stderr


class ManifestError(InputError):
    """The package metadata does not contain what we need."""


class SourceReadError(InputError):
    """The crate root could not be read or decoded."""
