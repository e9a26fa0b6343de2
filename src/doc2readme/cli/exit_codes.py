# topmark:header:start
#
#   project      : Doc2Readme
#   file         : exit_codes.py
#   file_relpath : src/doc2readme/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes for the Doc2Readme CLI.

Values follow the BSD `sysexits` convention where practical, so scripts and CI
jobs can tell a stale readme (1) apart from a broken invocation or environment.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the Doc2Readme CLI.

    Attributes:
        SUCCESS: Readme written, or ``--check`` found it up to date.
        FAILURE: ``--check`` found the readme outdated, or a generic failure.
        USAGE_ERROR: Invalid flags or arguments. Mirrors BSD ``EX_USAGE (64)``.
        DATA_ERROR: Malformed crate source or template. Mirrors BSD ``EX_DATAERR (65)``.
        FILE_NOT_FOUND: A required input does not exist. Mirrors BSD ``EX_NOINPUT (66)``.
        EXTERNAL_ERROR: cargo or rustc failed. Mirrors BSD ``EX_SOFTWARE (70)``.
        IO_ERROR: Reading or writing a file failed. Mirrors BSD ``EX_IOERR (74)``.
        CONFIG_ERROR: Invalid configuration. Mirrors BSD ``EX_CONFIG (78)``.
        UNEXPECTED_ERROR: Unhandled error (last resort).
    """

    SUCCESS = 0
    FAILURE = 1

    # sysexits-aligned values
    USAGE_ERROR = 64  # EX_USAGE
    DATA_ERROR = 65  # EX_DATAERR
    FILE_NOT_FOUND = 66  # EX_NOINPUT
    EXTERNAL_ERROR = 70  # EX_SOFTWARE
    IO_ERROR = 74  # EX_IOERR
    CONFIG_ERROR = 78  # EX_CONFIG

    UNEXPECTED_ERROR = 255
