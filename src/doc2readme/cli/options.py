# topmark:header:start
#
#   project      : Doc2Readme
#   file         : options.py
#   file_relpath : src/doc2readme/cli/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Verbosity options and their resolution to logging levels."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import ParamSpec, TypeVar

import click

from doc2readme.cli.errors import Doc2ReadmeUsageError
from doc2readme.config.logging import TRACE_LEVEL

P = ParamSpec("P")
R = TypeVar("R")


def resolve_verbosity(verbose_count: int, quiet_count: int) -> int:
    """Resolve the logging level from the ``-v`` and ``-q`` counts.

    ``-vvv`` is TRACE, ``-vv`` DEBUG, ``-v`` INFO, ``-q`` ERROR; WARNING otherwise.

    Raises:
        Doc2ReadmeUsageError: If both flags are given.
    """
    if verbose_count > 0 and quiet_count > 0:
        raise Doc2ReadmeUsageError("The '--verbose' and '--quiet' options are mutually exclusive.")
    if verbose_count >= 3:  # -vvv
        return TRACE_LEVEL
    if verbose_count == 2:  # -vv
        return logging.DEBUG
    if verbose_count == 1:  # -v
        return logging.INFO
    if quiet_count >= 1:  # -q
        return logging.ERROR
    return logging.WARNING


def common_verbose_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add counting ``-v/--verbose`` and ``-q/--quiet`` options to a command."""
    f = click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase verbosity. Repeat for more detail.",
    )(f)
    f = click.option(
        "-q",
        "--quiet",
        count=True,
        help="Only report errors.",
    )(f)
    return f
