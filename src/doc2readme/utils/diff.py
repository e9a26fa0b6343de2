# topmark:header:start
#
#   project      : Doc2Readme
#   file         : diff.py
#   file_relpath : src/doc2readme/utils/diff.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Unified diffs between the readme on disk and the rendered one (``--check --diff``)."""

from __future__ import annotations

import difflib
from collections.abc import Sequence

from yachalk import chalk


def unified_diff(current: str, expected: str, filename: str) -> list[str]:
    """Return the unified diff turning ``current`` into ``expected``, as lines."""
    return list(
        difflib.unified_diff(
            current.splitlines(keepends=True),
            expected.splitlines(keepends=True),
            fromfile=f"{filename} (current)",
            tofile=f"{filename} (expected)",
        )
    )


def render_patch(patch: Sequence[str] | str, *, color: bool = True) -> str:
    """Render a unified diff for the terminal.

    Args:
        patch (Sequence[str] | str): The diff as lines or as one string.
        color (bool): Whether to colorize added and removed lines.

    Returns:
        str: The diff, one line per diff line, control characters made visible.
    """
    lines: list[str] = patch.splitlines() if isinstance(patch, str) else list(patch)

    def process_line(line: str) -> str:
        content = line.rstrip("\n").replace("\r", "\\r")
        if not color or not content:
            return content
        match content[0]:
            case "-":
                return chalk.bold.red(content)
            case "+":
                return chalk.bold.green(content)
            case "@":
                return chalk.cyan(content)
            case _:
                return content

    return "".join(f"{process_line(line)}\n" for line in lines)
