# topmark:header:start
#
#   project      : Doc2Readme
#   file         : render.py
#   file_relpath : src/doc2readme/diagnostic/render.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Human-readable rendering of diagnostics, with a source excerpt for spans.

Output shape::

    warning: Macro not expanded
     --> lib.rs:3:1
      |
    3 | #![doc = include_str!("README.md")]
      | ^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^ This macro was not expanded
      |
      = help: You can use `--expand-macros` on a nightly Rust toolchain to expand macros.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from yachalk import chalk

if TYPE_CHECKING:
    from collections.abc import Callable

    from doc2readme.diagnostic.model import Diagnostic, DiagnosticLog


def line_col(code: str, offset: int) -> tuple[int, int, str]:
    """Map a byte offset to ``(line, column, line_text)``; both 1-based.

    The column counts characters, not bytes.
    """
    data = code.encode("utf-8")
    offset = max(0, min(offset, len(data)))
    line_start = data.rfind(b"\n", 0, offset) + 1
    line_end = data.find(b"\n", offset)
    if line_end < 0:
        line_end = len(data)
    line_no = data.count(b"\n", 0, line_start) + 1
    column = len(data[line_start:offset].decode("utf-8", errors="replace")) + 1
    text = data[line_start:line_end].decode("utf-8", errors="replace")
    return line_no, column, text


def render_diagnostic(
    diagnostic: Diagnostic, filename: str, code: str, *, color: bool = True
) -> str:
    """Render one diagnostic.

    Args:
        diagnostic (Diagnostic): The diagnostic to render.
        filename (str): File name shown in the location line.
        code (str): Source text the span refers to.
        color (bool): Whether to emit ANSI colors.

    Returns:
        str: The rendered diagnostic, newline-terminated.
    """

    def paint(fn: Callable[[str], str], text: str) -> str:
        return fn(text) if color else text

    level = diagnostic.level
    headline = f"{paint(level.color, level.value)}: {paint(chalk.bold, diagnostic.message)}"
    lines: list[str] = [headline]

    if diagnostic.span is not None and code:
        line_no, column, text = line_col(code, diagnostic.span.start)
        gutter = " " * len(str(line_no))
        # underline at least one character, and never past the end of the line
        width = max(1, min(diagnostic.span.end - diagnostic.span.start, len(text) - column + 1))
        marker = paint(level.color, "^" * width)
        if diagnostic.label:
            marker = f"{marker} {paint(level.color, diagnostic.label)}"
        lines.append(f"{gutter}--> {filename}:{line_no}:{column}")
        lines.append(f"{gutter} |")
        lines.append(f"{line_no} | {text}")
        lines.append(f"{gutter} | {' ' * (column - 1)}{marker}")
        if diagnostic.help:
            lines.append(f"{gutter} |")
            lines.append(f"{gutter} = {paint(chalk.cyan, 'help')}: {diagnostic.help}")
    elif diagnostic.help:
        lines.append(f"  = {paint(chalk.cyan, 'help')}: {diagnostic.help}")

    return "\n".join(lines) + "\n"


def render_diagnostics(log: DiagnosticLog, *, color: bool = True) -> str:
    """Render every diagnostic of ``log``, separated by blank lines."""
    return "\n".join(render_diagnostic(d, log.filename, log.code, color=color) for d in log)
