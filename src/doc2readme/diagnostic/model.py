# topmark:header:start
#
#   project      : Doc2Readme
#   file         : model.py
#   file_relpath : src/doc2readme/diagnostic/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core diagnostic types for Doc2Readme.

Sections:
    * DiagnosticLevel: severity levels with associated terminal colors.
    * Diagnostic: immutable diagnostic payload (level, message, optional span,
      label and help text).
    * DiagnosticStats: aggregated per-level counts.
    * DiagnosticLog: mutable per-input collection that knows the file name and
      source text, so diagnostics with a span can be rendered with an excerpt.

Diagnostics never abort processing by themselves. The only diagnostic that marks
the log as failed is a syntax error; the caller checks `DiagnosticLog.is_fail`
and refuses to write output.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

from doc2readme.config.logging import get_logger
from doc2readme.input.model import Span

if TYPE_CHECKING:
    from collections.abc import Callable

    from doc2readme.config.logging import Doc2ReadmeLogger


logger: Doc2ReadmeLogger = get_logger(__name__)

MACRO_NOT_EXPANDED_HELP: Final[str] = (
    "You can use `--expand-macros` on a nightly Rust toolchain to expand macros."
)


class DiagnosticLevel(Enum):
    """Severity levels for diagnostics collected while reading and rendering.

    Levels map to terminal colors and are ordered by importance: ERROR > WARNING > INFO.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def color(self) -> Callable[[str], str]:
        """Return the `yachalk` color function associated with this severity level.

        Returns:
            Callable[[str], str]: The `yachalk` color function associated with this severity level.
        """
        return cast(
            "Callable[[str], str]",
            {
                DiagnosticLevel.INFO: chalk.green,
                DiagnosticLevel.WARNING: chalk.yellow,
                DiagnosticLevel.ERROR: chalk.red_bright,
            }[self],
        )


@dataclass(frozen=True)
class Diagnostic:
    """Structured diagnostic.

    Attributes:
        level (DiagnosticLevel): Severity.
        message (str): Headline message.
        span (Span | None): Byte range in the source the diagnostic points at.
        label (str | None): Text shown next to the underlined span.
        help (str | None): Hint on how to fix the problem.
    """

    level: DiagnosticLevel
    message: str
    span: Span | None = None
    label: str | None = None
    help: str | None = None


@dataclass(frozen=True)
class DiagnosticStats:
    """Aggregated counts for diagnostics by severity level."""

    n_info: int
    n_warning: int
    n_error: int

    @property
    def total(self) -> int:
        """Return the total count of diagnostics."""
        return self.n_info + self.n_warning + self.n_error


@dataclass
class DiagnosticLog:
    """Mutable collection of diagnostics for one input file.

    Attributes:
        filename (str): Display name of the source file.
        code (str): The source text spans refer to.
        items (list[Diagnostic]): Diagnostics in insertion order.
    """

    filename: str = "<input>"
    code: str = ""
    items: list[Diagnostic] = field(default_factory=lambda: [])
    _fail: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_iterable(cls, diagnostics: Iterable[Diagnostic]) -> DiagnosticLog:
        """Create a DiagnosticLog from an iterable of diagnostics."""
        return cls(items=list(diagnostics))

    def _add(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)
        logger.trace("Adding [%s]: %r", diagnostic.level.value, diagnostic.message)

    def add_info(self, message: str) -> None:
        """Add an ``info`` diagnostic without a code label."""
        self._add(Diagnostic(DiagnosticLevel.INFO, message))

    def add_warning(self, message: str) -> None:
        """Add a ``warning`` diagnostic without a code label."""
        self._add(Diagnostic(DiagnosticLevel.WARNING, message))

    def add_error(self, message: str) -> None:
        """Add an ``error`` diagnostic without a code label.

        Errors are reported but do not fail the run; see `syntax_error`.
        """
        self._add(Diagnostic(DiagnosticLevel.ERROR, message))

    def warn_with_label(self, message: str, span: Span, label: str) -> None:
        """Add a warning that underlines ``span`` with ``label``."""
        self._add(Diagnostic(DiagnosticLevel.WARNING, message, span, label))

    def warn_macro_not_expanded(self, span: Span) -> None:
        """Add the warning for a doc attribute whose value is an unexpanded macro."""
        self._add(
            Diagnostic(
                DiagnosticLevel.WARNING,
                "Macro not expanded",
                span,
                "This macro was not expanded",
                MACRO_NOT_EXPANDED_HELP,
            )
        )

    def syntax_error(self, message: str, offset: int) -> None:
        """Add a syntax error at byte ``offset`` and mark the log as failed."""
        end = min(offset + 1, len(self.code.encode("utf-8")))
        self._add(
            Diagnostic(
                DiagnosticLevel.ERROR,
                "Syntax Error",
                Span(offset, max(offset, end)),
                message,
            )
        )
        self._fail = True

    def is_fail(self) -> bool:
        """Return True when a fatal diagnostic was recorded."""
        return self._fail

    def extend(self, other: Iterable[Diagnostic]) -> None:
        """Append diagnostics collected elsewhere (without changing the fail flag)."""
        for d in other:
            self._add(d)

    def stats(self) -> DiagnosticStats:
        """Return per-level counts for diagnostics in this log."""
        return compute_diagnostic_stats(self.items)

    def has_warning(self) -> bool:
        """Return True if the DiagnosticLog contains warning diagnostics."""
        return any(d.level == DiagnosticLevel.WARNING for d in self.items)

    def has_error(self) -> bool:
        """Return True if the DiagnosticLog contains error diagnostics."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def compute_diagnostic_stats(diagnostics: Iterable[Diagnostic]) -> DiagnosticStats:
    """Return per-level counts for a sequence of diagnostics.

    Args:
        diagnostics (Iterable[Diagnostic]): the diagnostics to count.

    Returns:
        DiagnosticStats: Per-level counts.
    """
    items = list(diagnostics)
    n_info: int = sum(1 for d in items if d.level == DiagnosticLevel.INFO)
    n_warn: int = sum(1 for d in items if d.level == DiagnosticLevel.WARNING)
    n_err: int = sum(1 for d in items if d.level == DiagnosticLevel.ERROR)
    return DiagnosticStats(n_info=n_info, n_warning=n_warn, n_error=n_err)
