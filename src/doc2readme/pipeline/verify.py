# topmark:header:start
#
#   project      : Doc2Readme
#   file         : verify.py
#   file_relpath : src/doc2readme/pipeline/verify.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Staleness check of an existing readme (``--check``).

When the readme carries a dependency-info line, the check is decided from the
embedded snapshot without rendering:

1. the token must decode (otherwise ``INVALID_ENCODED_INFO``);
2. it must have been written with the current document schema (``OUTDATED_SCHEMA``);
3. template and crate docs must hash the same (``INPUT_CHANGED``);
4. every dependency of the manifest must still accept the version the links
   point at (``INCOMPATIBLE_DEPENDENCY_VERSION``).

A readme without that line is re-rendered and compared byte for byte.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from yachalk import chalk

from doc2readme.config.logging import get_logger
from doc2readme.constants import DEPINFO_MARKER
from doc2readme.diagnostic.model import Diagnostic, DiagnosticLevel
from doc2readme.links.depinfo import DependencyInfo, DependencyInfoError
from doc2readme.pipeline.render import render_readme
from doc2readme.rendering.colored_enum import ColoredStrEnum

if TYPE_CHECKING:
    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.diagnostic.model import DiagnosticLog
    from doc2readme.input.model import InputFile

logger: Doc2ReadmeLogger = get_logger(__name__)


class CheckOutcome(ColoredStrEnum):
    """Result classes of the staleness check."""

    UP_TO_DATE = ("up to date", chalk.green)
    INVALID_ENCODED_INFO = ("invalid dependency info", chalk.yellow)
    INPUT_CHANGED = ("input changed", chalk.red_bright)
    INCOMPATIBLE_DEPENDENCY_VERSION = ("incompatible dependency", chalk.red_bright)
    OUTDATED_SCHEMA = ("outdated schema", chalk.red_bright)
    OUTPUT_DIFFERS = ("output differs", chalk.red_bright)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of `check_up2date`.

    Attributes:
        outcome (CheckOutcome): What the check found.
        detail (str | None): The dependency name, or the decoding error.
        expected (str | None): The freshly rendered readme, when the check had
            to render it.
    """

    outcome: CheckOutcome
    detail: str | None = None
    expected: str | None = None

    def is_ok(self) -> bool:
        """Return True when the readme is up to date."""
        return self.outcome is CheckOutcome.UP_TO_DATE

    @property
    def message(self) -> str:
        """Return the user-facing message of the outcome."""
        match self.outcome:
            case CheckOutcome.UP_TO_DATE:
                return "Readme is up to date"
            case CheckOutcome.INVALID_ENCODED_INFO:
                return f"Readme has invalid dependency info: {self.detail}"
            case CheckOutcome.INPUT_CHANGED:
                return "Input has changed"
            case CheckOutcome.INCOMPATIBLE_DEPENDENCY_VERSION:
                return f"Readme links to incompatible version of dependency `{self.detail}`"
            case CheckOutcome.OUTDATED_SCHEMA:
                return "The readme was created with an outdated version of this tool"
            case CheckOutcome.OUTPUT_DIFFERS:
                return "Readme has changed"
        raise AssertionError(self.outcome)  # pragma: no cover

    @property
    def level(self) -> DiagnosticLevel:
        """Return the diagnostic level the outcome is reported with."""
        if self.outcome is CheckOutcome.UP_TO_DATE:
            return DiagnosticLevel.INFO
        if self.outcome is CheckOutcome.INVALID_ENCODED_INFO:
            return DiagnosticLevel.WARNING
        return DiagnosticLevel.ERROR

    def to_diagnostic(self) -> Diagnostic:
        """Return the outcome as a diagnostic."""
        return Diagnostic(self.level, self.message)


def find_depinfo_token(readme: str) -> str | None:
    """Return the dependency-info token embedded in ``readme``, if any."""
    idx = readme.find(DEPINFO_MARKER)
    if idx < 0:
        return None
    rest = readme[idx + len(DEPINFO_MARKER) :]
    end = min((i for i in (rest.find(" "), rest.find("\n")) if i >= 0), default=len(rest))
    return rest[:end]


def check_depinfo(depinfo: DependencyInfo, input_file: InputFile, template: str) -> CheckResult:
    """Decide the check from a decoded snapshot."""
    if depinfo.check_outdated():
        return CheckResult(CheckOutcome.OUTDATED_SCHEMA)
    if not depinfo.check_input(template, input_file.rustdoc):
        return CheckResult(CheckOutcome.INPUT_CHANGED)
    # dependencies the readme never linked to don't matter
    for record in input_file.dependencies.values():
        logger.debug("Checking %s = %r", record.published_name, str(record.version_requirement))
        if not depinfo.check_dependency(
            record.published_name, record.version_requirement, record.lib_name
        ):
            return CheckResult(CheckOutcome.INCOMPATIBLE_DEPENDENCY_VERSION, record.published_name)
    return CheckResult(CheckOutcome.UP_TO_DATE)


def check_up2date(
    input_file: InputFile,
    template: str,
    readme: str,
    diagnostics: DiagnosticLog | None = None,
) -> CheckResult:
    """Check whether ``readme`` is up to date with the current input.

    Args:
        input_file (InputFile): The current input.
        template (str): The current template source.
        readme (str): Content of the existing readme.
        diagnostics (DiagnosticLog | None): Collects warnings when re-rendering.

    Returns:
        CheckResult: The outcome.
    """
    token = find_depinfo_token(readme)
    if token is not None:
        try:
            depinfo = DependencyInfo.decode(token)
        except DependencyInfoError as exc:
            logger.debug("Failed to decode %r: %s", token, exc)
            return CheckResult(CheckOutcome.INVALID_ENCODED_INFO, str(exc))
        return check_depinfo(depinfo, input_file, template)

    logger.info("Readme has no dependency info; comparing the full output")
    expected = render_readme(input_file, template, diagnostics).text
    if expected == readme:
        return CheckResult(CheckOutcome.UP_TO_DATE, expected=expected)
    return CheckResult(CheckOutcome.OUTPUT_DIFFERS, expected=expected)
