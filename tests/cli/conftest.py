# topmark:header:start
#
#   project      : Doc2Readme
#   file         : conftest.py
#   file_relpath : tests/cli/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI test helpers: a fake package reader and a Click runner.

The CLI normally runs ``cargo metadata`` (and possibly a nightly compiler) to
collect its input. `FakeReader` stands in for `doc2readme.cli.main.read_input`
so the tests only need Rust source text; see `tests.conftest.make_input_file`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Sequence

import pytest
from click.testing import CliRunner, Result

from doc2readme.cli import main as cli_main
from doc2readme.cli.main import cli
from doc2readme.config import logging
from doc2readme.diagnostic.model import DiagnosticLog
from tests.conftest import make_input_file

if TYPE_CHECKING:
    from pathlib import Path

    from doc2readme.input.model import InputFile


@dataclass
class FakeReader:
    """Replacement for `read_input` that reads ``code`` as the crate root.

    Attributes:
        code (str): Rust source of the crate root.
        error (Exception | None): Raised instead of reading, when set.
        calls (list[dict[str, Any]]): Arguments of every call.
    """

    code: str = "//! Hello from [`Vec`].\n"
    error: Exception | None = None
    calls: list[dict[str, Any]] = field(default_factory=lambda: [])

    def __call__(
        self, manifest_path: Path | None = None, package: str | None = None, **kwargs: Any
    ) -> tuple[InputFile, DiagnosticLog]:
        self.calls.append({"manifest_path": manifest_path, "package": package, **kwargs})
        if self.error is not None:
            raise self.error
        diagnostics = DiagnosticLog("lib.rs", self.code)
        return make_input_file(self.code, diagnostics=diagnostics), diagnostics


@pytest.fixture
def fake_reader(monkeypatch: pytest.MonkeyPatch) -> FakeReader:
    """Install a `FakeReader` in place of the cargo-backed reader."""
    reader = FakeReader()
    monkeypatch.setattr(cli_main, "read_input", reader)
    return reader


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo the logging setup of each CLI run (its stream is closed afterwards)."""
    yield
    logging.setup_logging(level=logging.TRACE_LEVEL)


def run_cli(argv: Sequence[str] | None = None) -> Result:
    """Invoke the CLI in the current working directory.

    Use together with the ``isolation`` fixture so that ``README.md`` and
    ``README.j2`` resolve inside a temporary directory.

    Args:
        argv (Sequence[str] | None): Command line arguments.

    Returns:
        Result: The `click.testing.Result`; ``stdout`` and ``stderr`` are
        captured separately.
    """
    return CliRunner().invoke(cli, list(argv or []))
