# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_verify.py
#   file_relpath : tests/pipeline/test_verify.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Staleness check of an existing readme."""

from __future__ import annotations

from typing import TYPE_CHECKING

from doc2readme.constants import DEPINFO_MARKER
from doc2readme.diagnostic.model import DiagnosticLevel
from doc2readme.links.depinfo import DOCUMENT_SCHEMA_VERSION, DependencyInfo
from doc2readme.pipeline.render import render_readme
from doc2readme.pipeline.verify import (
    CheckOutcome,
    CheckResult,
    check_up2date,
    find_depinfo_token,
)
from tests.conftest import make_dependency, make_input_file, make_manifest, parametrize

if TYPE_CHECKING:
    from doc2readme.input.model import InputFile

TEMPLATE = "# {{ crate }}\n\n{{ readme }}\n\n{{ links }}\n"
PLAIN_TEMPLATE = "# {{ crate }}\n\n{{ readme }}\n"
DOCS = "//! Built on [serde](serde) and [`Vec`].\n"


def _input(docs: str = DOCS, serde_req: str = "1.0") -> InputFile:
    manifest = make_manifest(
        dependencies={"serde": make_dependency("serde", "1.0.200", requirement=serde_req)}
    )
    return make_input_file(docs, manifest=manifest)


def _readme(input_file: InputFile, template: str = TEMPLATE) -> str:
    return render_readme(input_file, template).text


def test_fresh_readme_is_up_to_date() -> None:
    """A readme rendered from the same input passes."""
    input_file = _input()
    result = check_up2date(input_file, TEMPLATE, _readme(input_file))
    assert result.outcome is CheckOutcome.UP_TO_DATE
    assert result.is_ok()
    assert result.expected is None


def test_hand_edits_outside_the_token_are_ignored() -> None:
    """With a token, the check never looks at the rest of the readme."""
    input_file = _input()
    readme = _readme(input_file).replace("Built on", "Proudly built on")
    assert check_up2date(input_file, TEMPLATE, readme).is_ok()


def test_changed_docs() -> None:
    """Edited crate docs fail the check."""
    readme = _readme(_input())
    result = check_up2date(_input(docs="//! Something else.\n"), TEMPLATE, readme)
    assert result.outcome is CheckOutcome.INPUT_CHANGED
    assert result.message == "Input has changed"


def test_changed_template() -> None:
    """An edited template fails the check."""
    input_file = _input()
    readme = _readme(input_file)
    result = check_up2date(input_file, TEMPLATE + "\n", readme)
    assert result.outcome is CheckOutcome.INPUT_CHANGED


def test_dependency_bumped_past_linked_version() -> None:
    """Links to serde 1.0.200 are stale once the manifest asks for serde 2."""
    readme = _readme(_input())
    result = check_up2date(_input(serde_req="2"), TEMPLATE, readme)
    assert result.outcome is CheckOutcome.INCOMPATIBLE_DEPENDENCY_VERSION
    assert result.detail == "serde"
    assert result.message == "Readme links to incompatible version of dependency `serde`"


def test_compatible_requirement_change() -> None:
    """A requirement that still accepts the linked version is fine."""
    readme = _readme(_input())
    assert check_up2date(_input(serde_req="^1.0.100"), TEMPLATE, readme).is_ok()


def test_outdated_schema() -> None:
    """Tokens written with another document schema fail the check."""
    input_file = _input()
    depinfo = DependencyInfo.new(TEMPLATE, input_file.rustdoc)
    depinfo.schema_version = DOCUMENT_SCHEMA_VERSION + 1
    readme = f"# my-crate\n\n{DEPINFO_MARKER}{depinfo.encode()}\n"

    result = check_up2date(input_file, TEMPLATE, readme)

    assert result.outcome is CheckOutcome.OUTDATED_SCHEMA
    assert result.level is DiagnosticLevel.ERROR


def test_invalid_token() -> None:
    """A token that does not decode is a warning-level failure."""
    readme = f"# my-crate\n\n{DEPINFO_MARKER}not-a-token!\n"
    result = check_up2date(_input(), TEMPLATE, readme)
    assert result.outcome is CheckOutcome.INVALID_ENCODED_INFO
    assert result.level is DiagnosticLevel.WARNING
    assert result.detail
    assert not result.is_ok()


def test_without_token_compares_output() -> None:
    """Templates that drop the links are checked by re-rendering."""
    input_file = _input()
    readme = _readme(input_file, PLAIN_TEMPLATE)
    assert DEPINFO_MARKER not in readme

    same = check_up2date(input_file, PLAIN_TEMPLATE, readme)
    assert same.outcome is CheckOutcome.UP_TO_DATE
    assert same.expected == readme

    differs = check_up2date(input_file, PLAIN_TEMPLATE, readme + "edited\n")
    assert differs.outcome is CheckOutcome.OUTPUT_DIFFERS
    assert differs.expected == readme
    assert differs.message == "Readme has changed"


@parametrize(
    "readme, token",
    [
        (f"x\n{DEPINFO_MARKER}abc\n [__link0]: y", "abc"),
        (f"{DEPINFO_MARKER}abc", "abc"),
        (f"{DEPINFO_MARKER}abc def", "abc"),
        ("no token here", None),
    ],
)
def test_find_depinfo_token(readme: str, token: str | None) -> None:
    """The token runs to the next space or line end."""
    assert find_depinfo_token(readme) == token


def test_result_as_diagnostic() -> None:
    """Outcomes are reported as diagnostics with a matching level."""
    diag = CheckResult(CheckOutcome.UP_TO_DATE).to_diagnostic()
    assert (diag.level, diag.message) == (DiagnosticLevel.INFO, "Readme is up to date")
    diag = CheckResult(CheckOutcome.OUTDATED_SCHEMA).to_diagnostic()
    assert diag.message == "The readme was created with an outdated version of this tool"
