# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_cli.py
#   file_relpath : tests/cli/test_cli.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Command line behavior: rendering, checking and exit codes."""

from __future__ import annotations

from pathlib import Path

from doc2readme.cli.exit_codes import ExitCode
from doc2readme.constants import DEPINFO_MARKER, DOC2README_VERSION
from doc2readme.input.errors import CargoCommandError, ManifestError, SourceReadError
from tests.cli.conftest import FakeReader, run_cli
from tests.conftest import mark_cli, mark_integration, parametrize

PLAIN_TEMPLATE = "# {{ crate }}\n\n{{ readme }}\n"


@mark_cli
def test_version() -> None:
    """``--version`` prints the program name and version."""
    result = run_cli(["--version"])
    assert result.exit_code == ExitCode.SUCCESS
    assert result.stdout == f"doc2readme, version {DOC2README_VERSION}\n"


@mark_cli
@parametrize(
    "argv, message",
    [
        (["build"], "Unexpected argument 'build'."),
        (["--bin", "--lib"], "The '--bin' and '--lib' options are mutually exclusive."),
        (["--diff"], "The '--diff' option requires '--check'."),
        (["-v", "-q"], "The '--verbose' and '--quiet' options are mutually exclusive."),
    ],
)
def test_usage_errors(
    isolation: Path, fake_reader: FakeReader, argv: list[str], message: str
) -> None:
    """Conflicting or unknown arguments are usage errors."""
    result = run_cli(argv)
    assert result.exit_code == ExitCode.USAGE_ERROR
    assert message in result.stderr
    assert fake_reader.calls == []


@mark_cli
@mark_integration
def test_writes_readme(isolation: Path, fake_reader: FakeReader) -> None:
    """By default ``README.md`` is rendered with the bundled template."""
    result = run_cli([])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    text = (isolation / "README.md").read_text(encoding="utf-8")
    assert text.startswith("# my-crate\n\n[![crates.io]")
    assert "Hello from [`Vec`][__link0].\n" in text
    assert DEPINFO_MARKER in text
    assert text.endswith(" [__link0]: https://doc.rust-lang.org/stable/std/?search=vec::Vec\n")
    assert result.stdout == ""


@mark_cli
def test_cargo_subcommand_argument_is_accepted(isolation: Path, fake_reader: FakeReader) -> None:
    """``cargo doc2readme`` passes the subcommand name as first argument."""
    result = run_cli(["doc2readme", "--out", "-"])
    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert result.stdout.startswith("# my-crate\n")


@mark_cli
def test_stdout_output(isolation: Path, fake_reader: FakeReader) -> None:
    """``--out -`` prints the readme and writes no file."""
    (isolation / "README.j2").write_text(PLAIN_TEMPLATE, encoding="utf-8")

    result = run_cli(["--out", "-"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert result.stdout == "# my-crate\n\nHello from [`Vec`][__link0].\n"
    assert not (isolation / "README.md").exists()


@mark_cli
def test_custom_paths(isolation: Path, fake_reader: FakeReader) -> None:
    """Output and template paths are relative to the working directory."""
    (isolation / "tpl.j2").write_text(PLAIN_TEMPLATE, encoding="utf-8")

    result = run_cli(["-o", "docs/OUT.md", "-t", "tpl.j2"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    out = isolation / "docs" / "OUT.md"
    assert out.read_text(encoding="utf-8") == "# my-crate\n\nHello from [`Vec`][__link0].\n"


@mark_cli
def test_reader_options(isolation: Path, fake_reader: FakeReader) -> None:
    """Target and feature selection reach the reader."""
    result = run_cli(
        ["--manifest-path", "sub/Cargo.toml", "-p", "inner", "--bin", "--expand-macros"]
        + ["-F", "a,b", "--all-features", "--out", "-"]
    )

    assert result.exit_code == ExitCode.SUCCESS, result.output
    [call] = fake_reader.calls
    assert call["manifest_path"] == Path("sub/Cargo.toml")
    assert call["package"] == "inner"
    assert call["prefer_bin"] is True
    assert call["expand_macros"] is True
    assert call["options"].features == ("a", "b")
    assert call["options"].all_features
    assert not call["options"].no_default_features


@mark_cli
def test_feature_flags_without_expansion_warn(isolation: Path, fake_reader: FakeReader) -> None:
    """Feature flags are ignored without ``--expand-macros``; the user is told so."""
    result = run_cli(["--features", "x", "--no-default-features", "--out", "-"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert "--features option has no effect without the --expand-macros flag" in result.stderr
    assert "--no-default-features flag has no effect" in result.stderr


@mark_cli
@mark_integration
def test_check_up_to_date(isolation: Path, fake_reader: FakeReader) -> None:
    """A freshly written readme passes ``--check``."""
    assert run_cli([]).exit_code == ExitCode.SUCCESS
    before = (isolation / "README.md").read_text(encoding="utf-8")

    result = run_cli(["--check"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert "Readme is up to date" in result.stderr
    assert (isolation / "README.md").read_text(encoding="utf-8") == before


@mark_cli
@mark_integration
def test_check_detects_changed_docs(isolation: Path, fake_reader: FakeReader) -> None:
    """Edited crate docs make ``--check`` fail without touching the file."""
    assert run_cli([]).exit_code == ExitCode.SUCCESS
    before = (isolation / "README.md").read_text(encoding="utf-8")
    fake_reader.code = "//! Goodbye.\n"

    result = run_cli(["--check"])

    assert result.exit_code == ExitCode.FAILURE
    assert "Input has changed" in result.stderr
    assert (isolation / "README.md").read_text(encoding="utf-8") == before


@mark_cli
@mark_integration
def test_check_with_diff(isolation: Path, fake_reader: FakeReader) -> None:
    """``--diff`` shows how the readme would change."""
    (isolation / "README.j2").write_text(PLAIN_TEMPLATE, encoding="utf-8")
    (isolation / "README.md").write_text("# my-crate\n\nOld text.\n", encoding="utf-8")

    result = run_cli(["--check", "--diff"])

    assert result.exit_code == ExitCode.FAILURE
    assert "Readme has changed" in result.stderr
    assert "--- README.md (current)" in result.stderr
    assert "+++ README.md (expected)" in result.stderr
    assert "-Old text." in result.stderr
    assert "+Hello from [`Vec`][__link0]." in result.stderr


@mark_cli
@mark_integration
def test_check_readme_with_invalid_utf8(isolation: Path, fake_reader: FakeReader) -> None:
    """A readme that is not valid UTF-8 is reported as changed, not as a read error."""
    (isolation / "README.j2").write_text(PLAIN_TEMPLATE, encoding="utf-8")
    original = b"# my-crate\n\n\xff\xfe broken bytes.\n"
    (isolation / "README.md").write_bytes(original)

    result = run_cli(["--check", "--diff"])

    assert result.exit_code == ExitCode.FAILURE, result.output
    assert "Readme has changed" in result.stderr
    assert "+Hello from [`Vec`][__link0]." in result.stderr
    assert (isolation / "README.md").read_bytes() == original


@mark_cli
def test_check_missing_readme(isolation: Path, fake_reader: FakeReader) -> None:
    """Checking a readme that does not exist is a missing-input error."""
    result = run_cli(["--check"])
    assert result.exit_code == ExitCode.FILE_NOT_FOUND
    assert "File not found" in result.stderr


@mark_cli
def test_check_needs_a_file(isolation: Path, fake_reader: FakeReader) -> None:
    """``--check`` cannot compare against stdout."""
    result = run_cli(["--check", "--out", "-"])
    assert result.exit_code == ExitCode.USAGE_ERROR


@mark_cli
def test_syntax_error_in_crate_root(isolation: Path, fake_reader: FakeReader) -> None:
    """Unreadable source is reported with a location and nothing is written."""
    fake_reader.code = "//! Docs.\nfn broken() {\n"

    result = run_cli([])

    assert result.exit_code == ExitCode.DATA_ERROR
    assert "error: Syntax Error" in result.stderr
    assert "--> lib.rs:2:13" in result.stderr
    assert "Could not read lib.rs" in result.stderr
    assert not (isolation / "README.md").exists()


@mark_cli
def test_unexpanded_macro_warning(isolation: Path, fake_reader: FakeReader) -> None:
    """Warnings are printed but the readme is still written."""
    fake_reader.code = '#![doc = include_str!("../README.md")]\n'

    result = run_cli([])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert "warning: Macro not expanded" in result.stderr
    assert "--expand-macros" in result.stderr
    assert (isolation / "README.md").exists()


@mark_cli
def test_link_warnings_are_printed(isolation: Path, fake_reader: FakeReader) -> None:
    """Links into crates that are not dependencies warn but still render."""
    fake_reader.code = "//! See [`::mystery::Thing`].\n"

    result = run_cli([])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert "warning: Unable to find dependency `mystery`" in result.stderr
    text = (isolation / "README.md").read_text(encoding="utf-8")
    assert "https://docs.rs/mystery/latest/mystery/?search=Thing" in text


@mark_cli
@parametrize(
    "error, exit_code",
    [
        (
            CargoCommandError("Failed to get cargo metadata", ["cargo"], 101, "error: boom\n"),
            ExitCode.EXTERNAL_ERROR,
        ),
        (ManifestError("Failed to find a library or binary target"), ExitCode.FILE_NOT_FOUND),
        (SourceReadError("Failed to read crate code"), ExitCode.IO_ERROR),
    ],
)
def test_reader_errors(
    isolation: Path, fake_reader: FakeReader, error: Exception, exit_code: ExitCode
) -> None:
    """Reader failures map to distinct exit codes."""
    fake_reader.error = error

    result = run_cli([])

    assert result.exit_code == exit_code
    assert str(error) in result.stderr


@mark_cli
def test_cargo_stderr_is_relayed(isolation: Path, fake_reader: FakeReader) -> None:
    """The compiler's own messages reach the user."""
    fake_reader.error = CargoCommandError("Failed to expand macros", ["cargo"], 1, "error: boom\n")
    result = run_cli([])
    assert "error: boom" in result.stderr


@mark_cli
def test_missing_config_file(isolation: Path, fake_reader: FakeReader) -> None:
    """A ``--config`` file that does not exist is a configuration error."""
    result = run_cli(["--config", "nope.toml"])
    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert "Config file not found" in result.stderr


@mark_cli
def test_config_file_next_to_manifest(isolation: Path, fake_reader: FakeReader) -> None:
    """``doc2readme.toml`` settings apply when no option overrides them."""
    (isolation / "doc2readme.toml").write_text('out = "-"\n', encoding="utf-8")
    (isolation / "README.j2").write_text(PLAIN_TEMPLATE, encoding="utf-8")

    result = run_cli([])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert result.stdout.startswith("# my-crate\n")


@mark_cli
def test_broken_template(isolation: Path, fake_reader: FakeReader) -> None:
    """A template that does not compile is a data error."""
    (isolation / "README.j2").write_text("# {{ crate }\n", encoding="utf-8")
    result = run_cli([])
    assert result.exit_code == ExitCode.DATA_ERROR
    assert "Template syntax error on line 1" in result.stderr
