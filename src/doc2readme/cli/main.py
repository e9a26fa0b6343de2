# topmark:header:start
#
#   project      : Doc2Readme
#   file         : main.py
#   file_relpath : src/doc2readme/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Command line interface.

``doc2readme [OPTIONS]`` renders the readme of the package in the working
directory (or ``--manifest-path``). Installed as ``cargo-doc2readme`` it is also
invoked by cargo as ``cargo-doc2readme doc2readme [OPTIONS]``; the leading
``doc2readme`` argument is accepted and ignored.

``--check`` leaves the readme alone and exits non-zero when it is outdated.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from doc2readme.cli.console import ClickConsole
from doc2readme.cli.errors import (
    Doc2ReadmeConfigError,
    Doc2ReadmeDataError,
    Doc2ReadmeExternalError,
    Doc2ReadmeFileNotFoundError,
    Doc2ReadmeIOError,
    Doc2ReadmeUsageError,
)
from doc2readme.cli.exit_codes import ExitCode
from doc2readme.cli.options import common_verbose_options, resolve_verbosity
from doc2readme.config import Config, ConfigError, MutableConfig
from doc2readme.config.logging import get_logger, resolve_env_log_level, setup_logging
from doc2readme.constants import DOC2README_VERSION
from doc2readme.diagnostic.model import DiagnosticLog
from doc2readme.diagnostic.render import render_diagnostic, render_diagnostics
from doc2readme.input.errors import CargoCommandError, ManifestError, SourceReadError
from doc2readme.input.expand import ExpandOptions
from doc2readme.input.reader import read_input
from doc2readme.pipeline.render import render_readme
from doc2readme.pipeline.template import TemplateError, load_template
from doc2readme.pipeline.verify import check_up2date
from doc2readme.utils.diff import render_patch, unified_diff
from doc2readme.utils.file import write_text_atomic

if TYPE_CHECKING:
    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.input.model import InputFile
    from doc2readme.pipeline.verify import CheckResult

logger: Doc2ReadmeLogger = get_logger(__name__)

CARGO_SUBCOMMAND: str = "doc2readme"


def init_common_state(
    ctx: click.Context, *, verbose: int, quiet: int, no_color: bool
) -> ClickConsole:
    """Set up logging and the console, and store them in ``ctx.obj``."""
    ctx.obj = ctx.obj or {}

    # The environment wins over -v/-q, but conflicting flags are still an error.
    level_cli = resolve_verbosity(verbose, quiet)
    level_env = resolve_env_log_level()
    level = level_cli if level_env is None else level_env
    setup_logging(level=level)
    ctx.obj["log_level"] = level

    enable_color = not no_color and sys.stderr.isatty()
    ctx.color = enable_color
    console = ClickConsole(enable_color=enable_color)
    ctx.obj["console"] = console
    return console


def print_diagnostics(console: ClickConsole, log: DiagnosticLog) -> None:
    """Print the diagnostics of ``log`` to stderr, if there are any."""
    if len(log) > 0:
        console.message(render_diagnostics(log, color=console.enable_color), nl=False)


def feature_flag_warnings(config: Config) -> DiagnosticLog:
    """Warn about feature flags that only matter with ``--expand-macros``."""
    diag = DiagnosticLog(filename="")
    if config.expand_macros:
        return diag
    if config.features:
        diag.add_warning("--features option has no effect without the --expand-macros flag")
    if config.no_default_features:
        diag.add_warning(
            "--no-default-features flag has no effect without the --expand-macros flag"
        )
    if config.all_features:
        diag.add_warning("--all-features flag has no effect without the --expand-macros flag")
    return diag


def load_config(
    manifest_path: Path | None, config_file: Path | None, cli_args: dict[str, object]
) -> Config:
    """Merge all configuration sources.

    Raises:
        Doc2ReadmeConfigError: On invalid configuration.
    """
    try:
        draft = MutableConfig.load_merged(manifest_path, config_file)
        draft.apply_cli(cli_args)
    except ConfigError as exc:
        raise Doc2ReadmeConfigError(str(exc)) from exc
    return draft.freeze()


def collect_input(
    console: ClickConsole,
    config: Config,
    manifest_path: Path | None,
    package: str | None,
) -> InputFile:
    """Read the package, print its diagnostics and return the input.

    Raises:
        Doc2ReadmeError: When the input cannot be collected.
    """
    options = ExpandOptions(
        features=config.features,
        all_features=config.all_features,
        no_default_features=config.no_default_features,
    )
    try:
        input_file, diagnostics = read_input(
            manifest_path,
            package,
            prefer_bin=config.prefer_bin,
            expand_macros=config.expand_macros,
            options=options,
        )
    except CargoCommandError as exc:
        if exc.stderr:
            console.message(exc.stderr.rstrip("\n"))
        raise Doc2ReadmeExternalError(str(exc)) from exc
    except ManifestError as exc:
        raise Doc2ReadmeFileNotFoundError(str(exc)) from exc
    except SourceReadError as exc:
        raise Doc2ReadmeIOError(str(exc)) from exc

    print_diagnostics(console, diagnostics)
    if diagnostics.is_fail():
        raise Doc2ReadmeDataError(f"Could not read {diagnostics.filename}")
    return input_file


def report_check(
    console: ClickConsole, result: CheckResult, out: Path, *, show_diff: bool, expected: str | None
) -> None:
    """Print the check outcome (and the diff, when asked for)."""
    outcome = result.outcome
    label = outcome.color(outcome.value) if console.enable_color else outcome.value
    logger.info("Check outcome: %s", label)
    console.message(
        render_diagnostic(result.to_diagnostic(), str(out), "", color=console.enable_color),
        nl=False,
    )
    if show_diff and not result.is_ok() and expected is not None:
        current = out.read_text(encoding="utf-8", errors="replace")
        patch = unified_diff(current, expected, out.name)
        console.message(render_patch(patch, color=console.enable_color), nl=False)


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Create a readme file from the crate-level rustdoc of a Rust package.",
)
@click.argument("subcommand", required=False, metavar="[doc2readme]")
@click.option(
    "--manifest-path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to Cargo.toml.",
)
@click.option("-p", "--package", default=None, help="Package to document, in a workspace.")
@click.option(
    "-o",
    "--out",
    default=None,
    help="Output file ('-' for stdout). Defaults to README.md.",
)
@click.option(
    "-t",
    "--template",
    default=None,
    help="Template file (Jinja2). Defaults to README.j2; a built-in template is used when "
    "it does not exist.",
)
@click.option(
    "--expand-macros",
    is_flag=True,
    default=None,
    help="Use nightly rustc to expand macros before reading the source. Needed for "
    "function-like macros in doc attributes.",
)
@click.option(
    "-F",
    "--features",
    default=None,
    help="Space or comma separated list of features to activate (with --expand-macros).",
)
@click.option(
    "--all-features",
    is_flag=True,
    default=None,
    help="Activate all available features (with --expand-macros).",
)
@click.option(
    "--no-default-features",
    is_flag=True,
    default=None,
    help="Do not activate the `default` feature (with --expand-macros).",
)
@click.option("--bin", "bin_", is_flag=True, help="Prefer binary targets over library targets.")
@click.option("--lib", is_flag=True, help="Prefer library targets over binary targets (default).")
@click.option(
    "--check",
    is_flag=True,
    help="Verify that the output file is up to date and fail if it needs updating. "
    "The file is not changed.",
)
@click.option("--diff", "show_diff", is_flag=True, help="With --check, show what would change.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Additional configuration file (same keys as doc2readme.toml).",
)
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@common_verbose_options
@click.version_option(DOC2README_VERSION, "--version", prog_name="doc2readme")
@click.pass_context
def cli(  # noqa: PLR0913
    ctx: click.Context,
    subcommand: str | None,
    manifest_path: Path | None,
    package: str | None,
    out: str | None,
    template: str | None,
    expand_macros: bool | None,
    features: str | None,
    all_features: bool | None,
    no_default_features: bool | None,
    bin_: bool,
    lib: bool,
    check: bool,
    show_diff: bool,
    config_file: Path | None,
    no_color: bool,
    verbose: int,
    quiet: int,
) -> None:
    """Render or check the readme."""
    console = init_common_state(ctx, verbose=verbose, quiet=quiet, no_color=no_color)

    if subcommand is not None and subcommand != CARGO_SUBCOMMAND:
        raise Doc2ReadmeUsageError(f"Unexpected argument '{subcommand}'.")
    if bin_ and lib:
        raise Doc2ReadmeUsageError("The '--bin' and '--lib' options are mutually exclusive.")
    if show_diff and not check:
        raise Doc2ReadmeUsageError("The '--diff' option requires '--check'.")

    config = load_config(
        manifest_path,
        config_file,
        {
            "out": out,
            "template": template,
            "expand_macros": expand_macros,
            "features": features,
            "all_features": all_features,
            "no_default_features": no_default_features,
            "prefer_bin": True if bin_ else (False if lib else None),
        },
    )
    print_diagnostics(console, feature_flag_warnings(config))

    input_file = collect_input(console, config, manifest_path, package)
    try:
        template_source = load_template(config.template)
    except TemplateError as exc:
        raise Doc2ReadmeIOError(str(exc)) from exc

    if check:
        ctx.exit(run_check(console, config, input_file, template_source, show_diff=show_diff))

    link_diagnostics = DiagnosticLog(filename=input_file.crate_name)
    try:
        text = render_readme(input_file, template_source, link_diagnostics).text
    except TemplateError as exc:
        raise Doc2ReadmeDataError(str(exc)) from exc
    print_diagnostics(console, link_diagnostics)

    if config.out is None:
        logger.info("Writing README to stdout")
        console.print(text, nl=False)
        return
    logger.info("Writing README to %s", config.out)
    try:
        write_text_atomic(config.out, text)
    except OSError as exc:
        raise Doc2ReadmeIOError(f"Unable to write {config.out}: {exc}") from exc


def run_check(
    console: ClickConsole,
    config: Config,
    input_file: InputFile,
    template_source: str,
    *,
    show_diff: bool,
) -> ExitCode:
    """Check the existing readme; return the exit code.

    Raises:
        Doc2ReadmeError: When the readme cannot be read or the template fails.
    """
    if config.out is None:
        raise Doc2ReadmeUsageError("'--check' needs an output file, not stdout.")
    out = config.out
    logger.info("Reading %s", out)
    try:
        # undecodable bytes are kept as surrogates instead of failing the check
        current = out.read_text(encoding="utf-8", errors="surrogateescape")
    except FileNotFoundError as exc:
        raise Doc2ReadmeFileNotFoundError(f"File not found: {out}") from exc
    except OSError as exc:
        raise Doc2ReadmeIOError(f"Unable to read {out}: {exc}") from exc

    link_diagnostics = DiagnosticLog(filename=input_file.crate_name)
    try:
        result = check_up2date(input_file, template_source, current, link_diagnostics)
        expected = result.expected
        if show_diff and not result.is_ok() and expected is None:
            expected = render_readme(input_file, template_source, link_diagnostics).text
    except TemplateError as exc:
        raise Doc2ReadmeDataError(str(exc)) from exc
    print_diagnostics(console, link_diagnostics)

    report_check(console, result, out, show_diff=show_diff, expected=expected)
    return ExitCode.SUCCESS if result.is_ok() else ExitCode.FAILURE


if __name__ == "__main__":
    cli()
