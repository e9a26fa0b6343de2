# topmark:header:start
#
#   project      : Doc2Readme
#   file         : reader.py
#   file_relpath : src/doc2readme/input/reader.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Assemble the `InputFile` of a render pass.

Steps: package metadata → target selection → crate root source (from disk or
macro-expanded) → crate docs and top-level items → frozen scope table.

Source problems are reported through the returned `DiagnosticLog`; a syntax
error marks the log as failed and yields an `InputFile` without docs.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from doc2readme.config.logging import get_logger
from doc2readme.diagnostic.model import DiagnosticLog
from doc2readme.input.errors import SourceReadError
from doc2readme.input.expand import ExpandOptions, read_expansion
from doc2readme.input.manifest import load_manifest, select_target
from doc2readme.input.model import InputFile, TargetType
from doc2readme.input.source import RustSyntaxError, read_source
from doc2readme.resolve.scope import Scope, build_scope

if TYPE_CHECKING:
    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.input.model import Manifest, Target

logger: Doc2ReadmeLogger = get_logger(__name__)


def read_code(
    manifest: Manifest,
    target_type: TargetType,
    code: str,
    diagnostics: DiagnosticLog,
) -> InputFile:
    """Read crate docs and scope from ``code`` and combine them with ``manifest``.

    Args:
        manifest (Manifest): Package metadata.
        target_type (TargetType): Kind of the documented target.
        code (str): Source of the crate root.
        diagnostics (DiagnosticLog): Collects warnings and syntax errors.

    Returns:
        InputFile: The assembled input. On a syntax error the docs are empty
        and ``diagnostics.is_fail()`` is True.
    """
    try:
        unit = read_source(code, diagnostics)
    except RustSyntaxError as exc:
        logger.debug("Syntax error at byte %d: %s", exc.offset, exc.message)
        diagnostics.syntax_error(exc.message, exc.offset)
        return _input_file(manifest, target_type, "", Scope.empty(manifest.lib_name))

    scope = build_scope(
        manifest.lib_name,
        manifest.edition,
        unit.items,
        unit.uses,
        ordered=unit.nodes,
    )
    for glob in scope.glob_imports:
        diagnostics.add_info(
            f"Glob import `{glob}` is not expanded; links through it stay as written"
        )
    return _input_file(manifest, target_type, unit.rustdoc, scope)


def _input_file(
    manifest: Manifest, target_type: TargetType, rustdoc: str, scope: Scope
) -> InputFile:
    return InputFile(
        crate_name=manifest.name,
        crate_version=manifest.version,
        target_type=target_type,
        rustdoc=rustdoc,
        scope=scope,
        dependencies=dict(manifest.dependencies),
        repository=manifest.repository,
        license=manifest.license,
        rust_version=manifest.rust_version,
    )


def read_crate_code(
    target: Target,
    target_type: TargetType,
    *,
    manifest_path: Path | None = None,
    expand_macros: bool = False,
    options: ExpandOptions | None = None,
) -> str:
    """Return the source of the crate root, expanded when ``expand_macros`` is set.

    Raises:
        SourceReadError: When the file cannot be read or is not UTF-8.
        CargoCommandError: When macro expansion fails.
    """
    if expand_macros:
        return read_expansion(target, target_type, manifest_path, options)
    path = Path(target.src_path)
    logger.info("Reading %s", path)
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceReadError(f"{path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise SourceReadError(f"Failed to read crate code: {exc}") from exc


def read_input(
    manifest_path: Path | None = None,
    package: str | None = None,
    *,
    prefer_bin: bool = False,
    expand_macros: bool = False,
    options: ExpandOptions | None = None,
) -> tuple[InputFile, DiagnosticLog]:
    """Collect everything a render pass needs for one package.

    Args:
        manifest_path (Path | None): ``Cargo.toml`` to read.
        package (str | None): Package to select in a workspace.
        prefer_bin (bool): Prefer the binary target over the library.
        expand_macros (bool): Expand macros with a nightly compiler first.
        options (ExpandOptions | None): Feature flags for macro expansion.

    Returns:
        tuple[InputFile, DiagnosticLog]: The input and the diagnostics
        collected while reading the crate root.

    Raises:
        InputError: When cargo fails, the package or target cannot be found, or
            the crate root cannot be read.
    """
    manifest = load_manifest(manifest_path, package)
    target, target_type = select_target(manifest, prefer_bin)
    code = read_crate_code(
        target,
        target_type,
        manifest_path=manifest_path,
        expand_macros=expand_macros,
        options=options,
    )
    diagnostics = DiagnosticLog(filename=Path(target.src_path).name, code=code)
    input_file = read_code(manifest, target_type, code, diagnostics)
    logger.debug("Input: %s", input_file)
    return input_file, diagnostics
