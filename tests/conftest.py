# topmark:header:start
#
#   project      : Doc2Readme
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the Doc2Readme test suite.

This file sets up global fixtures and customizes the logging configuration for test runs,
ensuring consistent and verbose logging output during testing.

Notes:
    Most tests build an `InputFile` straight from Rust source text with
    `make_input_file`, so no Rust toolchain is needed. Only the CLI tests touch
    ``cargo``, and they replace it with a fake `read_input`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

import pytest
from hypothesis import settings
from semver import Version

from doc2readme.config import logging
from doc2readme.config.logging import LOG_LEVEL_ENV
from doc2readme.diagnostic.model import DiagnosticLog
from doc2readme.input.model import DependencyRecord, Manifest, Target, TargetType
from doc2readme.input.reader import read_code
from doc2readme.links.versions import VersionReq

if TYPE_CHECKING:
    from pathlib import Path

    from doc2readme.input.model import InputFile

# `nox -s property_test` selects the larger profile.
settings.register_profile("thorough", max_examples=1000, deadline=None)

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.integration`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_integration: DecoratorType[Any] = as_typed_mark(pytest.mark.integration)
mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)
mark_property: DecoratorType[Any] = as_typed_mark(pytest.mark.property)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.mark.parametrize`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.mark.parametrize`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_doc2readme_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the runtime log level is not forced via env during tests.

    This avoids accidental DEBUG/TRACE noise when the developer has exported
    DOC2README_LOG_LEVEL in their shell.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE for the whole test session.

    Args:
        config (pytest.Config): The pytest configuration object (unused).
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


# --- input builders ---

CRATE_NAME = "my-crate"
CRATE_VERSION = "1.2.3"


def make_dependency(
    ident: str,
    version: str | None = "1.0.0",
    *,
    requirement: str | None = None,
    published_name: str | None = None,
) -> DependencyRecord:
    """Return a dependency record as the manifest reader would build it.

    Args:
        ident (str): Identifier used in Rust source.
        version (str | None): Resolved version, if any.
        requirement (str | None): Requirement from the manifest; defaults to
            ``^version``.
        published_name (str | None): Name on crates.io; defaults to ``ident``.

    Returns:
        DependencyRecord: The record.
    """
    req_text = requirement if requirement is not None else (version or "*")
    return DependencyRecord(
        declared_name=ident,
        published_name=published_name or ident,
        version_requirement=VersionReq.parse(req_text),
        resolved_version=Version.parse(version) if version is not None else None,
    )


def make_manifest(
    *,
    name: str = CRATE_NAME,
    version: str = CRATE_VERSION,
    edition: str = "2021",
    dependencies: dict[str, DependencyRecord] | None = None,
    **extra: Any,
) -> Manifest:
    """Return a `Manifest` with a library target and the own-crate dependency entry."""
    lib_name = name.replace("-", "_")
    deps = dict(dependencies or {})
    deps[lib_name] = make_dependency(
        lib_name, version, requirement=f"={version}", published_name=name
    )
    return Manifest(
        name=name,
        version=Version.parse(version),
        manifest_path=f"/work/{name}/Cargo.toml",
        edition=edition,
        targets=(Target(lib_name, ("lib",), f"/work/{name}/src/lib.rs"),),
        dependencies=deps,
        **extra,
    )


def make_input_file(
    code: str,
    *,
    manifest: Manifest | None = None,
    target_type: TargetType = TargetType.LIB,
    diagnostics: DiagnosticLog | None = None,
) -> InputFile:
    """Read ``code`` as the crate root of ``manifest`` (see `read_code`)."""
    diag = diagnostics if diagnostics is not None else DiagnosticLog("lib.rs", code)
    return read_code(manifest or make_manifest(), target_type, code, diag)


@pytest.fixture
def isolation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run a test in an empty package directory.

    Args:
        tmp_path (Path): The pytest-provided temporary directory for the test.
        monkeypatch (pytest.MonkeyPatch): Fixture to change the working directory.

    Returns:
        Path: The package directory, which is also the working directory.
    """
    cwd: Path = tmp_path / "proj"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd
