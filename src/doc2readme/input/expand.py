# topmark:header:start
#
#   project      : Doc2Readme
#   file         : expand.py
#   file_relpath : src/doc2readme/input/expand.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Macro expansion through a nightly compiler.

Doc attributes such as ``#![doc = include_str!("../README.md")]`` only carry
text after expansion. ``cargo +nightly rustc -- -Zunpretty=expanded`` prints the
expanded crate root, which is then read like a regular source file.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from doc2readme.config.logging import get_logger
from doc2readme.input.errors import CargoCommandError
from doc2readme.input.manifest import CARGO
from doc2readme.input.model import TargetType

if TYPE_CHECKING:
    from pathlib import Path

    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.input.model import Target

logger: Doc2ReadmeLogger = get_logger(__name__)


@dataclass(frozen=True)
class ExpandOptions:
    """Feature selection passed through to cargo."""

    features: tuple[str, ...] = field(default_factory=tuple)
    all_features: bool = False
    no_default_features: bool = False


def expansion_command(
    target: Target,
    target_type: TargetType,
    manifest_path: Path | None = None,
    options: ExpandOptions | None = None,
) -> list[str]:
    """Return the cargo command line that prints the expanded crate root."""
    options = options or ExpandOptions()
    cmd: list[str] = [CARGO, "+nightly", "rustc"]
    if manifest_path is not None:
        cmd += ["--manifest-path", str(manifest_path)]
    if target_type is TargetType.LIB:
        cmd.append("--lib")
    else:
        cmd += ["--bin", target.name]
    if options.features:
        cmd += ["--features", ",".join(options.features)]
    if options.all_features:
        cmd.append("--all-features")
    if options.no_default_features:
        cmd.append("--no-default-features")
    cmd += ["--", "-Zunpretty=expanded"]
    return cmd


def read_expansion(
    target: Target,
    target_type: TargetType,
    manifest_path: Path | None = None,
    options: ExpandOptions | None = None,
) -> str:
    """Run the nightly compiler and return the expanded source.

    Args:
        target (Target): The selected target.
        target_type (TargetType): Whether ``target`` is the library or a binary.
        manifest_path (Path | None): Manifest to pass to cargo.
        options (ExpandOptions | None): Feature flags.

    Returns:
        str: The expanded crate root.

    Raises:
        CargoCommandError: When the compiler fails or prints non-UTF-8 output.
            Its ``stderr`` holds the compiler output.
    """
    cmd = expansion_command(target, target_type, manifest_path, options)
    logger.info("Expanding macros of %s target `%s`", target_type.value, target.name)
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc: subprocess.CompletedProcess[bytes] = subprocess.run(  # noqa: S603
            cmd,
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise CargoCommandError(f"Failed to run cargo: {exc}", cmd) from exc

    stderr = proc.stderr.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise CargoCommandError("Failed to expand macros", cmd, proc.returncode, stderr)
    try:
        return proc.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CargoCommandError(
            f"rustc output is not valid UTF-8: {exc}", cmd, proc.returncode, stderr
        ) from exc
