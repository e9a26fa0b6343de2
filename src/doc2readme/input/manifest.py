# topmark:header:start
#
#   project      : Doc2Readme
#   file         : manifest.py
#   file_relpath : src/doc2readme/input/manifest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Package metadata from ``cargo metadata``.

`run_cargo_metadata` shells out to cargo; everything else works on the decoded
JSON document so it can be exercised without a Rust toolchain:

* `parse_metadata` picks the package and builds a `Manifest`, including the
  dependency table (resolved versions from ``resolve.nodes`` joined with the
  declared requirements);
* `select_target` picks the target whose crate docs become the readme.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any

from doc2readme.config.logging import get_logger
from doc2readme.input.errors import CargoCommandError, ManifestError
from doc2readme.input.model import DependencyRecord, Manifest, Target, TargetType
from doc2readme.links.versions import VersionReq, VersionReqError, parse_version

if TYPE_CHECKING:
    from semver import Version

    from doc2readme.config.logging import Doc2ReadmeLogger

logger: Doc2ReadmeLogger = get_logger(__name__)

CARGO: str = "cargo"


def run_cargo_metadata(manifest_path: Path | None = None) -> dict[str, Any]:
    """Run ``cargo metadata`` and return the decoded document.

    Args:
        manifest_path (Path | None): ``Cargo.toml`` to inspect; cargo searches
            upwards from the working directory when None.

    Returns:
        dict[str, Any]: The metadata document.

    Raises:
        CargoCommandError: When cargo is missing or exits non-zero, or its
            output is not JSON.
    """
    cmd: list[str] = [CARGO, "metadata", "--format-version=1", "--all-features"]
    if manifest_path is not None:
        cmd += ["--manifest-path", str(manifest_path)]
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc: subprocess.CompletedProcess[str] = subprocess.run(  # noqa: S603
            cmd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CargoCommandError(f"Failed to run cargo: {exc}", cmd) from exc
    if proc.returncode != 0:
        raise CargoCommandError(
            "Failed to get cargo metadata", cmd, proc.returncode, proc.stderr
        )
    try:
        data = json.loads(proc.stdout)
    except json.JSONDecodeError as exc:
        raise CargoCommandError(
            f"cargo metadata returned invalid JSON: {exc}", cmd, proc.returncode, proc.stderr
        ) from exc
    if not isinstance(data, dict):
        raise CargoCommandError("cargo metadata returned an unexpected document", cmd)
    return data


def _find_package(data: dict[str, Any], package: str | None) -> dict[str, Any]:
    packages: list[dict[str, Any]] = data.get("packages") or []
    if package is not None:
        for pkg in packages:
            if pkg.get("name") == package:
                return pkg
        raise ManifestError(f"Cannot find requested package `{package}`")

    root_id = (data.get("resolve") or {}).get("root")
    if root_id is not None:
        for pkg in packages:
            if pkg.get("id") == root_id:
                return pkg
    # without a resolve graph, a single workspace member is the root package
    members = data.get("workspace_members") or []
    if len(members) == 1:
        for pkg in packages:
            if pkg.get("id") == members[0]:
                return pkg
    raise ManifestError(
        "Missing package. Please make sure there is a package here, "
        "workspace roots don't contain any documentation."
    )


def _parse_version(text: str, what: str) -> Version:
    try:
        return parse_version(text)
    except VersionReqError as exc:
        raise ManifestError(f"Invalid version of {what}: {exc}") from exc


def _parse_targets(pkg: dict[str, Any]) -> tuple[Target, ...]:
    return tuple(
        Target(
            name=str(t.get("name", "")),
            kinds=tuple(str(k) for k in t.get("kind") or ()),
            src_path=str(t.get("src_path", "")),
        )
        for t in pkg.get("targets") or ()
    )


def _declared_requirements(pkg: dict[str, Any]) -> dict[str, VersionReq | None]:
    """Map the source identifier of each normal dependency to its requirement."""
    reqs: dict[str, VersionReq | None] = {}
    for dep in pkg.get("dependencies") or ():
        if dep.get("kind") not in (None, "normal"):
            continue
        ident = str(dep.get("rename") or dep.get("name", "")).replace("-", "_")
        try:
            reqs[ident] = VersionReq.parse(str(dep.get("req") or "*"))
        except VersionReqError as exc:
            logger.warning("Ignoring the requirement of dependency `%s`: %s", ident, exc)
            reqs[ident] = None
    return reqs


def _build_dependencies(
    data: dict[str, Any], pkg: dict[str, Any], version: Version
) -> dict[str, DependencyRecord]:
    name = str(pkg["name"])
    lib_name = name.replace("-", "_")
    declared = _declared_requirements(pkg)
    packages_by_id = {p.get("id"): p for p in data.get("packages") or ()}

    deps: dict[str, DependencyRecord] = {}
    nodes = (data.get("resolve") or {}).get("nodes") or ()
    node = next((n for n in nodes if n.get("id") == pkg.get("id")), None)
    if node is not None:
        for dep in node.get("deps") or ():
            kinds = dep.get("dep_kinds") or [{"kind": None}]
            if not any(k.get("kind") in (None, "normal") for k in kinds):
                continue
            ident = str(dep.get("name", ""))
            dep_pkg = packages_by_id.get(dep.get("pkg"))
            if not ident or dep_pkg is None:
                continue
            deps[ident] = DependencyRecord(
                declared_name=ident,
                published_name=str(dep_pkg["name"]),
                version_requirement=declared.get(ident),
                resolved_version=_parse_version(str(dep_pkg["version"]), f"`{dep_pkg['name']}`"),
            )

    # declared but not resolved (no resolve graph, or an inactive optional dependency)
    for dep in pkg.get("dependencies") or ():
        ident = str(dep.get("rename") or dep.get("name", "")).replace("-", "_")
        if ident in deps or ident not in declared:
            continue
        deps[ident] = DependencyRecord(
            declared_name=ident,
            published_name=str(dep.get("name", ident)),
            version_requirement=declared[ident],
        )

    deps[lib_name] = DependencyRecord(
        declared_name=lib_name,
        published_name=name,
        version_requirement=VersionReq.parse(f"={version}"),
        resolved_version=version,
    )
    return deps


def parse_metadata(data: dict[str, Any], package: str | None = None) -> Manifest:
    """Build a `Manifest` from a ``cargo metadata`` document.

    Args:
        data (dict[str, Any]): The decoded metadata document.
        package (str | None): Package to select; the root package when None.

    Returns:
        Manifest: Package facts and the dependency table.

    Raises:
        ManifestError: When the package is missing or malformed.
    """
    pkg = _find_package(data, package)
    try:
        name = str(pkg["name"])
        version = _parse_version(str(pkg["version"]), f"package `{name}`")
    except KeyError as exc:
        raise ManifestError(f"Package metadata lacks {exc}") from exc

    metadata = pkg.get("metadata") or {}
    manifest = Manifest(
        name=name,
        version=version,
        manifest_path=str(pkg.get("manifest_path", "")),
        edition=str(pkg.get("edition") or "2015"),
        license=pkg.get("license"),
        repository=pkg.get("repository"),
        rust_version=pkg.get("rust_version"),
        targets=_parse_targets(pkg),
        dependencies=_build_dependencies(data, pkg, version),
        metadata=metadata if isinstance(metadata, dict) else {},
    )
    logger.debug(
        "Package %s %s: %d targets, %d dependencies",
        manifest.name,
        manifest.version,
        len(manifest.targets),
        len(manifest.dependencies),
    )
    return manifest


def select_target(manifest: Manifest, prefer_bin: bool = False) -> tuple[Target, TargetType]:
    """Pick the target whose crate docs are rendered.

    The library target wins by default; with ``prefer_bin`` the binary named
    like the package wins. Either falls back to the other, and finally to the
    first binary target.

    Raises:
        ManifestError: When the package has neither a library nor a binary.
    """
    lib = next((t for t in manifest.targets if t.is_lib), None)
    default_bin = next(
        (t for t in manifest.targets if t.is_bin and t.name == manifest.name), None
    )
    order: list[tuple[Target | None, TargetType]] = [
        (lib, TargetType.LIB),
        (default_bin, TargetType.BIN),
    ]
    if prefer_bin:
        order.reverse()
    order.append((next((t for t in manifest.targets if t.is_bin), None), TargetType.BIN))
    for target, target_type in order:
        if target is not None:
            logger.debug("Selected %s target `%s`", target_type.value, target.name)
            return target, target_type
    raise ManifestError("Failed to find a library or binary target")


def load_manifest(manifest_path: Path | None = None, package: str | None = None) -> Manifest:
    """Run cargo and parse its metadata (see `parse_metadata`)."""
    if manifest_path is not None and not manifest_path.is_absolute():
        manifest_path = Path.cwd() / manifest_path
    return parse_metadata(run_cargo_metadata(manifest_path), package)
