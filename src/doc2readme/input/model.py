# topmark:header:start
#
#   project      : Doc2Readme
#   file         : model.py
#   file_relpath : src/doc2readme/input/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Input records handed from the collaborators to the readme pipeline.

Sections:
    * TargetType: which compiled artifact the documentation was taken from.
    * DependencyRecord / Manifest: package metadata as reported by cargo.
    * DeclaredItem and the ``Use*`` tree: top-level declarations of the crate root.
    * SourceUnit: everything the source reader extracted from one file.
    * InputFile: the assembled input of one render pass.

All records are frozen; the scope table is built from them once and never
mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final, Union

if TYPE_CHECKING:
    from semver import Version

    from doc2readme.links.versions import VersionReq
    from doc2readme.resolve.kinds import SymbolKind
    from doc2readme.resolve.scope import Scope

# Cargo target kinds that produce a library.
LIB_KINDS: Final[frozenset[str]] = frozenset(
    {"lib", "rlib", "dylib", "cdylib", "staticlib", "proc-macro"}
)


class TargetType(str, Enum):
    """Kind of compiled artifact the documentation was taken from."""

    LIB = "lib"
    BIN = "bin"


@dataclass(frozen=True)
class DependencyRecord:
    """One dependency of the package, keyed by the identifier used in Rust code.

    Attributes:
        declared_name (str): Identifier as seen in source (renamed, ``-`` → ``_``).
        published_name (str): Name of the package on crates.io.
        version_requirement (VersionReq | None): Requirement from the manifest, if any.
        resolved_version (Version | None): Version picked by the resolver, if known.
    """

    declared_name: str
    published_name: str
    version_requirement: VersionReq | None = None
    resolved_version: Version | None = None

    @property
    def lib_name(self) -> str:
        """Return the library name of the dependency (its docs.rs path segment)."""
        return self.published_name.replace("-", "_")


@dataclass(frozen=True)
class Target:
    """A build target of the package (``lib``, ``bin``, ``proc-macro``, ...)."""

    name: str
    kinds: tuple[str, ...]
    src_path: str

    @property
    def is_lib(self) -> bool:
        """Return True for library-like targets (including proc-macro crates)."""
        return any(k in LIB_KINDS for k in self.kinds)

    @property
    def is_bin(self) -> bool:
        """Return True for binary targets."""
        return "bin" in self.kinds


@dataclass(frozen=True)
class Manifest:
    """Package metadata supplied by the manifest collaborator."""

    name: str
    version: Version
    manifest_path: str
    edition: str = "2015"
    license: str | None = None
    repository: str | None = None
    rust_version: str | None = None
    targets: tuple[Target, ...] = ()
    dependencies: dict[str, DependencyRecord] = field(default_factory=lambda: {})
    metadata: dict[str, object] = field(default_factory=lambda: {})

    @property
    def lib_name(self) -> str:
        """Return the crate name as it appears in Rust paths."""
        return self.name.replace("-", "_")


class Visibility(str, Enum):
    """Visibility of a top-level item."""

    PRIVATE = "private"
    PUBLIC = "pub"
    RESTRICTED = "pub(restricted)"

    @property
    def is_public(self) -> bool:
        """Return True only for plain ``pub``."""
        return self is Visibility.PUBLIC


@dataclass(frozen=True)
class Span:
    """Byte range into the source text."""

    start: int
    end: int


@dataclass(frozen=True)
class DeclaredItem:
    """A top-level declaration of the crate root.

    Attributes:
        kind (SymbolKind): The declaration's kind.
        ident (str): The identifier under which the item is reachable.
        visibility (Visibility): Declared visibility.
        exported (bool): ``#[macro_export]`` on a ``macro_rules!`` item.
        alias_of (str | None): Original crate name for ``extern crate x as y``.
        span (Span | None): Location in the source text.
    """

    kind: SymbolKind
    ident: str
    visibility: Visibility = Visibility.PRIVATE
    exported: bool = False
    alias_of: str | None = None
    span: Span | None = None


@dataclass(frozen=True)
class UsePath:
    """``ident::<subtree>``."""

    ident: str
    tree: UseTree


@dataclass(frozen=True)
class UseName:
    """A plain imported name."""

    ident: str


@dataclass(frozen=True)
class UseRename:
    """``ident as rename``."""

    ident: str
    rename: str


@dataclass(frozen=True)
class UseGlob:
    """``*``; never expanded."""


@dataclass(frozen=True)
class UseGroup:
    """``{a, b::c, ...}``."""

    items: tuple[UseTree, ...]


UseTree = Union[UsePath, UseName, UseRename, UseGlob, UseGroup]


@dataclass(frozen=True)
class UseItem:
    """A top-level ``use`` declaration."""

    tree: UseTree
    visibility: Visibility = Visibility.PRIVATE
    span: Span | None = None


@dataclass(frozen=True)
class SourceUnit:
    """Result of reading one compilation unit.

    Attributes:
        rustdoc (str): The crate-level documentation, unindented.
        nodes (tuple[DeclaredItem | UseItem, ...]): Top-level declarations and
            ``use`` items in source order.
        code (str): The source text (for diagnostic excerpts).
    """

    rustdoc: str
    nodes: tuple[DeclaredItem | UseItem, ...] = ()
    code: str = ""

    @property
    def items(self) -> list[DeclaredItem]:
        """Return the top-level declarations in source order."""
        return [n for n in self.nodes if isinstance(n, DeclaredItem)]

    @property
    def uses(self) -> list[UseItem]:
        """Return the top-level ``use`` items in source order."""
        return [n for n in self.nodes if isinstance(n, UseItem)]


@dataclass(frozen=True)
class InputFile:
    """Everything one render pass needs.

    Attributes:
        crate_name (str): Package name as published (may contain ``-``).
        crate_version (Version): Package version.
        target_type (TargetType): Kind of the documented target.
        rustdoc (str): The raw crate-level documentation.
        scope (Scope): The frozen scope table of the crate root.
        dependencies (dict[str, DependencyRecord]): Dependency table keyed by
            the identifier used in source.
        repository (str | None): Repository URL.
        license (str | None): SPDX license expression.
        rust_version (str | None): Minimum supported Rust version.
    """

    crate_name: str
    crate_version: Version
    target_type: TargetType
    rustdoc: str
    scope: Scope
    dependencies: dict[str, DependencyRecord] = field(default_factory=lambda: {})
    repository: str | None = None
    license: str | None = None
    rust_version: str | None = None

    @property
    def lib_name(self) -> str:
        """Return the crate name as it appears in Rust paths."""
        return self.crate_name.replace("-", "_")
