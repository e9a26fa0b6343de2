# topmark:header:start
#
#   project      : Doc2Readme
#   file         : builder.py
#   file_relpath : src/doc2readme/links/builder.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Turn resolved Rust paths into documentation URLs.

URL shapes:

* ``std``/``core``/``alloc``: ``https://doc.rust-lang.org/stable/std/?search=<path>``,
  except primitives and std macros, which have fixed pages at the std root;
* a bare crate: ``https://crates.io/crates/<name>[/<version>]``;
* anything inside a crate: ``https://docs.rs/<name>/<version|latest>/<lib>/``
  followed by the module path and a kind page (``struct.Foo.html``), or
  ``?search=<path>`` when the kind has no page of its own.

Every crate a link points into is recorded in the active `DependencyInfo`, so
``--check`` can later tell whether the versions in the links are still right.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final
from urllib.parse import unquote

from doc2readme.config.logging import get_logger
from doc2readme.constants import CRATES_IO_HOST, DOCS_RS_HOST, STD_CRATES, STD_DOCS_HOST
from doc2readme.resolve.kinds import DISAMBIGUATORS, SymbolKind
from doc2readme.resolve.scope import SELF_KEYWORDS, ResolvedLink, strip_generics

if TYPE_CHECKING:
    from semver import Version

    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.diagnostic.model import DiagnosticLog
    from doc2readme.input.model import DependencyRecord
    from doc2readme.links.depinfo import DependencyInfo
    from doc2readme.resolve.scope import Scope

logger: Doc2ReadmeLogger = get_logger(__name__)

_IDENT: Final[str] = r"(?:r#)?[A-Za-z_][A-Za-z0-9_]*"
RUST_PATH_RE: Final[re.Pattern[str]] = re.compile(rf"^(?:::)?{_IDENT}(?:::{_IDENT})*(?:\(\)|!)?$")

#: Page name templates on docs.rs, keyed by kind. Other kinds get a search link.
PAGE_TEMPLATES: Final[dict[SymbolKind, str]] = {
    SymbolKind.ATTRIBUTE_MACRO: "attr.{name}.html",
    SymbolKind.CONST: "constant.{name}.html",
    SymbolKind.DERIVING_MACRO: "derive.{name}.html",
    SymbolKind.ENUM: "enum.{name}.html",
    SymbolKind.TEXT_MACRO: "macro.{name}.html",
    SymbolKind.MODULE: "{name}/index.html",
    SymbolKind.PRIMITIVE: "primitive.{name}.html",
    SymbolKind.STATIC: "static.{name}.html",
    SymbolKind.STRUCT: "struct.{name}.html",
    SymbolKind.TRAIT: "trait.{name}.html",
    SymbolKind.TYPE_ALIAS: "type.{name}.html",
}


def parse_reference(raw: str) -> tuple[str, SymbolKind | None] | None:
    """Split a link destination into a Rust path and the kind it implies.

    Surrounding backticks are dropped, a rustdoc disambiguator (``struct@Foo``)
    selects the kind, and ``foo()``/``foo!`` suffixes mark functions and macros.

    Args:
        raw (str): The raw link destination or broken-reference label.

    Returns:
        tuple[str, SymbolKind | None] | None: The path (suffix included, since the
        scope table keys ``foo()`` and ``m!`` separately) and its kind, or None
        when ``raw`` is not a Rust path (a URL, a file, free text).
    """
    text = raw.strip()
    if len(text) >= 2 and text.startswith("`") and text.endswith("`"):
        text = text[1:-1].strip()

    kind: SymbolKind | None = None
    if "@" in text:
        prefix, _, rest = text.partition("@")
        if prefix not in DISAMBIGUATORS:
            return None
        kind = DISAMBIGUATORS[prefix]
        text = rest

    text = strip_generics(text).strip()
    if not RUST_PATH_RE.match(text):
        return None
    if kind is None:
        if text.endswith("()"):
            kind = SymbolKind.FUNCTION
        elif text.endswith("!"):
            kind = SymbolKind.TEXT_MACRO
    return text, kind


def _strip_call_suffix(name: str) -> str:
    if name.endswith("()"):
        return name[:-2]
    if name.endswith("!"):
        return name[:-1]
    return name


class LinkBuilder:
    """Build URLs for one render pass.

    Attributes:
        crate_name (str): Published name of the current package.
        crate_version (Version): Version of the current package.
        scope (Scope): Frozen scope table used by `resolve_reference`.
        dependencies (dict[str, DependencyRecord]): Dependency table keyed by the
            identifier used in source.
        depinfo (DependencyInfo): Accumulator for the crates links point into.
        diagnostics (DiagnosticLog | None): Where dependency lookup gaps are reported.
    """

    def __init__(
        self,
        crate_name: str,
        crate_version: Version,
        scope: Scope,
        dependencies: dict[str, DependencyRecord],
        depinfo: DependencyInfo,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.crate_name: str = crate_name
        self.crate_version: Version = crate_version
        self.scope: Scope = scope
        self.dependencies: dict[str, DependencyRecord] = dependencies
        self.depinfo: DependencyInfo = depinfo
        self.diagnostics: DiagnosticLog | None = diagnostics
        self._unknown_reported: set[str] = set()

    @property
    def lib_name(self) -> str:
        """Return the library name of the current package."""
        return self.crate_name.replace("-", "_")

    def resolve_reference(self, raw: str) -> str:
        """Resolve a raw link destination to its final URL.

        Destinations that are not Rust paths come back unchanged.

        Args:
            raw (str): The raw destination collected by the markdown rewriter.

        Returns:
            str: The URL to write into the link trailer.
        """
        # inline destinations arrive percent-encoded (`%60Vec%60`)
        parsed = parse_reference(unquote(raw))
        if parsed is None:
            logger.debug("Keeping link %r verbatim", raw)
            return raw
        path, kind = parsed
        resolved = self.scope.resolve(self.lib_name, path, kind)
        return self.build_link(resolved)

    def build_link(self, link: ResolvedLink) -> str:
        """Build the URL for a resolved path and record the crate it points into.

        Args:
            link (ResolvedLink): Canonical path and kind from `Scope.resolve`.

        Returns:
            str: The URL.
        """
        kind = link.kind
        segments = [s for s in link.segments if s]
        if not segments:
            return link.canonical_path
        segments[-1] = _strip_call_suffix(segments[-1])
        first, rest = segments[0], segments[1:]

        if first in STD_CRATES:
            url = self._std_link(rest, kind)
        else:
            crate_name, version, lib_name = self._lookup_crate(first)
            self.depinfo.add_dependency(crate_name, version, lib_name)
            if not rest:
                url = self._crates_io_link(crate_name, version)
            else:
                url = self._docs_rs_link(crate_name, version, lib_name, rest, kind)
        logger.trace("link %s (%s) -> %s", link.canonical_path, kind, url)
        return url

    def _lookup_crate(self, first: str) -> tuple[str, Version | None, str]:
        if first in SELF_KEYWORDS or first in (self.lib_name, self.crate_name):
            return self.crate_name, self.crate_version, self.lib_name
        record = self.dependencies.get(first)
        if record is not None:
            return record.published_name, record.resolved_version, record.lib_name
        if first not in self._unknown_reported:
            self._unknown_reported.add(first)
            if self.diagnostics is not None:
                self.diagnostics.add_warning(
                    f"Unable to find dependency `{first}`; linking to it without a version"
                )
        return first, None, first.replace("-", "_")

    @staticmethod
    def _std_link(rest: list[str], kind: SymbolKind | None) -> str:
        if len(rest) == 1 and kind is SymbolKind.PRIMITIVE:
            return f"{STD_DOCS_HOST}/primitive.{rest[0]}.html"
        if len(rest) == 1 and kind is SymbolKind.TEXT_MACRO:
            return f"{STD_DOCS_HOST}/macro.{rest[0]}.html"
        if not rest:
            return f"{STD_DOCS_HOST}/"
        return f"{STD_DOCS_HOST}/?search={'::'.join(rest)}"

    @staticmethod
    def _crates_io_link(crate_name: str, version: Version | None) -> str:
        if version is None:
            return f"{CRATES_IO_HOST}/{crate_name}"
        return f"{CRATES_IO_HOST}/{crate_name}/{version}"

    @staticmethod
    def _docs_rs_link(
        crate_name: str,
        version: Version | None,
        lib_name: str,
        rest: list[str],
        kind: SymbolKind | None,
    ) -> str:
        version_part = str(version) if version is not None else "latest"
        base = f"{DOCS_RS_HOST}/{crate_name}/{version_part}/{lib_name}/"
        template = PAGE_TEMPLATES.get(kind) if kind is not None else None
        if template is None:
            return f"{base}?search={'::'.join(rest)}"
        modules = "".join(f"{m}/" for m in rest[:-1])
        return f"{base}{modules}{template.format(name=rest[-1])}"
