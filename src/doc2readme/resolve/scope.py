# topmark:header:start
#
#   project      : Doc2Readme
#   file         : scope.py
#   file_relpath : src/doc2readme/resolve/scope.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Scope table of a crate root: identifier → canonical path + symbol kind.

The table mimics Rust's name lookup closely enough to turn intra-doc links
into absolute paths:

1. It is seeded with the built-in prelude (`doc2readme.resolve.prelude`).
2. Top-level declarations and ``use`` statements are inserted in source order.
   Every identifier keeps a list of candidate bindings; a later insert goes to
   the *front* and hides, but does not delete, the earlier ones.
3. A cleanup pass removes imports that point into private modules: their items
   are only reachable through a public re-export.
4. The table is frozen and only queried afterwards.

Glob imports (``use foo::*;``) are recorded but never expanded. Expanding them
would need cross-crate resolution, and a wrong guess is worse than a search link.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from doc2readme.config.logging import get_logger
from doc2readme.input.model import (
    DeclaredItem,
    UseGlob,
    UseGroup,
    UseName,
    UsePath,
    UseRename,
    Visibility,
)
from doc2readme.resolve.kinds import SymbolKind
from doc2readme.resolve.prelude import prelude_entries

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.input.model import UseItem, UseTree

logger: Doc2ReadmeLogger = get_logger(__name__)

PATH_SEP = "::"

# Path heads that refer to the crate currently being documented.
SELF_KEYWORDS: frozenset[str] = frozenset({"crate", "self"})

# `use a::b as a;` style cycles stop here
MAX_RESOLVE_DEPTH = 32


@dataclass(frozen=True)
class ScopeEntry:
    """One candidate binding of an identifier."""

    kind: SymbolKind
    path: str

    @property
    def is_absolute(self) -> bool:
        """Return True when the path starts with the absolute-path marker."""
        return self.path.startswith(PATH_SEP)


@dataclass(frozen=True)
class ResolvedLink:
    """Outcome of `Scope.resolve`.

    Attributes:
        canonical_path (str): Absolute path (``::std::vec::Vec``) when resolved,
            otherwise the best-effort text that was left after substitution.
        kind (SymbolKind | None): The symbol kind, when known.
    """

    canonical_path: str
    kind: SymbolKind | None = None

    @property
    def is_absolute(self) -> bool:
        """Return True when resolution produced an absolute path."""
        return self.canonical_path.startswith(PATH_SEP)

    @property
    def segments(self) -> list[str]:
        """Return the path segments without the leading absolute-path marker."""
        path = self.canonical_path
        if path.startswith(PATH_SEP):
            path = path[len(PATH_SEP) :]
        return path.split(PATH_SEP)


class FrozenScopeError(RuntimeError):
    """Raised when a frozen scope table is mutated."""


def strip_generics(text: str) -> str:
    """Remove balanced ``<...>`` groups from ``text``.

    Matching is bracket counting, not a grammar: ``Vec<Option<T>>`` becomes
    ``Vec``. When the brackets do not balance, the text is returned unchanged.

    Args:
        text (str): Raw reference text.

    Returns:
        str: ``text`` without its generic argument groups.
    """
    if "<" not in text and ">" not in text:
        return text
    out: list[str] = []
    depth = 0
    for ch in text:
        if ch == "<":
            depth += 1
        elif ch == ">":
            if depth == 0:
                return text
            depth -= 1
        elif depth == 0:
            out.append(ch)
    if depth != 0:
        return text
    return "".join(out)


class Scope:
    """Identifier → canonical path table for one compilation unit.

    Use `build_scope` to construct a populated, frozen table. `Scope.prelude`
    returns an unfrozen table seeded with the built-in prelude only.

    Attributes:
        crate_name (str): Library name of the crate (``my_crate``).
        privmods (set[str]): Names of top-level modules without ``pub``.
        glob_imports (list[str]): Prefixes of glob imports seen while building.
    """

    def __init__(self, crate_name: str = "") -> None:
        self.crate_name: str = crate_name
        self._entries: dict[str, deque[ScopeEntry]] = {}
        self._kinds_by_path: dict[str, SymbolKind] = {}
        self.privmods: set[str] = set()
        self.glob_imports: list[str] = []
        self._frozen: bool = False

    # --- construction ---

    @classmethod
    def empty(cls, crate_name: str = "") -> Scope:
        """Return an empty, frozen scope (used when reading the input failed)."""
        scope = cls(crate_name)
        scope.freeze()
        return scope

    @classmethod
    def prelude(cls, crate_name: str = "", edition: str | int | None = None) -> Scope:
        """Return a scope seeded with the built-in prelude for ``edition``."""
        scope = cls(crate_name)
        for ident, kind, path in prelude_entries(edition):
            scope.insert(ident, kind, path)
        return scope

    def insert(self, ident: str, kind: SymbolKind, path: str) -> None:
        """Insert a binding at the front of ``ident``'s candidate list.

        Args:
            ident (str): The local name.
            kind (SymbolKind): The symbol kind.
            path (str): Canonical (or crate-relative) path of the target.

        Raises:
            FrozenScopeError: If the table has been frozen.
        """
        if self._frozen:
            raise FrozenScopeError(f"cannot insert {ident!r}: scope is frozen")
        if path == ident:
            # a self-mapping would make resolve() recurse forever
            logger.debug("Ignoring self-referential scope entry %r", ident)
            return
        logger.trace("scope: %s -> %s (%s)", ident, path, kind.value)
        self._entries.setdefault(ident, deque()).appendleft(ScopeEntry(kind, path))
        if path.startswith(PATH_SEP) and not kind.is_import:
            self._kinds_by_path.setdefault(path, kind)

    def freeze(self) -> None:
        """Make the table read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Return True once the table is read-only."""
        return self._frozen

    def remove_private_imports(self) -> None:
        """Drop ``use`` entries whose target lives inside a private module.

        This runs after the whole item list has been walked, because the set of
        private modules is only complete then. Absolute paths point outside the
        crate root and are kept.
        """
        if self._frozen:
            raise FrozenScopeError("cannot clean up a frozen scope")
        for ident, entries in list(self._entries.items()):
            kept: deque[ScopeEntry] = deque()
            for entry in entries:
                if entry.kind is SymbolKind.IMPORT and self._points_into_privmod(entry.path):
                    logger.debug("scope: dropping %s -> %s (private module)", ident, entry.path)
                    continue
                kept.append(entry)
            if kept:
                self._entries[ident] = kept
            else:
                del self._entries[ident]

    def _points_into_privmod(self, path: str) -> bool:
        if path.startswith(PATH_SEP):
            return False
        segments = path.split(PATH_SEP)
        while segments and segments[0] in SELF_KEYWORDS:
            segments = segments[1:]
        return len(segments) > 1 and segments[0] in self.privmods

    # --- queries ---

    def get(self, ident: str) -> list[ScopeEntry]:
        """Return all candidate bindings of ``ident``, highest priority first."""
        return list(self._entries.get(ident, ()))

    def front(self, ident: str) -> ScopeEntry | None:
        """Return the highest-priority binding of ``ident``, if any."""
        entries = self._entries.get(ident)
        return entries[0] if entries else None

    def kind_of_path(self, path: str) -> SymbolKind | None:
        """Return the kind of a declared item by its canonical path."""
        return self._kinds_by_path.get(path)

    def __contains__(self, ident: object) -> bool:
        return ident in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(
        self,
        crate_name: str,
        raw_text: str,
        kind: SymbolKind | None = None,
    ) -> ResolvedLink:
        """Resolve a textual reference to a canonical path.

        Generic argument groups are stripped first. A leading ``crate``/``self``
        becomes the crate root. When the head segment is bound, it is replaced by
        the binding's path and resolution continues until the path is absolute or
        the head is unbound. Unknown names come back unchanged; resolution never
        fails.

        Args:
            crate_name (str): Library name of the current crate.
            raw_text (str): The reference as written (``Vec<T>``, ``crate::Foo``).
            kind (SymbolKind | None): Kind supplied by the caller (disambiguator).

        Returns:
            ResolvedLink: The canonical path and the best known kind.
        """
        path = strip_generics(raw_text.strip())
        link = self._resolve_impl(crate_name, path, kind)
        if link.kind is None and link.is_absolute:
            known = self.kind_of_path(link.canonical_path)
            if known is not None:
                link = ResolvedLink(link.canonical_path, known)
        logger.trace("resolve %r -> %s (%s)", raw_text, link.canonical_path, link.kind)
        return link

    def _resolve_impl(
        self, crate_name: str, path: str, kind: SymbolKind | None, depth: int = 0
    ) -> ResolvedLink:
        if path.startswith(PATH_SEP):
            return ResolvedLink(path, kind)

        segments = path.split(PATH_SEP)
        if segments[0] in SELF_KEYWORDS:
            segments[0] = f"{PATH_SEP}{crate_name}"
            return ResolvedLink(PATH_SEP.join(segments), kind)

        entry = self.front(segments[0])
        if entry is None:
            return ResolvedLink(path, kind)

        if len(segments) == 1:
            kind = entry.kind
        segments[0] = entry.path
        substituted = PATH_SEP.join(segments)
        if substituted.startswith(PATH_SEP):
            return ResolvedLink(substituted, kind)
        if depth >= MAX_RESOLVE_DEPTH:
            logger.warning("Giving up resolving %r: import cycle", path)
            return ResolvedLink(substituted, kind)
        return self._resolve_impl(crate_name, substituted, kind, depth + 1)


def _item_path(crate_name: str, ident: str) -> str:
    return f"{PATH_SEP}{crate_name}{PATH_SEP}{ident}"


def add_item_to_scope(scope: Scope, crate_name: str, item: DeclaredItem) -> None:
    """Insert one top-level declaration into ``scope``.

    Args:
        scope (Scope): The scope under construction.
        crate_name (str): Library name of the crate.
        item (DeclaredItem): The declaration.
    """
    if item.kind is SymbolKind.MODULE and not item.visibility.is_public:
        scope.privmods.add(item.ident)
        return

    if item.kind is SymbolKind.EXTERN_ALIAS:
        if item.alias_of and item.alias_of != "self":
            scope.insert(item.ident, item.kind, f"{PATH_SEP}{item.alias_of}")
        return

    if item.kind is SymbolKind.TEXT_MACRO:
        # macro_rules! without #[macro_export] is invisible outside the crate
        if item.exported:
            path = _item_path(crate_name, item.ident)
            scope.insert(item.ident, item.kind, path)
            scope.insert(f"{item.ident}!", item.kind, path)
        return

    if item.kind in (SymbolKind.ATTRIBUTE_MACRO, SymbolKind.DERIVING_MACRO):
        if item.exported:
            scope.insert(item.ident, item.kind, _item_path(crate_name, item.ident))
        return

    if not item.visibility.is_public:
        return

    path = _item_path(crate_name, item.ident)
    scope.insert(item.ident, item.kind, path)
    if item.kind.is_callable:
        scope.insert(f"{item.ident}()", item.kind, path)


def add_use_tree_to_scope(
    scope: Scope,
    crate_name: str,
    visibility: Visibility,
    prefix: str,
    tree: UseTree,
) -> None:
    """Walk a (possibly nested) ``use`` tree and insert its names.

    Args:
        scope (Scope): The scope under construction.
        crate_name (str): Library name of the crate.
        visibility (Visibility): Visibility of the enclosing ``use``.
        prefix (str): Accumulated path prefix, ending in ``::`` when non-empty.
        tree (UseTree): The (sub)tree to walk.
    """
    if isinstance(tree, UsePath):
        add_use_tree_to_scope(
            scope, crate_name, visibility, f"{prefix}{tree.ident}{PATH_SEP}", tree.tree
        )
    elif isinstance(tree, UseName):
        if tree.ident == "self":
            # `use foo::{self}` imports `foo` itself
            parent = prefix[: -len(PATH_SEP)]
            if PATH_SEP in parent:
                ident = parent.rsplit(PATH_SEP, 1)[1]
                _add_use_item(scope, crate_name, visibility, parent, ident)
            elif parent:
                _add_use_item(scope, crate_name, visibility, parent, parent)
        elif prefix:
            # skip `pub use dependency;`: it adds nothing that isn't known already
            _add_use_item(scope, crate_name, visibility, f"{prefix}{tree.ident}", tree.ident)
    elif isinstance(tree, UseRename):
        if tree.rename == "_":
            return
        target = f"{prefix}{tree.ident}" if tree.ident != "self" else prefix[: -len(PATH_SEP)]
        _add_use_item(scope, crate_name, visibility, target, tree.rename)
    elif isinstance(tree, UseGlob):
        glob = f"{prefix}*"
        logger.debug("scope: glob import %s is not expanded", glob)
        scope.glob_imports.append(glob)
    elif isinstance(tree, UseGroup):
        for sub in tree.items:
            add_use_tree_to_scope(scope, crate_name, visibility, prefix, sub)


def _add_use_item(
    scope: Scope,
    crate_name: str,
    visibility: Visibility,
    path: str,
    ident: str,
) -> None:
    scope.insert(ident, SymbolKind.IMPORT, path)
    if visibility.is_public:
        scope.insert(ident, SymbolKind.RE_EXPORT, _item_path(crate_name, ident))


def is_prelude_import(tree: UseTree) -> bool:
    """Return True for ``use std::prelude::...`` (already part of the seed)."""
    if not isinstance(tree, UsePath) or tree.ident not in ("std", "core", "::std", "::core"):
        return False
    return isinstance(tree.tree, UsePath) and tree.tree.ident == "prelude"


def build_scope(
    crate_name: str,
    edition: str | int | None,
    items: Iterable[DeclaredItem],
    uses: Iterable[UseItem],
    *,
    ordered: Iterable[DeclaredItem | UseItem] | None = None,
) -> Scope:
    """Build and freeze the scope table of a crate root.

    Declarations and ``use`` statements are applied in source order when
    ``ordered`` is given (the source reader provides it); otherwise all items
    are applied before all uses.

    Args:
        crate_name (str): Library name of the crate (``my_crate``).
        edition (str | int | None): The crate's edition; gates prelude entries.
        items (Iterable[DeclaredItem]): Top-level declarations.
        uses (Iterable[UseItem]): Top-level ``use`` declarations.
        ordered (Iterable[DeclaredItem | UseItem] | None): Both, interleaved in
            source order.

    Returns:
        Scope: The populated, frozen scope table.
    """
    scope = Scope.prelude(crate_name, edition)
    sequence: Iterable[DeclaredItem | UseItem] = (
        ordered if ordered is not None else [*list(items), *list(uses)]
    )
    for node in sequence:
        if isinstance(node, DeclaredItem):
            add_item_to_scope(scope, crate_name, node)
        elif not is_prelude_import(node.tree):
            add_use_tree_to_scope(scope, crate_name, node.visibility, "", node.tree)

    scope.remove_private_imports()
    scope.freeze()
    logger.debug(
        "Built scope for %s: %d names, %d private modules, %d glob imports",
        crate_name,
        len(scope),
        len(scope.privmods),
        len(scope.glob_imports),
    )
    return scope
