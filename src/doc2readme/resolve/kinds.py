# topmark:header:start
#
#   project      : Doc2Readme
#   file         : kinds.py
#   file_relpath : src/doc2readme/resolve/kinds.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Symbol kinds carried alongside every canonical path.

The kind is decided once, when an identifier enters the scope table, and is
consumed by the link builder to pick a page template (``struct.Foo.html``,
``macro.bar.html``, ...). Kinds without a page template fall back to a search
link.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class SymbolKind(str, Enum):
    """Closed classification of a declaration."""

    CONST = "const"
    ENUM = "enum"
    EXTERN_ALIAS = "extern crate"
    FUNCTION = "fn"
    TEXT_MACRO = "macro"
    ATTRIBUTE_MACRO = "attribute macro"
    DERIVING_MACRO = "derive macro"
    MODULE = "mod"
    STATIC = "static"
    STRUCT = "struct"
    TRAIT = "trait"
    TRAIT_ALIAS = "trait alias"
    TYPE_ALIAS = "type"
    UNION = "union"
    IMPORT = "use"
    RE_EXPORT = "pub use"
    PRIMITIVE = "primitive"

    @property
    def is_import(self) -> bool:
        """Return True for kinds created by ``use`` statements."""
        return self in (SymbolKind.IMPORT, SymbolKind.RE_EXPORT)

    @property
    def is_callable(self) -> bool:
        """Return True when the kind is also reachable with call syntax (``foo()``)."""
        return self is SymbolKind.FUNCTION


#: Rustdoc intra-doc link disambiguators (``struct@Foo``) and the kind they select.
DISAMBIGUATORS: Final[dict[str, SymbolKind | None]] = {
    "const": SymbolKind.CONST,
    "constant": SymbolKind.CONST,
    "enum": SymbolKind.ENUM,
    "fn": SymbolKind.FUNCTION,
    "function": SymbolKind.FUNCTION,
    "method": SymbolKind.FUNCTION,
    "macro": SymbolKind.TEXT_MACRO,
    "attr": SymbolKind.ATTRIBUTE_MACRO,
    "derive": SymbolKind.DERIVING_MACRO,
    "mod": SymbolKind.MODULE,
    "module": SymbolKind.MODULE,
    "static": SymbolKind.STATIC,
    "struct": SymbolKind.STRUCT,
    "trait": SymbolKind.TRAIT,
    "type": SymbolKind.TYPE_ALIAS,
    "union": SymbolKind.UNION,
    "prim": SymbolKind.PRIMITIVE,
    "primitive": SymbolKind.PRIMITIVE,
    # rustdoc accepts these, but they don't narrow the page name
    "value": None,
    "field": None,
    "variant": None,
    "tyalias": SymbolKind.TYPE_ALIAS,
}
