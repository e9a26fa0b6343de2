# topmark:header:start
#
#   project      : Doc2Readme
#   file         : prelude.py
#   file_relpath : src/doc2readme/resolve/prelude.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Built-in names that every Rust crate sees without importing them.

Three groups seed a fresh scope table:

* the std macros (``vec!``, ``println!``, ...), keyed with their ``!`` suffix;
* the primitive types (``u8``, ``str``, ...);
* the std prelude proper (``Vec``, ``Option``, ``Some``, ``drop``, ...),
  extended per edition.

See https://doc.rust-lang.org/stable/std/prelude/index.html for the upstream list.
"""

from __future__ import annotations

from typing import Final

from doc2readme.resolve.kinds import SymbolKind

#: https://doc.rust-lang.org/stable/std/primitive/index.html
PRIMITIVES: Final[tuple[str, ...]] = (
    "array",
    "bool",
    "char",
    "f16",
    "f32",
    "f64",
    "f128",
    "fn",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "isize",
    "never",
    "pointer",
    "reference",
    "slice",
    "str",
    "tuple",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "unit",
    "usize",
)

#: Macros exported at the std root (``std::vec!`` lives at ``std/macro.vec.html``).
STD_MACROS: Final[tuple[str, ...]] = (
    "assert",
    "assert_eq",
    "assert_ne",
    "cfg",
    "column",
    "compile_error",
    "concat",
    "dbg",
    "debug_assert",
    "debug_assert_eq",
    "debug_assert_ne",
    "env",
    "eprint",
    "eprintln",
    "file",
    "format",
    "format_args",
    "include",
    "include_bytes",
    "include_str",
    "line",
    "matches",
    "module_path",
    "option_env",
    "panic",
    "print",
    "println",
    "stringify",
    "thread_local",
    "todo",
    "unimplemented",
    "unreachable",
    "vec",
    "write",
    "writeln",
)

# (name, module under std, kind)
_PRELUDE_V1: Final[tuple[tuple[str, str, SymbolKind], ...]] = (
    ("Copy", "marker", SymbolKind.TRAIT),
    ("Send", "marker", SymbolKind.TRAIT),
    ("Sized", "marker", SymbolKind.TRAIT),
    ("Sync", "marker", SymbolKind.TRAIT),
    ("Unpin", "marker", SymbolKind.TRAIT),
    ("Drop", "ops", SymbolKind.TRAIT),
    ("Fn", "ops", SymbolKind.TRAIT),
    ("FnMut", "ops", SymbolKind.TRAIT),
    ("FnOnce", "ops", SymbolKind.TRAIT),
    ("drop", "mem", SymbolKind.FUNCTION),
    ("Box", "boxed", SymbolKind.STRUCT),
    ("ToOwned", "borrow", SymbolKind.TRAIT),
    ("Clone", "clone", SymbolKind.TRAIT),
    ("PartialEq", "cmp", SymbolKind.TRAIT),
    ("PartialOrd", "cmp", SymbolKind.TRAIT),
    ("Eq", "cmp", SymbolKind.TRAIT),
    ("Ord", "cmp", SymbolKind.TRAIT),
    ("AsRef", "convert", SymbolKind.TRAIT),
    ("AsMut", "convert", SymbolKind.TRAIT),
    ("Into", "convert", SymbolKind.TRAIT),
    ("From", "convert", SymbolKind.TRAIT),
    ("Default", "default", SymbolKind.TRAIT),
    ("Iterator", "iter", SymbolKind.TRAIT),
    ("Extend", "iter", SymbolKind.TRAIT),
    ("IntoIterator", "iter", SymbolKind.TRAIT),
    ("DoubleEndedIterator", "iter", SymbolKind.TRAIT),
    ("ExactSizeIterator", "iter", SymbolKind.TRAIT),
    ("Option", "option", SymbolKind.ENUM),
    # variants link through their enum
    ("Some", "option::Option", SymbolKind.ENUM),
    ("None", "option::Option", SymbolKind.ENUM),
    ("Result", "result", SymbolKind.ENUM),
    ("Ok", "result::Result", SymbolKind.ENUM),
    ("Err", "result::Result", SymbolKind.ENUM),
    ("String", "string", SymbolKind.STRUCT),
    ("ToString", "string", SymbolKind.TRAIT),
    ("Vec", "vec", SymbolKind.STRUCT),
)

# https://doc.rust-lang.org/edition-guide/rust-2021/prelude.html
_PRELUDE_2021: Final[tuple[tuple[str, str, SymbolKind], ...]] = (
    ("TryFrom", "convert", SymbolKind.TRAIT),
    ("TryInto", "convert", SymbolKind.TRAIT),
    ("FromIterator", "iter", SymbolKind.TRAIT),
)

# https://doc.rust-lang.org/edition-guide/rust-2024/prelude.html
_PRELUDE_2024: Final[tuple[tuple[str, str, SymbolKind], ...]] = (
    ("Future", "future", SymbolKind.TRAIT),
    ("IntoFuture", "future", SymbolKind.TRAIT),
)


def parse_edition(edition: str | int | None) -> int:
    """Return the numeric edition, defaulting to 2015 for missing or unknown values."""
    if edition is None:
        return 2015
    try:
        return int(str(edition).strip())
    except ValueError:
        return 2015


def prelude_entries(edition: str | int | None) -> list[tuple[str, SymbolKind, str]]:
    """Return the ``(ident, kind, canonical_path)`` triples of the built-in prelude.

    The order matters: entries are inserted front-first into the scope table, so
    later triples win over earlier ones with the same identifier.

    Args:
        edition (str | int | None): The crate's edition (``"2018"``, ``2021``, ...).

    Returns:
        list[tuple[str, SymbolKind, str]]: Prelude triples for the given edition.
    """
    year: int = parse_edition(edition)
    entries: list[tuple[str, SymbolKind, str]] = []

    for name in STD_MACROS:
        entries.append((f"{name}!", SymbolKind.TEXT_MACRO, f"::std::{name}"))
    for name in PRIMITIVES:
        entries.append((name, SymbolKind.PRIMITIVE, f"::std::{name}"))

    table = list(_PRELUDE_V1)
    if year >= 2021:
        table.extend(_PRELUDE_2021)
    if year >= 2024:
        table.extend(_PRELUDE_2024)
    for name, module, kind in table:
        entries.append((name, kind, f"::std::{module}::{name}"))

    return entries
