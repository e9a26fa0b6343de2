# topmark:header:start
#
#   project      : Doc2Readme
#   file         : codeblocks.py
#   file_relpath : src/doc2readme/markdown/codeblocks.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Code block handling: rustdoc info strings and hidden lines.

Rustdoc reads the info string of a fence as a comma/space separated list of
attributes. Test directives (``should_panic``, ``edition2021``, ...) mean nothing
on GitHub or crates.io and are dropped; what remains is the language.

In Rust code blocks, a line that is just ``#`` or starts with ``# `` is hidden
from the rendered docs; ``##`` at the start of a line is an escaped ``#``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from doc2readme.constants import DEFAULT_CODEBLOCK_LANG

#: Rustdoc attributes that only steer doctests.
RUSTDOC_FLAGS: Final[frozenset[str]] = frozenset(
    {
        "allow_fail",
        "compile_fail",
        "ignore",
        "no_run",
        "should_panic",
        "standalone_crate",
        "test_harness",
    }
)

_FLAG_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"^edition\d{4}$"),
    re.compile(r"^E\d{4}$"),
    re.compile(r"^ignore-[\w-]+$"),
)

_SPLIT_RE: Final[re.Pattern[str]] = re.compile(r"[\s,]+")
_BACKTICK_RUN_RE: Final[re.Pattern[str]] = re.compile(r"`+")
_TILDE_RUN_RE: Final[re.Pattern[str]] = re.compile(r"~+")


def is_rustdoc_flag(attr: str) -> bool:
    """Return True when ``attr`` is a doctest directive rather than a language."""
    return attr in RUSTDOC_FLAGS or any(p.match(attr) for p in _FLAG_PATTERNS)


@dataclass(frozen=True)
class CodeBlockInfo:
    """Parsed info string of a code block.

    Attributes:
        lang (str): Language tag to emit.
        is_rust (bool): Whether rustdoc treats the block as Rust.
        ignore (bool): Whether the block is excluded from doctests (and from
            hidden-line processing).
    """

    lang: str
    is_rust: bool
    ignore: bool

    @property
    def hides_lines(self) -> bool:
        """Return True when hidden lines must be removed from the block."""
        return self.is_rust and not self.ignore


def parse_info(info: str | None) -> CodeBlockInfo:
    """Parse a fence info string the way rustdoc does.

    Args:
        info (str | None): The raw info string; ``None`` for indented blocks.

    Returns:
        CodeBlockInfo: Language and processing flags of the block.
    """
    attrs = [a for a in _SPLIT_RE.split((info or "").strip()) if a]
    ignore = any(a == "ignore" or a.startswith("ignore-") for a in attrs)
    # `{.class}` style attributes are not languages
    langs = [a for a in attrs if not is_rustdoc_flag(a) and not a.startswith("{")]
    if not langs or DEFAULT_CODEBLOCK_LANG in langs:
        return CodeBlockInfo(DEFAULT_CODEBLOCK_LANG, is_rust=True, ignore=ignore)
    return CodeBlockInfo(langs[0], is_rust=False, ignore=ignore)


def filter_hidden_lines(code: str) -> str:
    """Remove rustdoc-hidden lines and unescape ``##``.

    Args:
        code (str): Code block content (newline-terminated lines).

    Returns:
        str: The visible code, each kept line unchanged except for ``##``.
    """
    out: list[str] = []
    for line in code.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        stripped = body.lstrip()
        if stripped == "#" or (stripped.startswith("#") and stripped[1:2].isspace()):
            continue
        if stripped.startswith("##"):
            indent = body[: len(body) - len(stripped)]
            line = indent + stripped[1:] + line[len(body) :]
        out.append(line)
    return "".join(out)


def fence_for(code: str, char: str = "`") -> str:
    """Return a fence long enough to enclose ``code`` (at least three characters)."""
    runs = (_BACKTICK_RUN_RE if char == "`" else _TILDE_RUN_RE).findall(code)
    longest = max((len(r) for r in runs), default=0)
    return char * max(3, longest + 1)
