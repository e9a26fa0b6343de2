# topmark:header:start
#
#   project      : Doc2Readme
#   file         : source.py
#   file_relpath : src/doc2readme/input/source.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Read the crate root: crate-level docs and the top-level item list.

This is not a Rust parser. A tokenizer that understands comments, string and
char literals, lifetimes and bracket nesting is enough to:

* collect the inner doc fragments (``//!``, ``/*! */``, ``#![doc = "..."]``);
* list the top-level items with their kind, name, visibility and attributes;
* parse ``use`` trees.

Item bodies are skipped by bracket matching. Unterminated literals and
unbalanced brackets raise `RustSyntaxError` with the byte offset of the problem.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final

from doc2readme.config.logging import get_logger
from doc2readme.input.model import (
    DeclaredItem,
    SourceUnit,
    Span,
    UseGlob,
    UseGroup,
    UseItem,
    UseName,
    UsePath,
    UseRename,
    Visibility,
)
from doc2readme.resolve.kinds import SymbolKind

if TYPE_CHECKING:
    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.diagnostic.model import DiagnosticLog
    from doc2readme.input.model import UseTree

logger: Doc2ReadmeLogger = get_logger(__name__)


class RustSyntaxError(Exception):
    """Malformed Rust source.

    Attributes:
        message (str): What went wrong.
        offset (int): Byte offset into the source.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at byte {offset})")
        self.message: str = message
        self.offset: int = offset


class Tok(Enum):
    """Token classes."""

    IDENT = "ident"
    LIFETIME = "lifetime"
    LITERAL = "literal"
    PUNCT = "punct"
    OPEN = "open"
    CLOSE = "close"
    INNER_DOC = "inner doc"
    OUTER_DOC = "outer doc"


@dataclass(frozen=True)
class Token:
    """A lexical token; ``start``/``end`` are character indices."""

    kind: Tok
    text: str
    start: int
    end: int
    #: decoded value of string literals and doc comments
    value: str | None = None


_CLOSERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}
_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}
_NUMBER_RE: Final[re.Pattern[str]] = re.compile(r"[0-9][0-9A-Za-z_]*(?:\.[0-9][0-9A-Za-z_]*)?")

# keywords that may precede the item keyword
_QUALIFIERS: Final[frozenset[str]] = frozenset({"default", "unsafe", "async", "auto", "safe"})

_BLOCK_ITEMS: Final[dict[str, SymbolKind]] = {
    "struct": SymbolKind.STRUCT,
    "enum": SymbolKind.ENUM,
    "trait": SymbolKind.TRAIT,
    "mod": SymbolKind.MODULE,
    "union": SymbolKind.UNION,
}
_VALUE_ITEMS: Final[dict[str, SymbolKind]] = {
    "const": SymbolKind.CONST,
    "static": SymbolKind.STATIC,
    "type": SymbolKind.TYPE_ALIAS,
}


class _Offsets:
    """Character index → byte offset."""

    def __init__(self, code: str) -> None:
        self._table: list[int] | None = None
        if not code.isascii():
            table = [0]
            for ch in code:
                table.append(table[-1] + len(ch.encode("utf-8")))
            self._table = table

    def __call__(self, index: int) -> int:
        if self._table is None:
            return index
        return self._table[min(index, len(self._table) - 1)]


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


class Lexer:
    """Tokenizer over Rust source text."""

    def __init__(self, code: str) -> None:
        self.code: str = code
        self.pos: int = 0
        self.offsets: _Offsets = _Offsets(code)

    def error(self, message: str, index: int) -> RustSyntaxError:
        """Return a `RustSyntaxError` at character ``index``."""
        return RustSyntaxError(message, self.offsets(index))

    def tokenize(self) -> list[Token]:  # noqa: PLR0912
        """Split the whole source into tokens, checking bracket balance.

        Raises:
            RustSyntaxError: On unterminated literals or comments, or
                unbalanced brackets.
        """
        code = self.code
        tokens: list[Token] = []
        stack: list[Token] = []
        n = len(code)
        if code.startswith("#!") and not code.startswith("#!["):
            # shebang line
            self.pos = code.find("\n") if "\n" in code else n

        while self.pos < n:
            ch = code[self.pos]
            start = self.pos
            if ch.isspace():
                self.pos += 1
            elif code.startswith("//", start):
                tok = self._line_comment()
                if tok is not None:
                    tokens.append(tok)
            elif code.startswith("/*", start):
                tok = self._block_comment()
                if tok is not None:
                    tokens.append(tok)
            elif ch in "\"'" or self._literal_prefix(start):
                tokens.append(self._literal_or_lifetime())
            elif _is_ident_start(ch):
                tokens.append(self._ident())
            elif ch.isdigit():
                m = _NUMBER_RE.match(code, start)
                assert m is not None
                self.pos = m.end()
                tokens.append(Token(Tok.LITERAL, m.group(0), start, self.pos))
            elif ch in _CLOSERS:
                self.pos += 1
                tok = Token(Tok.OPEN, ch, start, self.pos)
                stack.append(tok)
                tokens.append(tok)
            elif ch in ")]}":
                if not stack:
                    raise self.error(f"unexpected closing delimiter `{ch}`", start)
                opener = stack.pop()
                if _CLOSERS[opener.text] != ch:
                    raise self.error(
                        f"mismatched closing delimiter `{ch}` for `{opener.text}`", start
                    )
                self.pos += 1
                tokens.append(Token(Tok.CLOSE, ch, start, self.pos))
            elif code.startswith("::", start):
                self.pos += 2
                tokens.append(Token(Tok.PUNCT, "::", start, self.pos))
            else:
                self.pos += 1
                tokens.append(Token(Tok.PUNCT, ch, start, self.pos))

        if stack:
            raise self.error(f"unclosed delimiter `{stack[-1].text}`", stack[-1].start)
        return tokens

    def _line_comment(self) -> Token | None:
        code = self.code
        start = self.pos
        end = code.find("\n", start)
        if end < 0:
            end = len(code)
        self.pos = end
        text = code[start:end].rstrip("\r")
        if text.startswith("//!"):
            return Token(Tok.INNER_DOC, text, start, end, text[3:])
        if text.startswith("///") and not text.startswith("////"):
            return Token(Tok.OUTER_DOC, text, start, end, text[3:])
        return None

    def _block_comment(self) -> Token | None:
        code = self.code
        start = self.pos
        depth = 0
        i = start
        while i < len(code):
            if code.startswith("/*", i):
                depth += 1
                i += 2
            elif code.startswith("*/", i):
                depth -= 1
                i += 2
                if depth == 0:
                    break
            else:
                i += 1
        else:
            raise self.error("unterminated block comment", start)
        self.pos = i
        text = code[start:i]
        body = text[3:-2]
        if text.startswith("/*!"):
            return Token(Tok.INNER_DOC, text, start, i, body)
        if text.startswith("/**") and not text.startswith("/***") and text != "/**/":
            return Token(Tok.OUTER_DOC, text, start, i, body)
        return None

    def _literal_prefix(self, i: int) -> bool:
        # b"..", br"..", r"..", r#"..", c"..", cr"..", b'..'
        m = re.match(r"(?:b|c)?r#*\"|(?:b|c)\"|b'", self.code[i : i + 260])
        return m is not None

    def _literal_or_lifetime(self) -> Token:
        code = self.code
        start = self.pos
        i = start
        while code[i] in "bc":
            i += 1
        if code[i] == "r" and (code[i + 1 : i + 2] in ('"', "#")):
            return self._raw_string(start, i + 1)
        quote = code[i]
        if quote == "'":
            nxt = code[i + 1 : i + 2]
            after = code[i + 2 : i + 3]
            if nxt and nxt != "\\" and after != "'" and _is_ident_start(nxt):
                # lifetime or label
                j = i + 1
                while j < len(code) and _is_ident_continue(code[j]):
                    j += 1
                self.pos = j
                return Token(Tok.LIFETIME, code[start:j], start, j)
        value, end = self._quoted(i + 1, quote, start)
        self.pos = end
        return Token(Tok.LITERAL, code[start:end], start, end, value)

    def _quoted(self, i: int, quote: str, start: int) -> tuple[str, int]:
        code = self.code
        out: list[str] = []
        n = len(code)
        while i < n:
            ch = code[i]
            if ch == quote:
                return "".join(out), i + 1
            if ch == "\\":
                esc = code[i + 1 : i + 2]
                if esc in _SIMPLE_ESCAPES:
                    out.append(_SIMPLE_ESCAPES[esc])
                    i += 2
                elif esc == "x":
                    out.append(chr(int(code[i + 2 : i + 4], 16)))
                    i += 4
                elif esc == "u":
                    close = code.find("}", i)
                    if close < 0:
                        raise self.error("unterminated unicode escape", i)
                    digits = code[i + 3 : close].replace("_", "")
                    try:
                        out.append(chr(int(digits, 16)))
                    except ValueError as exc:
                        raise self.error("invalid unicode escape", i) from exc
                    i = close + 1
                elif esc == "\n" or esc == "\r":
                    # line continuation: skip the newline and leading whitespace
                    i += 1
                    while i < n and code[i].isspace():
                        i += 1
                else:
                    raise self.error(f"unknown character escape `\\{esc}`", i)
            else:
                out.append(ch)
                i += 1
        kind = "string" if quote == '"' else "character"
        raise self.error(f"unterminated {kind} literal", start)

    def _raw_string(self, start: int, i: int) -> Token:
        code = self.code
        hashes = 0
        while code[i : i + 1] == "#":
            hashes += 1
            i += 1
        if code[i : i + 1] != '"':
            raise self.error("expected `\"` in raw string literal", start)
        terminator = '"' + "#" * hashes
        end = code.find(terminator, i + 1)
        if end < 0:
            raise self.error("unterminated raw string", start)
        self.pos = end + len(terminator)
        return Token(Tok.LITERAL, code[start : self.pos], start, self.pos, code[i + 1 : end])

    def _ident(self) -> Token:
        code = self.code
        start = self.pos
        i = start
        if code.startswith("r#", i) and i + 2 < len(code) and _is_ident_start(code[i + 2]):
            i += 2
        while i < len(code) and _is_ident_continue(code[i]):
            i += 1
        self.pos = i
        return Token(Tok.IDENT, code[start:i], start, i)


def unindent(text: str) -> str:
    """Remove the indentation shared by all non-blank lines of ``text``."""
    lines = text.split("\n")
    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    common = min(indents, default=0)
    if common == 0:
        return text
    return "\n".join(line[common:] if line.strip() else line.strip() for line in lines)


@dataclass
class _Attr:
    name: str
    tokens: list[Token]


class ItemScanner:
    """Walk the token list of a crate root."""

    def __init__(
        self, code: str, tokens: list[Token], diagnostics: DiagnosticLog | None = None
    ) -> None:
        self.code: str = code
        self.tokens: list[Token] = tokens
        self.diagnostics: DiagnosticLog | None = diagnostics
        self.offsets: _Offsets = _Offsets(code)
        self.pos: int = 0
        self.doc_fragments: list[str] = []
        self.nodes: list[DeclaredItem | UseItem] = []
        self._matching: dict[int, int] = self._match_brackets(tokens)

    @staticmethod
    def _match_brackets(tokens: list[Token]) -> dict[int, int]:
        matching: dict[int, int] = {}
        stack: list[int] = []
        for idx, tok in enumerate(tokens):
            if tok.kind is Tok.OPEN:
                stack.append(idx)
            elif tok.kind is Tok.CLOSE:
                matching[stack.pop()] = idx
        return matching

    # --- token helpers ---

    def peek(self, ahead: int = 0) -> Token | None:
        """Return the token ``ahead`` positions from the cursor, if any."""
        idx = self.pos + ahead
        return self.tokens[idx] if idx < len(self.tokens) else None

    def is_(self, text: str, ahead: int = 0) -> bool:
        """Return True when the token at ``ahead`` has exactly ``text``."""
        tok = self.peek(ahead)
        return tok is not None and tok.text == text

    def span(self, first: Token, last: Token) -> Span:
        """Return the byte span covering ``first`` .. ``last``."""
        return Span(self.offsets(first.start), self.offsets(last.end))

    def skip_group(self) -> None:
        """Skip the bracket group that opens at the cursor."""
        self.pos = self._matching[self.pos] + 1

    def skip_to_semicolon(self) -> None:
        """Skip past the next ``;`` outside brackets."""
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.kind is Tok.OPEN:
                self.skip_group()
            elif tok.text == ";":
                self.pos += 1
                return
            else:
                self.pos += 1

    def skip_item_body(self) -> None:
        """Skip past a ``;`` or the first brace group outside other brackets."""
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.text == "{":
                self.skip_group()
                return
            if tok.kind is Tok.OPEN:
                self.skip_group()
            elif tok.text == ";":
                self.pos += 1
                return
            else:
                self.pos += 1

    # --- scanning ---

    def scan(self) -> None:
        """Scan the crate root, filling `doc_fragments` and `nodes`."""
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.kind is Tok.INNER_DOC:
                self.doc_fragments.append(tok.value or "")
                self.pos += 1
            elif tok.text == "#" and self.is_("!", 1) and self.is_("[", 2):
                self._inner_attribute()
            else:
                self._item()

    def _inner_attribute(self) -> None:
        hash_tok = self.tokens[self.pos]
        self.pos += 2
        open_idx = self.pos
        close_idx = self._matching[open_idx]
        body = self.tokens[open_idx + 1 : close_idx]
        self.pos = close_idx + 1
        if len(body) < 3 or body[0].text != "doc" or body[1].text != "=":
            return
        value = body[2:]
        if len(value) == 1 and value[0].kind is Tok.LITERAL and value[0].value is not None:
            self.doc_fragments.append(value[0].value)
            return
        # `#![doc = include_str!("..")]` and friends
        span = self.span(hash_tok, self.tokens[close_idx])
        logger.info("Found an unexpanded macro in a doc attribute")
        if self.diagnostics is not None:
            self.diagnostics.warn_macro_not_expanded(span)

    def _outer_attributes(self) -> list[_Attr]:
        attrs: list[_Attr] = []
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.kind is Tok.OUTER_DOC:
                self.pos += 1
            elif tok.text == "#" and self.is_("[", 1):
                open_idx = self.pos + 1
                close_idx = self._matching[open_idx]
                body = self.tokens[open_idx + 1 : close_idx]
                if body:
                    attrs.append(_Attr(body[0].text, body[1:]))
                self.pos = close_idx + 1
            else:
                break
        return attrs

    def _visibility(self) -> Visibility:
        if not self.is_("pub"):
            return Visibility.PRIVATE
        self.pos += 1
        if self.is_("("):
            self.skip_group()
            return Visibility.RESTRICTED
        return Visibility.PUBLIC

    def kind_at(self, ahead: int = 0) -> Tok | None:
        """Return the class of the token ``ahead`` positions from the cursor."""
        tok = self.peek(ahead)
        return tok.kind if tok is not None else None

    def _skip_qualifiers(self) -> None:
        while self.peek() is not None and self.tokens[self.pos].text in _QUALIFIERS:
            self.pos += 1

    def _declare(
        self,
        kind: SymbolKind,
        name: str,
        visibility: Visibility,
        first: Token,
        *,
        exported: bool = False,
    ) -> None:
        span = self.span(first, self.tokens[self.pos - 1])
        self._add(DeclaredItem(kind, name, visibility, exported=exported, span=span))

    def _item(self) -> None:  # noqa: PLR0911, PLR0912
        first = self.tokens[self.pos]
        attrs = self._outer_attributes()
        if self.pos >= len(self.tokens):
            return
        visibility = self._visibility()
        self._skip_qualifiers()
        if self.is_("const") and any(self.is_(kw, 1) for kw in ("fn", "unsafe", "async", "extern")):
            self.pos += 1
            self._skip_qualifiers()
        if self.is_("extern") and self.kind_at(1) is Tok.LITERAL:
            self.pos += 2
        elif self.is_("extern") and self.is_("fn", 1):
            self.pos += 1

        tok = self.peek()
        if tok is None:
            return
        keyword = tok.text

        if keyword == "fn":
            name = self._name_after(1)
            self.skip_item_body()
            if name is not None:
                self._add_fn(name, visibility, attrs, first)
            return
        if keyword in _BLOCK_ITEMS and (keyword != "union" or self.kind_at(1) is Tok.IDENT):
            name = self._name_after(1)
            kind = _BLOCK_ITEMS[keyword]
            if kind is SymbolKind.TRAIT and self._is_trait_alias():
                kind = SymbolKind.TRAIT_ALIAS
                self.skip_to_semicolon()
            else:
                self.skip_item_body()
            if name is not None:
                self._declare(kind, name, visibility, first)
            return
        if keyword in _VALUE_ITEMS:
            name = self._name_after(2 if keyword == "static" and self.is_("mut", 1) else 1)
            self.skip_to_semicolon()
            if name is not None and name != "_":
                self._declare(_VALUE_ITEMS[keyword], name, visibility, first)
            return
        if keyword == "use":
            self.pos += 1
            tree = self._use_tree()
            self.skip_to_semicolon()
            if tree is not None:
                span = self.span(first, self.tokens[self.pos - 1])
                self._add(UseItem(tree, visibility, span=span))
            return
        if keyword == "extern" and self.is_("crate", 1):
            self._extern_crate(visibility, first)
            return
        if keyword == "macro_rules" and self.is_("!", 1):
            name = self._name_after(2)
            self.pos += 2
            self.skip_item_body()
            if name is not None:
                exported = any(a.name == "macro_export" for a in attrs)
                self._declare(SymbolKind.TEXT_MACRO, name, visibility, first, exported=exported)
            return
        if keyword == "macro" and self.kind_at(1) is Tok.IDENT:
            # macros 2.0 follow item visibility
            name = self._name_after(1)
            self.skip_item_body()
            if name is not None:
                self._declare(
                    SymbolKind.TEXT_MACRO, name, visibility, first, exported=visibility.is_public
                )
            return
        if keyword in ("impl", "extern"):
            self.skip_item_body()
            return
        if tok.kind is Tok.IDENT and self.is_("!", 1):
            # item-level macro invocation
            self.pos += 2
            if self.kind_at() is Tok.IDENT:
                self.pos += 1
            if self.kind_at() is Tok.OPEN:
                brace = self.is_("{")
                self.skip_group()
                if not brace and self.is_(";"):
                    self.pos += 1
            return
        # stray `;` or unknown syntax
        if tok.kind is Tok.OPEN:
            self.skip_group()
        else:
            self.pos += 1

    def _name_after(self, offset: int) -> str | None:
        tok = self.peek(offset)
        if tok is None or tok.kind is not Tok.IDENT:
            return None
        return tok.text[2:] if tok.text.startswith("r#") else tok.text

    def _is_trait_alias(self) -> bool:
        i = self.pos + 2
        while i < len(self.tokens):
            tok = self.tokens[i]
            if tok.text in ("{", ";", "where"):
                return False
            if tok.text == "=":
                return True
            if tok.kind is Tok.OPEN:
                i = self._matching[i] + 1
                continue
            i += 1
        return False

    def _add(self, node: DeclaredItem | UseItem) -> None:
        logger.trace("item: %s", node)
        self.nodes.append(node)

    def _add_fn(self, name: str, visibility: Visibility, attrs: list[_Attr], first: Token) -> None:
        names = {a.name: a for a in attrs}
        if "proc_macro" in names:
            self._declare(SymbolKind.TEXT_MACRO, name, visibility, first, exported=True)
        elif "proc_macro_attribute" in names:
            self._declare(SymbolKind.ATTRIBUTE_MACRO, name, visibility, first, exported=True)
        elif "proc_macro_derive" in names:
            # #[proc_macro_derive(Name, attributes(..))]
            args = names["proc_macro_derive"].tokens
            if len(args) > 1 and args[1].kind is Tok.IDENT:
                self._declare(
                    SymbolKind.DERIVING_MACRO, args[1].text, visibility, first, exported=True
                )
        else:
            self._declare(SymbolKind.FUNCTION, name, visibility, first)

    def _extern_crate(self, visibility: Visibility, first: Token) -> None:
        crate_name = self._name_after(2)
        rename = self._name_after(4) if self.is_("as", 3) else None
        self.skip_to_semicolon()
        if crate_name is not None and rename is not None and rename != "_":
            self._add(
                DeclaredItem(
                    SymbolKind.EXTERN_ALIAS,
                    rename,
                    visibility,
                    alias_of=crate_name,
                    span=self.span(first, self.tokens[self.pos - 1]),
                )
            )

    def _use_tree(self) -> UseTree | None:  # noqa: PLR0911
        tok = self.peek()
        if tok is None:
            return None
        if tok.text == "::":
            self.pos += 1
            nxt = self.peek()
            if nxt is not None and nxt.kind is Tok.IDENT:
                self.pos += 1
                return self._use_after_ident(f"::{nxt.text}")
            return self._use_tree()
        if tok.text == "*":
            self.pos += 1
            return UseGlob()
        if tok.text == "{":
            close = self._matching[self.pos]
            self.pos += 1
            items: list[UseTree] = []
            while self.pos < close:
                if self.is_(","):
                    self.pos += 1
                    continue
                before = self.pos
                sub = self._use_tree()
                if sub is not None:
                    items.append(sub)
                if self.pos == before:
                    self.pos += 1
            self.pos = close + 1
            return UseGroup(tuple(items))
        if tok.kind is Tok.IDENT:
            self.pos += 1
            return self._use_after_ident(tok.text)
        return None

    def _use_after_ident(self, ident: str) -> UseTree | None:
        if ident.startswith("r#"):
            ident = ident[2:]
        if self.is_("::"):
            self.pos += 1
            sub = self._use_tree()
            return UsePath(ident, sub) if sub is not None else None
        if self.is_("as"):
            rename = self._name_after(1)
            self.pos += 2
            return UseRename(ident, rename) if rename is not None else None
        return UseName(ident)


def read_source(code: str, diagnostics: DiagnosticLog | None = None) -> SourceUnit:
    """Read crate docs and top-level items from the source of a crate root.

    Args:
        code (str): The Rust source text.
        diagnostics (DiagnosticLog | None): Where warnings are collected.

    Returns:
        SourceUnit: Unindented crate docs plus the item list.

    Raises:
        RustSyntaxError: When the source cannot be tokenized.
    """
    tokens = Lexer(code).tokenize()
    scanner = ItemScanner(code, tokens, diagnostics)
    scanner.scan()
    rustdoc = unindent("\n".join(scanner.doc_fragments))
    logger.debug(
        "Read %d doc fragments and %d top-level items",
        len(scanner.doc_fragments),
        len(scanner.nodes),
    )
    return SourceUnit(rustdoc=rustdoc, nodes=tuple(scanner.nodes), code=code)
