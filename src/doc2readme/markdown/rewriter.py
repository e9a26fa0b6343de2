# topmark:header:start
#
#   project      : Doc2Readme
#   file         : rewriter.py
#   file_relpath : src/doc2readme/markdown/rewriter.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Markdown rewriter: normalize crate docs and collect every link destination.

The documentation is parsed with ``markdown-it-py`` (CommonMark plus tables and
strikethrough) and written back out as markdown:

* headings move down one level, so the template can put the crate name on top;
* code fences lose rustdoc's doctest flags and hidden lines;
* every link and image destination is replaced by a ``__linkN`` reference and
  collected, so the links can be resolved later without parsing again.

Intra-doc links such as ``[Vec]`` have no definition in the document. The parser
is given a reference table that accepts *every* label once block parsing is
done, so these come through as links. The link and image rules also keep each
label as written, since the reference table only sees the case-folded form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from markdown_it import MarkdownIt
from markdown_it.rules_inline.image import image as _image_rule
from markdown_it.rules_inline.link import link as _link_rule
from markdown_it.tree import SyntaxTreeNode

from doc2readme.config.logging import get_logger
from doc2readme.constants import LINK_PLACEHOLDER_PREFIX
from doc2readme.markdown.codeblocks import fence_for, filter_hidden_lines, parse_info

if TYPE_CHECKING:
    from collections.abc import Callable

    from markdown_it.rules_core import StateCore
    from markdown_it.rules_inline import StateInline

    from doc2readme.config.logging import Doc2ReadmeLogger

logger: Doc2ReadmeLogger = get_logger(__name__)

# prefix of the destination given to labels without a definition
_BROKEN_PREFIX: Final[str] = "\x00broken:"

_LABEL_RE: Final[re.Pattern[str]] = re.compile(r"\[((?:[^\[\]\\]|\\.)*)\]$")
_ENTITY_RE: Final[re.Pattern[str]] = re.compile(r"&(#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_LINE_START_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?:#{1,6}(?:\s|$)|>|[-+*](?:\s|$)|=+\s*$|\d{1,9}[.)](?:\s|$))"
)
_ALWAYS_ESCAPED: Final[frozenset[str]] = frozenset("\\`*[]<")


class BrokenReferences(dict[str, Any]):
    """Reference table that resolves unknown labels once block parsing is over.

    During block parsing it is an ordinary dict, so ``[label]: url`` definitions
    are stored as usual. Afterwards every lookup of an undefined label returns a
    definition whose destination carries the label itself.
    """

    def __init__(self) -> None:
        super().__init__()
        self.accept_all: bool = False

    def __contains__(self, key: object) -> bool:
        # an empty label (`[]`) is never a link
        return super().__contains__(key) or (self.accept_all and bool(key))

    def __missing__(self, key: str) -> dict[str, str]:
        if not self.accept_all:
            raise KeyError(key)
        return {"href": f"{_BROKEN_PREFIX}{key}", "title": ""}

    def get(self, key: str, default: Any = None) -> Any:
        if super().__contains__(key):
            return super().__getitem__(key)
        if self.accept_all and key:
            return self.__missing__(key)
        return default

    def __bool__(self) -> bool:
        return True


def _accept_broken_references(state: StateCore) -> None:
    refs = state.env.get("references")
    if isinstance(refs, BrokenReferences):
        refs.accept_all = True


def reference_label(source: str) -> str | None:
    """Return the reference label of a parsed link or image, as written.

    ``source`` is the whole link (``[text][label]``, ``[label][]`` or
    ``[label]``). Inline links (``[text](url)``) have no label.
    """
    if source.endswith(")"):
        return None
    if source.endswith("[]"):
        source = source[:-2]
    m = _LABEL_RE.search(source)
    return m.group(1) if m else None


def _keep_label(rule: Callable[[StateInline, bool], bool]) -> Callable[[StateInline, bool], bool]:
    """Wrap a link or image rule to store the label spelling in the token meta."""

    def wrapped(state: StateInline, silent: bool) -> bool:
        start, first = state.pos, len(state.tokens)
        if not rule(state, silent):
            return False
        if silent:
            return True
        label = reference_label(state.src[start : state.pos])
        if label is None:
            return True
        # pending text may be flushed ahead of the link token
        for token in state.tokens[first:]:
            if token.type in ("link_open", "image"):
                token.meta["label"] = label
                break
        return True

    return wrapped


def make_parser() -> MarkdownIt:
    """Return the markdown parser used for crate documentation."""
    md = MarkdownIt("commonmark").enable("table").enable("strikethrough")
    md.inline.ruler.at("link", _keep_label(_link_rule))
    md.inline.ruler.at("image", _keep_label(_image_rule))
    md.core.ruler.after("block", "doc2readme_broken_refs", _accept_broken_references)
    return md


@dataclass(frozen=True)
class RewriteResult:
    """Normalized body plus the collected link destinations.

    Attributes:
        body (str): The rewritten markdown, ending in exactly one newline.
        links (dict[str, str]): Placeholder (``__link0``) → raw destination,
            in first-seen order.
    """

    body: str
    links: dict[str, str] = field(default_factory=lambda: {})


class MarkdownRewriter:
    """Rewrite one documentation text; create a new instance per document."""

    def __init__(self) -> None:
        self._md: MarkdownIt = make_parser()
        self._links: dict[str, str] = {}
        self._line_start: bool = True
        self._in_table: bool = False
        self._in_heading: bool = False

    def rewrite(self, text: str) -> RewriteResult:
        """Parse ``text`` and write it back as normalized markdown.

        Args:
            text (str): The raw crate documentation.

        Returns:
            RewriteResult: Body and placeholder map.
        """
        self._links = {}
        env: dict[str, Any] = {"references": BrokenReferences()}
        tokens = self._md.parse(text, env)
        root = SyntaxTreeNode(tokens)
        body = self._render_blocks(root.children, tight=False).rstrip("\n") + "\n"
        logger.debug("Rewrote %d bytes of docs, %d links", len(text), len(self._links))
        return RewriteResult(body, dict(self._links))

    # --- blocks ---

    def _render_blocks(self, nodes: list[SyntaxTreeNode], *, tight: bool) -> str:
        parts: list[str] = []
        prev: str | None = None
        alternate = False
        for node in nodes:
            # adjacent lists of the same type only stay apart with different markers
            alternate = (not alternate) if node.type == prev else False
            rendered = self._render_block(node, alternate)
            prev = node.type
            if rendered is None:
                continue
            parts.append(rendered)
        return ("\n" if tight else "\n\n").join(parts)

    def _render_block(self, node: SyntaxTreeNode, alternate: bool) -> str | None:  # noqa: PLR0911
        t = node.type
        if t == "paragraph":
            return self._render_inline_container(node)
        if t == "heading":
            level = int(node.tag[1:]) + 1
            self._in_heading = True
            try:
                return f"{'#' * level} {self._render_inline_container(node)}".rstrip()
            finally:
                self._in_heading = False
        if t == "blockquote":
            inner = self._render_blocks(node.children, tight=False)
            return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
        if t == "bullet_list":
            return self._render_list(node, ordered=False, alternate=alternate)
        if t == "ordered_list":
            return self._render_list(node, ordered=True, alternate=alternate)
        if t in ("fence", "code_block"):
            return self._render_code(node)
        if t == "hr":
            return "---"
        if t == "html_block":
            return node.content.rstrip("\n")
        if t == "table":
            return self._render_table(node)
        logger.warning("Ignoring unsupported markdown block %r", t)
        return None

    def _render_list(self, node: SyntaxTreeNode, *, ordered: bool, alternate: bool) -> str:
        tight = _is_tight(node)
        start = int(node.attrs.get("start", 1)) if ordered else 0
        lines: list[str] = []
        for idx, item in enumerate(node.children):
            if ordered:
                marker = f"{start + idx}{')' if alternate else '.'} "
            else:
                marker = "* " if alternate else "- "
            content = self._render_blocks(item.children, tight=tight)
            indent = " " * len(marker)
            item_lines = content.split("\n") if content else [""]
            rendered = [f"{marker}{item_lines[0]}".rstrip()]
            rendered.extend(f"{indent}{line}" if line else "" for line in item_lines[1:])
            lines.append("\n".join(rendered))
        return ("\n" if tight else "\n\n").join(lines)

    def _render_code(self, node: SyntaxTreeNode) -> str:
        info = parse_info(node.info if node.type == "fence" else None)
        code = node.content
        if info.hides_lines:
            code = filter_hidden_lines(code)
        if code and not code.endswith("\n"):
            code += "\n"
        fence = fence_for(code)
        return f"{fence}{info.lang}\n{code}{fence}"

    def _render_table(self, node: SyntaxTreeNode) -> str:
        rows: list[list[str]] = []
        aligns: list[str] = []
        self._in_table = True
        try:
            for section in node.children:
                for tr in section.children:
                    cells = []
                    for cell in tr.children:
                        if section.type == "thead":
                            aligns.append(_alignment(cell.attrs.get("style")))
                        cells.append(self._render_inline_container(cell))
                    rows.append(cells)
        finally:
            self._in_table = False

        lines = [_table_row(rows[0]), _table_row(aligns)]
        lines.extend(_table_row(r) for r in rows[1:])
        return "\n".join(lines)

    # --- inlines ---

    def _render_inline_container(self, node: SyntaxTreeNode) -> str:
        self._line_start = True
        return "".join(self._render_inline(child) for child in _inline_children(node))

    def _render_inline(self, node: SyntaxTreeNode) -> str:  # noqa: PLR0911
        t = node.type
        if t in ("text", "text_special"):
            out = self._escape(node.content)
        elif t == "softbreak":
            out = " " if self._in_heading or self._in_table else "\n"
            self._line_start = out == "\n"
            return out
        elif t == "hardbreak":
            out = " " if self._in_heading or self._in_table else "\\\n"
            self._line_start = out != " "
            return out
        elif t == "code_inline":
            out = _code_span(node.content, escape_pipe=self._in_table)
        elif t == "em":
            out = f"*{self._render_children(node)}*"
        elif t == "strong":
            out = f"**{self._render_children(node)}**"
        elif t == "s":
            out = f"~~{self._render_children(node)}~~"
        elif t == "html_inline":
            out = node.content
        elif t == "link":
            out = self._render_link(node)
        elif t == "image":
            out = self._render_image(node)
        else:
            logger.warning("Ignoring unsupported markdown inline %r", t)
            return ""
        self._line_start = False
        return out

    def _render_children(self, node: SyntaxTreeNode) -> str:
        return "".join(self._render_inline(child) for child in node.children)

    def _render_link(self, node: SyntaxTreeNode) -> str:
        href = str(node.attrs.get("href", ""))
        if node.info == "auto" or node.markup == "autolink":
            self._line_start = False
            return f"<{''.join(c.content for c in node.children)}>"
        if href.startswith("#"):
            return f"[{self._render_children(node)}]({href})"
        placeholder = self._placeholder(href, node.attrs.get("title"), node.meta.get("label"))
        return f"[{self._render_children(node)}][{placeholder}]"

    def _render_image(self, node: SyntaxTreeNode) -> str:
        src = str(node.attrs.get("src", ""))
        placeholder = self._placeholder(src, node.attrs.get("title"), node.meta.get("label"))
        return f"![{self._render_children(node)}][{placeholder}]"

    def _placeholder(self, href: str, title: object, label: str | None) -> str:
        raw = href
        if raw.startswith(_BROKEN_PREFIX):
            raw = label if label is not None else raw[len(_BROKEN_PREFIX) :]
        elif not raw:
            # empty destination: the reference label, then the title
            raw = label or (title if isinstance(title, str) else "")
        placeholder = f"{LINK_PLACEHOLDER_PREFIX}{len(self._links)}"
        self._links[placeholder] = raw
        logger.trace("%s -> %r", placeholder, raw)
        return placeholder

    def _escape(self, text: str) -> str:
        out: list[str] = []
        for i, ch in enumerate(text):
            if ch in _ALWAYS_ESCAPED or (ch == "|" and self._in_table):
                out.append("\\" + ch)
            elif ch == "_":
                before = text[i - 1] if i > 0 else ""
                after = text[i + 1] if i + 1 < len(text) else ""
                out.append(ch if before.isalnum() and after.isalnum() else "\\_")
            elif ch == "~" and ("~" in (text[i - 1 : i], text[i + 1 : i + 2])):
                out.append("\\~")
            elif ch == "&" and _ENTITY_RE.match(text, i):
                out.append("\\&")
            else:
                out.append(ch)
        escaped = "".join(out)
        if self._line_start and _LINE_START_RE.match(escaped):
            m = re.match(r"\d+", escaped)
            if m:
                escaped = f"{m.group(0)}\\{escaped[m.end() :]}"
            else:
                escaped = "\\" + escaped
        return escaped


def _inline_children(node: SyntaxTreeNode) -> list[SyntaxTreeNode]:
    children: list[SyntaxTreeNode] = []
    for child in node.children:
        if child.type == "inline":
            children.extend(child.children)
        else:
            children.append(child)
    return children


def _is_tight(node: SyntaxTreeNode) -> bool:
    for item in node.children:
        for child in item.children:
            if child.type == "paragraph" and not child.hidden:
                return False
    return True


def _alignment(style: object) -> str:
    if not isinstance(style, str):
        return "---"
    if style.endswith("center"):
        return ":---:"
    if style.endswith("left"):
        return ":---"
    if style.endswith("right"):
        return "---:"
    return "---"


def _table_row(cells: list[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def _code_span(content: str, *, escape_pipe: bool = False) -> str:
    runs = [len(r) for r in re.findall(r"`+", content)]
    ticks = 1
    while ticks in runs:
        ticks += 1
    fence = "`" * ticks
    if escape_pipe:
        content = content.replace("|", "\\|")
    pad = content.startswith("`") or content.endswith("`")
    pad = pad or (content.startswith(" ") and content.endswith(" ") and content.strip() != "")
    if pad:
        content = f" {content} "
    return f"{fence}{content}{fence}"
