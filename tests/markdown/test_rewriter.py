# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_rewriter.py
#   file_relpath : tests/markdown/test_rewriter.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Markdown rewriter: normalized output and link collection."""

from __future__ import annotations

from doc2readme.markdown.rewriter import MarkdownRewriter, RewriteResult, reference_label
from tests.conftest import parametrize


def rewrite(text: str) -> RewriteResult:
    """Rewrite ``text`` with a fresh rewriter."""
    return MarkdownRewriter().rewrite(text)


def test_headings_move_down_one_level() -> None:
    """The template owns the top-level heading."""
    assert rewrite("# Title\n\n## Usage\n").body == "## Title\n\n### Usage\n"


def test_intra_doc_links_become_placeholders() -> None:
    """Links without a definition keep their label as destination."""
    result = rewrite("Some text with [`Vec`] and [link](https://example.com).\n")
    assert result.body == "Some text with [`Vec`][__link0] and [link][__link1].\n"
    assert result.links == {"__link0": "`Vec`", "__link1": "https://example.com"}


def test_collapsed_and_full_references() -> None:
    """``[text][label]`` and ``[label][]`` resolve through the label."""
    result = rewrite("See [the map][HashMap] and [Option][].\n")
    assert result.body == "See [the map][__link0] and [Option][__link1].\n"
    assert result.links == {"__link0": "HashMap", "__link1": "Option"}


def test_defined_references_use_their_destination() -> None:
    """Reference definitions are consumed and not written back."""
    result = rewrite("Read [the guide].\n\n[the guide]: https://example.com/guide\n")
    assert result.body == "Read [the guide][__link0].\n"
    assert result.links == {"__link0": "https://example.com/guide"}


def test_images_are_collected() -> None:
    """Image sources go through the same placeholder table."""
    result = rewrite("![logo](assets/logo.png)\n")
    assert result.body == "![logo][__link0]\n"
    assert result.links == {"__link0": "assets/logo.png"}


def test_anchor_links_and_autolinks_stay_inline() -> None:
    """Fragment links and autolinks are left where they are."""
    result = rewrite("Go [up](#intro) or to <https://example.com>.\n")
    assert result.body == "Go [up](#intro) or to <https://example.com>.\n"
    assert result.links == {}


def test_empty_brackets_are_not_links() -> None:
    """``[]`` is literal text."""
    result = rewrite("An empty [] pair.\n")
    assert result.body == "An empty \\[\\] pair.\n"
    assert result.links == {}


def test_code_fence_flags_and_hidden_lines() -> None:
    """Doctest flags are dropped and hidden lines removed."""
    text = "```rust,should_panic\n# use std::fmt;\nlet x = 1;\n## not hidden\n```\n"
    assert rewrite(text).body == "```rust\nlet x = 1;\n# not hidden\n```\n"


@parametrize(
    "text, expected",
    [
        ("```\nlet a = 1;\n```\n", "```rust\nlet a = 1;\n```\n"),
        ("```text\n# shown\n```\n", "```text\n# shown\n```\n"),
        ("```ignore\n# shown\n```\n", "```rust\n# shown\n```\n"),
        ("    indented();\n", "```rust\nindented();\n```\n"),
        ("````\n```\n````\n", "````rust\n```\n````\n"),
    ],
)
def test_code_block_languages(text: str, expected: str) -> None:
    """Untagged and indented blocks are Rust; other languages pass through."""
    assert rewrite(text).body == expected


def test_tight_and_adjacent_lists() -> None:
    """Adjacent lists alternate their markers so they stay separate."""
    assert rewrite("- a\n- b\n\n* c\n").body == "- a\n- b\n\n* c\n"
    assert rewrite("1. one\n2. two\n").body == "1. one\n2. two\n"
    assert rewrite("3. three\n4. four\n").body == "3. three\n4. four\n"


def test_code_block_inside_list_item() -> None:
    """Nested blocks are indented under their list item."""
    text = "- item\n\n  ```rust\n  let a = 1;\n  ```\n"
    assert rewrite(text).body == "- item\n\n  ```rust\n  let a = 1;\n  ```\n"


def test_blockquote_and_rule() -> None:
    """Quotes keep their markers; thematic breaks are normalized."""
    assert rewrite("> quoted\n").body == "> quoted\n"
    assert rewrite("a\n\n***\n\nb\n").body == "a\n\n---\n\nb\n"


def test_table() -> None:
    """Tables are written back with their alignment row."""
    text = "| a | b |\n|---|:-:|\n| 1 | `x` |\n"
    assert rewrite(text).body == "| a | b |\n| --- | :---: |\n| 1 | `x` |\n"


def test_inline_formatting() -> None:
    """Emphasis, strong, strikethrough and code spans survive."""
    text = "*em* **strong** ~~gone~~ `code` snake_case\n"
    assert rewrite(text).body == "*em* **strong** ~~gone~~ `code` snake_case\n"


def test_escapes_where_needed() -> None:
    """Characters that would change the meaning are escaped."""
    assert rewrite("a \\* b\n").body == "a \\* b\n"
    assert rewrite("\\# not a heading\n").body == "\\# not a heading\n"


def test_line_breaks() -> None:
    """Soft breaks stay newlines; hard breaks become backslash breaks."""
    assert rewrite("one\ntwo\n").body == "one\ntwo\n"
    assert rewrite("one  \ntwo\n").body == "one\\\ntwo\n"


def test_body_ends_with_single_newline() -> None:
    """Trailing blank lines are trimmed to one newline."""
    assert rewrite("text\n\n\n").body == "text\n"
    assert rewrite("").body == "\n"


def test_references_differing_in_case_keep_their_own_spelling() -> None:
    """Each occurrence keeps its own label text, even when labels match case-insensitively."""
    result = rewrite("[`Option`] and [`option`], [String] and [string][]\n")
    assert result.links == {
        "__link0": "`Option`",
        "__link1": "`option`",
        "__link2": "String",
        "__link3": "string",
    }


def test_empty_destination_falls_back_to_label() -> None:
    """A definition with an empty destination resolves through the label."""
    result = rewrite("[text][`Vec`]\n\n[`Vec`]: <>\n")
    assert result.body == "[text][__link0]\n"
    assert result.links == {"__link0": "`Vec`"}


def test_empty_destination_falls_back_to_title() -> None:
    """An inline link with an empty destination uses its title."""
    result = rewrite('[text](<> "Vec")\n')
    assert result.links == {"__link0": "Vec"}


@parametrize(
    "source, expected",
    [
        ("[Foo]", "Foo"),
        ("[Foo][]", "Foo"),
        ("[the map][HashMap]", "HashMap"),
        ("![alt][logo]", "logo"),
        ("[text](https://example.com)", None),
    ],
)
def test_reference_label(source: str, expected: str | None) -> None:
    """The label is read from the link source as written."""
    assert reference_label(source) == expected
