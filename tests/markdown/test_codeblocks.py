# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_codeblocks.py
#   file_relpath : tests/markdown/test_codeblocks.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Code block info strings and hidden lines."""

from __future__ import annotations

from doc2readme.markdown.codeblocks import (
    fence_for,
    filter_hidden_lines,
    is_rustdoc_flag,
    parse_info,
)
from tests.conftest import parametrize


@parametrize(
    "info, lang, is_rust, ignore",
    [
        (None, "rust", True, False),
        ("", "rust", True, False),
        ("rust", "rust", True, False),
        ("should_panic", "rust", True, False),
        ("rust,no_run", "rust", True, False),
        ("ignore", "rust", True, True),
        ("ignore-wasm32", "rust", True, True),
        ("edition2021 compile_fail", "rust", True, False),
        ("text", "text", False, False),
        ("toml,ignore", "toml", False, True),
        ("sh {.class}", "sh", False, False),
    ],
)
def test_parse_info(info: str | None, lang: str, is_rust: bool, ignore: bool) -> None:
    """Doctest flags are dropped; untagged blocks are Rust."""
    parsed = parse_info(info)
    assert (parsed.lang, parsed.is_rust, parsed.ignore) == (lang, is_rust, ignore)


def test_hides_lines_only_for_tested_rust() -> None:
    """Hidden lines are only a thing in Rust blocks that rustdoc compiles."""
    assert parse_info("rust").hides_lines
    assert not parse_info("rust,ignore").hides_lines
    assert not parse_info("python").hides_lines


@parametrize("attr", ["no_run", "E0425", "edition2018", "ignore-windows", "standalone_crate"])
def test_rustdoc_flags(attr: str) -> None:
    """Known directives are recognized."""
    assert is_rustdoc_flag(attr)


def test_filter_hidden_lines() -> None:
    """``# `` lines go away, ``##`` is unescaped, attributes stay."""
    code = (
        "# use std::fmt;\n"
        "#\n"
        "    # fn main() {\n"
        "#[derive(Debug)]\n"
        "struct A;\n"
        "## not hidden\n"
        "    ##[attr]\n"
        "#\tindented\n"
    )
    assert filter_hidden_lines(code) == "#[derive(Debug)]\nstruct A;\n# not hidden\n    #[attr]\n"


def test_fence_for_outgrows_content() -> None:
    """The fence is longer than any backtick run inside the block."""
    assert fence_for("plain\n") == "```"
    assert fence_for("a ```` b\n") == "`````"
    assert fence_for("~~~\n", "~") == "~~~~"
