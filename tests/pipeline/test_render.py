# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_render.py
#   file_relpath : tests/pipeline/test_render.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""End-to-end rendering of a readme from crate source."""

from __future__ import annotations

from typing import TYPE_CHECKING

from semver import Version

from doc2readme.constants import DEPINFO_MARKER
from doc2readme.diagnostic.model import DiagnosticLog
from doc2readme.links.depinfo import DependencyInfo, hash_text
from doc2readme.pipeline.render import format_trailer, render_readme
from tests.conftest import make_dependency, make_input_file, make_manifest

if TYPE_CHECKING:
    from doc2readme.input.model import InputFile

TEMPLATE = "# {{ crate }}\n\n{{ readme }}\n\n{{ links }}\n"

CODE = """\
//! # My crate
//!
//! Uses [`Vec`], [`Widget`] and [serde](serde).
//!
//! ```
//! # use my_crate::Widget;
//! let w = Widget;
//! ```

pub struct Widget;
"""


def _input() -> InputFile:
    manifest = make_manifest(dependencies={"serde": make_dependency("serde", "1.0.200")})
    return make_input_file(CODE, manifest=manifest)


def test_render_readme() -> None:
    """Docs are rewritten, links resolved and the trailer appended."""
    input_file = _input()

    result = render_readme(input_file, TEMPLATE)

    assert result.links == {
        "__link0": "https://doc.rust-lang.org/stable/std/?search=vec::Vec",
        "__link1": "https://docs.rs/my-crate/1.2.3/my_crate/struct.Widget.html",
        "__link2": "https://crates.io/crates/serde/1.0.200",
    }
    assert result.text == (
        "# my-crate\n"
        "\n"
        "## My crate\n"
        "\n"
        "Uses [`Vec`][__link0], [`Widget`][__link1] and [serde][__link2].\n"
        "\n"
        "```rust\n"
        "let w = Widget;\n"
        "```\n"
        "\n" + format_trailer(result.depinfo, result.links) + "\n"
    )


def test_depinfo_snapshot() -> None:
    """The embedded snapshot hashes the inputs and lists linked crates."""
    input_file = _input()

    result = render_readme(input_file, TEMPLATE)
    depinfo = result.depinfo

    assert depinfo.template_hash == hash_text(TEMPLATE)
    assert depinfo.check_input(TEMPLATE, input_file.rustdoc)
    assert depinfo.dependencies["serde"].version == Version.parse("1.0.200")
    assert "vec" not in depinfo.dependencies

    token_line = next(line for line in result.text.splitlines() if DEPINFO_MARKER in line)
    assert DependencyInfo.decode(token_line[len(DEPINFO_MARKER) :]) == depinfo


def test_trailer_format() -> None:
    """The dependency-info line comes first; each link follows on its own line."""
    depinfo = DependencyInfo.new("t", "r")
    trailer = format_trailer(depinfo, {"__link0": "https://a", "__link1": "https://b"})
    assert trailer.split("\n") == [
        f"{DEPINFO_MARKER}{depinfo.encode()}",
        " [__link0]: https://a",
        " [__link1]: https://b",
    ]


def test_unknown_crate_warning_reaches_diagnostics() -> None:
    """Link warnings are collected in the diagnostics passed in."""
    input_file = make_input_file("//! See [`::mystery::Thing`].\n")
    diagnostics = DiagnosticLog()

    result = render_readme(input_file, TEMPLATE, diagnostics)

    assert result.links == {"__link0": "https://docs.rs/mystery/latest/mystery/?search=Thing"}
    assert diagnostics.has_warning()


def test_empty_docs() -> None:
    """A crate without docs still renders."""
    result = render_readme(make_input_file("pub struct A;\n"), TEMPLATE)
    assert result.links == {}
    assert result.text.startswith("# my-crate\n\n\n\n" + DEPINFO_MARKER)


def test_render_is_deterministic() -> None:
    """Rendering the same input twice gives byte-identical output."""
    first = render_readme(_input(), TEMPLATE)
    second = render_readme(_input(), TEMPLATE)
    assert first.text == second.text
