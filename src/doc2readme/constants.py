# topmark:header:start
#
#   project      : Doc2Readme
#   file         : constants.py
#   file_relpath : src/doc2readme/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Doc2Readme Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Final

try:
    DOC2README_VERSION: str = get_version("doc2readme")
except PackageNotFoundError:  # running from a source checkout
    DOC2README_VERSION = "0.0.0"

# Name of the bundled default template inside the package `doc2readme.templates`:
DEFAULT_TEMPLATE_PACKAGE: Final[str] = "doc2readme.templates"
DEFAULT_TEMPLATE_NAME: Final[str] = "README.j2"

DEFAULT_OUTPUT_NAME: Final[str] = "README.md"
DEFAULT_CONFIG_NAME: Final[str] = "doc2readme.toml"

# Reference label of the dependency-info line in the link trailer.
DEPINFO_LABEL: Final[str] = "__doc2readme_dependencies_info"
DEPINFO_MARKER: Final[str] = f" [{DEPINFO_LABEL}]: "

# Prefix of the numbered link placeholders emitted by the markdown rewriter.
LINK_PLACEHOLDER_PREFIX: Final[str] = "__link"

# Language of untagged code blocks.
DEFAULT_CODEBLOCK_LANG: Final[str] = "rust"

STD_DOCS_HOST: Final[str] = "https://doc.rust-lang.org/stable/std"
DOCS_RS_HOST: Final[str] = "https://docs.rs"
CRATES_IO_HOST: Final[str] = "https://crates.io/crates"

# Crates whose items are documented under the standard library.
STD_CRATES: Final[frozenset[str]] = frozenset({"std", "core", "alloc"})

VALUE_NOT_SET: Final[str] = "<not set>"
