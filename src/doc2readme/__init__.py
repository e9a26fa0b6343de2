# topmark:header:start
#
#   project      : Doc2Readme
#   file         : __init__.py
#   file_relpath : src/doc2readme/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Doc2Readme package.

Doc2Readme turns the crate-level rustdoc of a Rust package into a ``README.md``.
Intra-doc links are resolved against a scope table that mimics Rust's name
lookup and rewritten into absolute links to ``doc.rust-lang.org``, ``docs.rs``
and ``crates.io``. The generated readme embeds a compact dependency-info token
so that ``doc2readme --check`` can later tell whether the file is still current.
"""

from __future__ import annotations
