# topmark:header:start
#
#   project      : Doc2Readme
#   file         : __init__.py
#   file_relpath : src/doc2readme/diagnostic/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostics collected while reading the input and rewriting links."""

from __future__ import annotations
