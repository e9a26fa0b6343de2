# topmark:header:start
#
#   project      : Doc2Readme
#   file         : __init__.py
#   file_relpath : src/doc2readme/input/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Input collaborators: cargo manifest, source reader, and macro expansion."""

from __future__ import annotations
