# topmark:header:start
#
#   project      : Doc2Readme
#   file         : __init__.py
#   file_relpath : src/doc2readme/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Doc2Readme CLI package.

Typical usage:
    The console script entry points are defined in ``pyproject.toml`` as::

        [project.scripts]
        doc2readme = "doc2readme.cli.main:cli"
        cargo-doc2readme = "doc2readme.cli.main:cli"
"""

from __future__ import annotations

__all__: list[str] = []
# Do NOT import .main at module import time
