# topmark:header:start
#
#   project      : Doc2Readme
#   file         : __main__.py
#   file_relpath : src/doc2readme/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module entry point for running Doc2Readme via ``python -m doc2readme``.

Delegates to :func:`doc2readme.cli.main.cli`, so the module interface and the
``doc2readme`` console script share a single entry point.

Examples:
    Regenerate the readme of the package in the current directory::

        python -m doc2readme

    Verify that it is up to date::

        python -m doc2readme --check
"""

from __future__ import annotations

from doc2readme.cli.main import cli

if __name__ == "__main__":
    cli()
