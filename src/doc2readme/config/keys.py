# topmark:header:start
#
#   project      : Doc2Readme
#   file         : keys.py
#   file_relpath : src/doc2readme/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""TOML table and key names of the Doc2Readme configuration.

The same keys are read from ``doc2readme.toml``, from an explicit ``--config``
file and from ``[package.metadata.doc2readme]`` in ``Cargo.toml``. Renaming or
removing a key is a breaking change.
"""

from __future__ import annotations

from typing import Final


class Toml:
    """TOML table names and keys."""

    # Cargo.toml: [package.metadata.doc2readme]
    SECTION_PACKAGE: Final[str] = "package"
    SECTION_METADATA: Final[str] = "metadata"
    SECTION_TOOL: Final[str] = "doc2readme"

    KEY_OUT: Final[str] = "out"
    KEY_TEMPLATE: Final[str] = "template"
    KEY_EXPAND_MACROS: Final[str] = "expand_macros"
    KEY_FEATURES: Final[str] = "features"
    KEY_ALL_FEATURES: Final[str] = "all_features"
    KEY_NO_DEFAULT_FEATURES: Final[str] = "no_default_features"
    KEY_PREFER_BIN: Final[str] = "prefer_bin"

    ALL_KEYS: Final[frozenset[str]] = frozenset(
        {
            KEY_OUT,
            KEY_TEMPLATE,
            KEY_EXPAND_MACROS,
            KEY_FEATURES,
            KEY_ALL_FEATURES,
            KEY_NO_DEFAULT_FEATURES,
            KEY_PREFER_BIN,
        }
    )
