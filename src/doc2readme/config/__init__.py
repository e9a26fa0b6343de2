# topmark:header:start
#
#   project      : Doc2Readme
#   file         : __init__.py
#   file_relpath : src/doc2readme/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration handling for Doc2Readme.

The model lives in `doc2readme.config.model`, TOML reading in
`doc2readme.config.loaders` and logging setup in `doc2readme.config.logging`.
"""

from __future__ import annotations

from doc2readme.config.loaders import ConfigError
from doc2readme.config.model import Config, MutableConfig

__all__: list[str] = ["Config", "ConfigError", "MutableConfig"]
