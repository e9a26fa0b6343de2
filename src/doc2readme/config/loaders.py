# topmark:header:start
#
#   project      : Doc2Readme
#   file         : loaders.py
#   file_relpath : src/doc2readme/config/loaders.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Read TOML configuration sources with `tomlkit`.

Documents are returned as plain ``dict`` structures (``TOMLDocument.unwrap()``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from doc2readme.config.keys import Toml
from doc2readme.config.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from doc2readme.config.logging import Doc2ReadmeLogger

logger: Doc2ReadmeLogger = get_logger(__name__)

TomlTable = dict[str, Any]


class ConfigError(ValueError):
    """Invalid or unreadable configuration."""


def parse_toml_text(text: str, source: str = "<string>") -> TomlTable:
    """Parse TOML ``text`` into a plain dict.

    Raises:
        ConfigError: When ``text`` is not valid TOML.
    """
    try:
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
    except TomlkitParseError as exc:
        raise ConfigError(f"Error decoding TOML from {source}: {exc}") from exc
    data_any: Any = doc.unwrap()
    return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}


def load_toml_dict(path: Path, *, required: bool = False) -> TomlTable:
    """Load and parse a TOML file.

    Args:
        path (Path): The TOML document.
        required (bool): Whether a missing file is an error. Optional files
            that do not exist yield an empty dict.

    Returns:
        TomlTable: The parsed document.

    Raises:
        ConfigError: When the file cannot be read or parsed (or is missing and
            ``required``).
    """
    if not path.exists():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        logger.trace("No config at %s", path)
        return {}
    try:
        text: str = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Error loading TOML from {path}: {exc}") from exc
    logger.debug("Loaded TOML from %s", path)
    return parse_toml_text(text, str(path))


def extract_cargo_table(cargo_toml: TomlTable) -> TomlTable:
    """Return ``[package.metadata.doc2readme]`` of a parsed ``Cargo.toml``, or ``{}``."""
    node: Any = cargo_toml
    for key in (Toml.SECTION_PACKAGE, Toml.SECTION_METADATA, Toml.SECTION_TOOL):
        if not isinstance(node, dict):
            return {}
        node = node.get(key, {})
    if not isinstance(node, dict):
        raise ConfigError(
            f"[{Toml.SECTION_PACKAGE}.{Toml.SECTION_METADATA}.{Toml.SECTION_TOOL}] must be a table"
        )
    return cast("TomlTable", node)
