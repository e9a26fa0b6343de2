# topmark:header:start
#
#   project      : Doc2Readme
#   file         : model.py
#   file_relpath : src/doc2readme/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration model: `MutableConfig` builder and immutable `Config` snapshot.

Sources are merged from lowest to highest precedence:

1. built-in defaults (`MutableConfig.from_defaults`);
2. ``[package.metadata.doc2readme]`` in ``Cargo.toml``;
3. ``doc2readme.toml`` next to the manifest;
4. an explicit ``--config`` file;
5. command line options (`MutableConfig.apply_cli`).

Paths from a config file are relative to that file's directory; paths from the
command line and the defaults are relative to the working directory.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from doc2readme.config.keys import Toml
from doc2readme.config.loaders import ConfigError, extract_cargo_table, load_toml_dict
from doc2readme.config.logging import get_logger
from doc2readme.constants import DEFAULT_CONFIG_NAME, DEFAULT_OUTPUT_NAME, DEFAULT_TEMPLATE_NAME

if TYPE_CHECKING:
    from doc2readme.config.loaders import TomlTable
    from doc2readme.config.logging import Doc2ReadmeLogger

logger: Doc2ReadmeLogger = get_logger(__name__)

# Output destination meaning "write to stdout".
STDOUT_MARKER: str = "-"

_FEATURE_SPLIT_RE: re.Pattern[str] = re.compile(r"[\s,]+")


def split_features(raw: str | list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Split a space or comma separated feature list; lists are split per item."""
    if raw is None:
        return ()
    items = [raw] if isinstance(raw, str) else list(raw)
    return tuple(f for item in items for f in _FEATURE_SPLIT_RE.split(item) if f)


def _abs_path_from(base: Path, raw: str) -> Path:
    p = Path(raw)
    return p if p.is_absolute() else base / p


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable runtime configuration.

    Attributes:
        out (Path | None): Output file; None writes to stdout.
        template (Path): Template file; the bundled template is used when it
            does not exist.
        expand_macros (bool): Expand macros with a nightly compiler.
        features (tuple[str, ...]): Features passed to cargo when expanding.
        all_features (bool): Pass ``--all-features`` when expanding.
        no_default_features (bool): Pass ``--no-default-features`` when expanding.
        prefer_bin (bool): Document the binary rather than the library target.
        config_files (tuple[Path | str, ...]): Sources that contributed, in merge order.
        warnings (tuple[str, ...]): Problems found while merging (unknown keys).
    """

    out: Path | None
    template: Path
    expand_macros: bool
    features: tuple[str, ...]
    all_features: bool
    no_default_features: bool
    prefer_bin: bool
    config_files: tuple[Path | str, ...]
    warnings: tuple[str, ...]

    @property
    def writes_stdout(self) -> bool:
        """Return True when the readme goes to stdout."""
        return self.out is None

    def thaw(self) -> MutableConfig:
        """Return a mutable copy."""
        return MutableConfig(
            out=self.out,
            template=self.template,
            expand_macros=self.expand_macros,
            features=list(self.features),
            all_features=self.all_features,
            no_default_features=self.no_default_features,
            prefer_bin=self.prefer_bin,
            config_files=list(self.config_files),
            warnings=list(self.warnings),
        )


@dataclass
class MutableConfig:
    """Mutable configuration used while merging sources; see `Config`."""

    out: Path | None = None
    template: Path | None = None
    expand_macros: bool = False
    features: list[str] = field(default_factory=lambda: [])
    all_features: bool = False
    no_default_features: bool = False
    prefer_bin: bool = False
    config_files: list[Path | str] = field(default_factory=lambda: [])
    warnings: list[str] = field(default_factory=lambda: [])

    @classmethod
    def from_defaults(cls, cwd: Path | None = None) -> MutableConfig:
        """Return the built-in defaults, with paths relative to ``cwd``."""
        base = cwd or Path.cwd()
        return cls(
            out=base / DEFAULT_OUTPUT_NAME,
            template=base / DEFAULT_TEMPLATE_NAME,
            config_files=["<defaults>"],
        )

    # --- merging ---

    def _warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)

    @staticmethod
    def _expect(table: TomlTable, key: str, types: tuple[type, ...], source: str) -> Any:
        value = table[key]
        # bool is an int; only accept it where asked for
        if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
            expected = " or ".join(t.__name__ for t in types)
            raise ConfigError(
                f"{source}: `{key}` must be of type {expected}, got {type(value).__name__}"
            )
        return value

    def merge_toml(
        self, table: TomlTable, *, base_dir: Path | None = None, source: str = "<toml>"
    ) -> MutableConfig:
        """Merge one configuration table; keys present override current values.

        Args:
            table (TomlTable): Keys of the doc2readme table.
            base_dir (Path | None): Directory relative paths are resolved against.
            source (str): Name of the source, for messages.

        Returns:
            MutableConfig: ``self``, for chaining.

        Raises:
            ConfigError: When a value has the wrong type.
        """
        base = base_dir or Path.cwd()
        for key in table:
            if key not in Toml.ALL_KEYS:
                self._warn(f"{source}: unknown configuration key `{key}`")

        if Toml.KEY_OUT in table:
            raw = self._expect(table, Toml.KEY_OUT, (str,), source)
            self.out = None if raw == STDOUT_MARKER else _abs_path_from(base, raw)
        if Toml.KEY_TEMPLATE in table:
            raw = self._expect(table, Toml.KEY_TEMPLATE, (str,), source)
            self.template = _abs_path_from(base, raw)
        if Toml.KEY_FEATURES in table:
            raw = self._expect(table, Toml.KEY_FEATURES, (str, list), source)
            if isinstance(raw, list) and not all(isinstance(f, str) for f in raw):
                raise ConfigError(f"{source}: `{Toml.KEY_FEATURES}` must list strings")
            self.features = list(split_features(raw))
        for key, attr in (
            (Toml.KEY_EXPAND_MACROS, "expand_macros"),
            (Toml.KEY_ALL_FEATURES, "all_features"),
            (Toml.KEY_NO_DEFAULT_FEATURES, "no_default_features"),
            (Toml.KEY_PREFER_BIN, "prefer_bin"),
        ):
            if key in table:
                setattr(self, attr, self._expect(table, key, (bool,), source))
        self.config_files.append(source)
        return self

    def merge_file(self, path: Path, *, required: bool = False) -> MutableConfig:
        """Merge ``doc2readme.toml`` style file ``path`` (missing is fine unless ``required``)."""
        table = load_toml_dict(path, required=required)
        if table:
            self.merge_toml(table, base_dir=path.parent, source=str(path))
        return self

    def merge_cargo_manifest(self, cargo_toml: Path) -> MutableConfig:
        """Merge ``[package.metadata.doc2readme]`` of ``cargo_toml``."""
        table = extract_cargo_table(load_toml_dict(cargo_toml))
        if table:
            self.merge_toml(table, base_dir=cargo_toml.parent, source=f"{cargo_toml} [metadata]")
        return self

    def apply_cli(self, args: Mapping[str, Any], *, cwd: Path | None = None) -> MutableConfig:
        """Apply command line overrides; ``None`` values leave the setting alone.

        Args:
            args (Mapping[str, Any]): Option values keyed like `Config` fields.
            cwd (Path | None): Directory relative paths are resolved against.

        Returns:
            MutableConfig: ``self``, for chaining.
        """
        base = cwd or Path.cwd()
        out = args.get("out")
        if out is not None:
            self.out = None if str(out) == STDOUT_MARKER else _abs_path_from(base, str(out))
        template = args.get("template")
        if template is not None:
            self.template = _abs_path_from(base, str(template))
        features = args.get("features")
        if features:
            self.features = list(split_features(features))
        for key in ("expand_macros", "all_features", "no_default_features", "prefer_bin"):
            value = args.get(key)
            if value is not None:
                setattr(self, key, bool(value))
        self.config_files.append("<cli>")
        return self

    def freeze(self) -> Config:
        """Return the immutable snapshot."""
        return Config(
            out=self.out,
            template=self.template or Path.cwd() / DEFAULT_TEMPLATE_NAME,
            expand_macros=self.expand_macros,
            features=tuple(dict.fromkeys(self.features)),
            all_features=self.all_features,
            no_default_features=self.no_default_features,
            prefer_bin=self.prefer_bin,
            config_files=tuple(self.config_files),
            warnings=tuple(self.warnings),
        )

    @classmethod
    def load_merged(
        cls,
        manifest_path: Path | None = None,
        extra_config: Path | None = None,
        *,
        cwd: Path | None = None,
    ) -> MutableConfig:
        """Merge defaults and all configuration files (everything but the CLI).

        Args:
            manifest_path (Path | None): ``Cargo.toml`` of the package; the one in
                ``cwd`` when None.
            extra_config (Path | None): File given with ``--config``; must exist.
            cwd (Path | None): Working directory.

        Returns:
            MutableConfig: The merged builder.

        Raises:
            ConfigError: On unreadable files and wrongly typed values.
        """
        base = cwd or Path.cwd()
        draft = cls.from_defaults(base)
        cargo_toml = base / "Cargo.toml"
        if manifest_path is not None:
            cargo_toml = _abs_path_from(base, str(manifest_path))
        draft.merge_cargo_manifest(cargo_toml)
        draft.merge_file(cargo_toml.parent / DEFAULT_CONFIG_NAME)
        if extra_config is not None:
            draft.merge_file(_abs_path_from(base, str(extra_config)), required=True)
        logger.debug("Config sources: %s", draft.config_files)
        return draft
