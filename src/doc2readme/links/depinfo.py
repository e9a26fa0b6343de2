# topmark:header:start
#
#   project      : Doc2Readme
#   file         : depinfo.py
#   file_relpath : src/doc2readme/links/depinfo.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Dependency-info token embedded in every generated readme.

The token is a snapshot of everything a readme depends on:

* the document schema version (bumped when the markdown output changes);
* blake3 hashes of the template and of the crate documentation;
* the dependencies that links were generated for, with the versions used.

Wire format (CBOR, then URL-safe base64 without padding)::

    [1, {"m": <schema u8>,
         "t": [<u64>, <u64>, <u64>, <u64>],   # template hash, big-endian words
         "r": [<u64>, <u64>, <u64>, <u64>],   # rustdoc hash, big-endian words
         "d": [[<crate name>, <version | null>(, <lib name>)], ...]}]

The lib name is only present when it differs from the crate name; dependencies
are written sorted by crate name so that identical input gives identical tokens.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

import blake3
import cbor2
from semver import Version

from doc2readme.config.logging import get_logger

if TYPE_CHECKING:
    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.links.versions import VersionReq

logger: Doc2ReadmeLogger = get_logger(__name__)

#: Outer tag of the wire format.
FORMAT_VERSION: Final[int] = 1

#: Internal version of the markdown output. Bump it whenever the rewriter output
#: changes enough that existing readmes must be regenerated.
DOCUMENT_SCHEMA_VERSION: Final[int] = 1

_HASH_WORDS: Final[int] = 4
_HASH_SIZE: Final[int] = 32


class DependencyInfoError(ValueError):
    """Raised when a token cannot be decoded into a `DependencyInfo`."""


def hash_text(text: str) -> bytes:
    """Return the 32-byte blake3 digest of ``text`` (UTF-8)."""
    return blake3.blake3(text.encode("utf-8")).digest()


def _hash_to_words(digest: bytes) -> list[int]:
    return [int.from_bytes(digest[i : i + 8], "big") for i in range(0, _HASH_SIZE, 8)]


def _words_to_hash(words: Any) -> bytes:
    if (
        not isinstance(words, list)
        or len(words) != _HASH_WORDS
        or not all(isinstance(w, int) and 0 <= w < 2**64 for w in words)
    ):
        raise DependencyInfoError("hash must be four unsigned 64-bit integers")
    return b"".join(w.to_bytes(8, "big") for w in words)


@dataclass(frozen=True)
class DependencyEntry:
    """One dependency that links were generated for.

    Attributes:
        crate_name (str): Name of the package on crates.io.
        version (Version | None): Version the links point at, if it was known.
        alias (str | None): Library name, when it differs from ``crate_name``.
    """

    crate_name: str
    version: Version | None = None
    alias: str | None = None

    @property
    def lib_name(self) -> str:
        """Return the library name (the alias, or the crate name itself)."""
        return self.alias if self.alias is not None else self.crate_name

    def to_wire(self) -> list[Any]:
        """Return the CBOR array form of this entry."""
        wire: list[Any] = [self.crate_name, str(self.version) if self.version is not None else None]
        if self.alias is not None:
            wire.append(self.alias)
        return wire

    @classmethod
    def from_wire(cls, value: Any) -> DependencyEntry:
        """Build an entry from its CBOR array form."""
        if not isinstance(value, list) or len(value) not in (2, 3):
            raise DependencyInfoError(f"malformed dependency entry: {value!r}")
        name, version, *rest = value
        if not isinstance(name, str):
            raise DependencyInfoError(f"malformed dependency name: {name!r}")
        parsed: Version | None = None
        if version is not None:
            if not isinstance(version, str):
                raise DependencyInfoError(f"malformed version of {name}: {version!r}")
            try:
                parsed = Version.parse(version)
            except ValueError as exc:
                raise DependencyInfoError(f"malformed version of {name}: {version!r}") from exc
        alias = rest[0] if rest else None
        if alias is not None and not isinstance(alias, str):
            raise DependencyInfoError(f"malformed lib name of {name}: {alias!r}")
        return cls(name, parsed, alias)


def _more_specific(new: Version | None, old: Version | None) -> bool:
    if new is None:
        return False
    if old is None:
        return True
    return new.compare(old) > 0


@dataclass
class DependencyInfo:
    """Mutable accumulator while rendering; compared against on ``--check``.

    Attributes:
        schema_version (int): Document schema version the token was written with.
        template_hash (bytes): blake3 digest of the template.
        rustdoc_hash (bytes): blake3 digest of the crate documentation.
        dependencies (dict[str, DependencyEntry]): Entries keyed by crate name.
    """

    schema_version: int
    template_hash: bytes
    rustdoc_hash: bytes
    dependencies: dict[str, DependencyEntry] = field(default_factory=lambda: {})

    @classmethod
    def new(cls, template: str, rustdoc: str) -> DependencyInfo:
        """Start a fresh snapshot for one render pass.

        Args:
            template (str): The template source.
            rustdoc (str): The raw crate documentation.

        Returns:
            DependencyInfo: An empty snapshot with the current schema version.
        """
        return cls(DOCUMENT_SCHEMA_VERSION, hash_text(template), hash_text(rustdoc))

    # --- accumulation ---

    def add_dependency(self, crate_name: str, version: Version | None, lib_name: str) -> None:
        """Record that links were generated for ``crate_name``.

        Repeated references keep the most specific version: a known version
        beats an unknown one, and a higher version beats a lower one.

        Args:
            crate_name (str): Name of the package on crates.io.
            version (Version | None): Version the links point at.
            lib_name (str): Library name used in the link URLs.
        """
        alias = lib_name if lib_name != crate_name else None
        entry = DependencyEntry(crate_name, version, alias)
        current = self.dependencies.get(crate_name)
        if current is None or _more_specific(version, current.version):
            logger.trace("depinfo: %s %s", crate_name, version)
            self.dependencies[crate_name] = entry

    def is_empty(self) -> bool:
        """Return True when no dependency has been recorded."""
        return not self.dependencies

    # --- checks ---

    def check_outdated(self) -> bool:
        """Return True when the token was written with another schema version."""
        return self.schema_version != DOCUMENT_SCHEMA_VERSION

    def check_input(self, template: str, rustdoc: str) -> bool:
        """Return True when both hashes match the current template and docs."""
        return self.template_hash == hash_text(template) and self.rustdoc_hash == hash_text(rustdoc)

    def check_dependency(
        self,
        crate_name: str,
        requirement: VersionReq | None,
        lib_name: str,
        allow_missing: bool = True,
    ) -> bool:
        """Return True when the stored entry for ``crate_name`` is still valid.

        Args:
            crate_name (str): Name of the package on crates.io.
            requirement (VersionReq | None): Current requirement from the manifest.
                ``None`` accepts any stored version.
            lib_name (str): Current library name of the dependency.
            allow_missing (bool): Result for dependencies that were never linked.

        Returns:
            bool: Whether the stored entry is compatible with the manifest.
        """
        entry = self.dependencies.get(crate_name)
        if entry is None:
            return allow_missing
        if entry.lib_name != lib_name:
            return False
        if requirement is None:
            return True
        if entry.version is None:
            return False
        return requirement.matches(entry.version)

    # --- wire format ---

    def to_wire(self) -> list[Any]:
        """Return the CBOR value of this snapshot."""
        return [
            FORMAT_VERSION,
            {
                "m": self.schema_version,
                "t": _hash_to_words(self.template_hash),
                "r": _hash_to_words(self.rustdoc_hash),
                "d": [self.dependencies[name].to_wire() for name in sorted(self.dependencies)],
            },
        ]

    def encode(self) -> str:
        """Serialize to the embeddable token (CBOR, URL-safe base64, unpadded)."""
        raw = cbor2.dumps(self.to_wire())
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    @classmethod
    def decode(cls, token: str) -> DependencyInfo:
        """Parse a token produced by `encode`.

        Args:
            token (str): The base64 token.

        Returns:
            DependencyInfo: The decoded snapshot.

        Raises:
            DependencyInfoError: When the token is not valid base64/CBOR or does
                not have the expected shape.
        """
        token = token.strip()
        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DependencyInfoError(f"invalid base64: {exc}") from exc
        try:
            value = cbor2.loads(raw)
        except (cbor2.CBORDecodeError, ValueError, EOFError) as exc:
            raise DependencyInfoError(f"invalid CBOR: {exc}") from exc
        return cls.from_wire(value)

    @classmethod
    def from_wire(cls, value: Any) -> DependencyInfo:
        """Build a snapshot from its decoded CBOR value."""
        if not isinstance(value, list) or len(value) != 2:
            raise DependencyInfoError("expected a two-element array")
        tag, body = value
        if tag != FORMAT_VERSION or isinstance(tag, bool):
            raise DependencyInfoError(f"unsupported format version {tag!r}")
        if not isinstance(body, dict):
            raise DependencyInfoError("expected a map")
        try:
            schema = body["m"]
            template_words = body["t"]
            rustdoc_words = body["r"]
            deps = body["d"]
        except KeyError as exc:
            raise DependencyInfoError(f"missing field {exc.args[0]!r}") from exc
        if not isinstance(schema, int) or isinstance(schema, bool) or not 0 <= schema < 256:
            raise DependencyInfoError(f"invalid schema version {schema!r}")
        if not isinstance(deps, list):
            raise DependencyInfoError("dependencies must be an array")

        info = cls(schema, _words_to_hash(template_words), _words_to_hash(rustdoc_words))
        for item in deps:
            entry = DependencyEntry.from_wire(item)
            info.dependencies[entry.crate_name] = entry
        return info
