# topmark:header:start
#
#   project      : Doc2Readme
#   file         : versions.py
#   file_relpath : src/doc2readme/links/versions.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Cargo version requirements on top of `semver.Version`.

Cargo reads a bare ``1.2.3`` as ``^1.2.3``; the supported operators are ``^``,
``~``, ``=``, ``>``, ``>=``, ``<``, ``<=`` and the wildcards ``*``, ``1.*`` and
``1.2.x``. Comparators are joined with commas and all of them must match.

Pre-release versions are special: ``1.3.0-beta.1`` only matches a requirement
that has a comparator on ``1.3.0`` with a pre-release tag of its own, so a
plain ``^1.0`` never pulls in betas.

Reference: https://doc.rust-lang.org/cargo/reference/specifying-dependencies.html
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

from semver import Version

__all__ = ["Op", "Comparator", "VersionReq", "VersionReqError", "parse_version"]


class VersionReqError(ValueError):
    """Raised when a version requirement cannot be parsed."""


class Op(str, Enum):
    """Comparator operators."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"


_COMPARATOR_RE: Final[re.Pattern[str]] = re.compile(
    r"""
    ^\s*
    (?P<op>>=|<=|>|<|=|~|\^)?
    \s*
    (?P<major>\d+|[*xX])
    (?:\.(?P<minor>\d+|[*xX]))?
    (?:\.(?P<patch>\d+|[*xX]))?
    (?:-(?P<pre>[0-9A-Za-z.-]+))?
    (?:\+[0-9A-Za-z.-]+)?
    \s*$
    """,
    re.VERBOSE,
)

_WILDCARDS: Final[frozenset[str]] = frozenset({"*", "x", "X"})


def parse_version(text: str) -> Version:
    """Parse a full semantic version (``1.2.3``, ``0.1.0-alpha.1``).

    Raises:
        VersionReqError: When ``text`` is not a valid semantic version.
    """
    try:
        return Version.parse(text.strip())
    except (ValueError, TypeError) as exc:
        raise VersionReqError(f"invalid version {text!r}: {exc}") from exc


@dataclass(frozen=True)
class Comparator:
    """A single ``<op><major>[.<minor>[.<patch>]][-<pre>]`` term."""

    op: Op
    major: int | None
    minor: int | None = None
    patch: int | None = None
    pre: str | None = None

    @classmethod
    def parse(cls, text: str) -> Comparator:
        """Parse one comparator; raise `VersionReqError` on malformed input."""
        m = _COMPARATOR_RE.match(text)
        if not m:
            raise VersionReqError(f"invalid version requirement {text!r}")
        op_text = m.group("op")
        parts = [m.group("major"), m.group("minor"), m.group("patch")]

        numbers: list[int | None] = []
        wildcard = False
        for part in parts:
            if part is None or part in _WILDCARDS:
                if part is not None:
                    wildcard = True
                numbers.append(None)
                continue
            if wildcard or (numbers and numbers[-1] is None):
                # `1.*.3` and `1..3` are not valid
                raise VersionReqError(f"invalid version requirement {text!r}")
            numbers.append(int(part))
        major, minor, patch = numbers
        pre = m.group("pre")

        if wildcard:
            if op_text not in (None, "="):
                raise VersionReqError(f"wildcard with operator in {text!r}")
            if pre is not None:
                raise VersionReqError(f"wildcard with pre-release in {text!r}")
            return cls(Op.WILDCARD, major, minor, None)
        if pre is not None and (minor is None or patch is None):
            raise VersionReqError(f"pre-release needs a full version in {text!r}")

        op = Op(op_text) if op_text else Op.CARET
        return cls(op, major, minor, patch, pre)

    def _lower(self) -> Version:
        return Version(self.major or 0, self.minor or 0, self.patch or 0, self.pre)

    def matches(self, version: Version) -> bool:  # noqa: PLR0911
        """Return True when ``version`` satisfies this comparator.

        The pre-release rule is applied by `VersionReq`, not here.
        """
        if self.op is Op.WILDCARD:
            return self._matches_wildcard(version)
        if self.op is Op.EXACT:
            return self._matches_exact(version)
        if self.op is Op.GREATER:
            return self._matches_greater(version)
        if self.op is Op.GREATER_EQ:
            return self._matches_exact(version) or self._matches_greater(version)
        if self.op is Op.LESS:
            return self._matches_less(version)
        if self.op is Op.LESS_EQ:
            return self._matches_exact(version) or self._matches_less(version)
        if self.op is Op.TILDE:
            return self._matches_tilde(version)
        return self._matches_caret(version)

    def _matches_wildcard(self, version: Version) -> bool:
        if self.major is None:
            return True
        if version.major != self.major:
            return False
        return self.minor is None or version.minor == self.minor

    def _matches_exact(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is not None and version.minor != self.minor:
            return False
        if self.patch is not None and version.patch != self.patch:
            return False
        return self.patch is None or version.prerelease == self.pre

    def _matches_greater(self, version: Version) -> bool:
        assert self.major is not None
        if version.major != self.major:
            return version.major > self.major
        if self.minor is None:
            return False
        if version.minor != self.minor:
            return version.minor > self.minor
        if self.patch is None:
            return False
        if version.patch != self.patch:
            return version.patch > self.patch
        return version.compare(self._lower()) > 0

    def _matches_less(self, version: Version) -> bool:
        assert self.major is not None
        if version.major != self.major:
            return version.major < self.major
        if self.minor is None:
            return False
        if version.minor != self.minor:
            return version.minor < self.minor
        if self.patch is None:
            return False
        if version.patch != self.patch:
            return version.patch < self.patch
        return version.compare(self._lower()) < 0

    def _matches_tilde(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is not None and version.minor != self.minor:
            return False
        if self.patch is not None and version.patch != self.patch:
            return version.patch > self.patch
        return self.patch is None or version.compare(self._lower()) >= 0

    def _matches_caret(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return version.minor >= self.minor
            return version.minor == self.minor
        if self.major > 0:
            if version.minor != self.minor:
                return version.minor > self.minor
            if version.patch != self.patch:
                return version.patch > self.patch
        elif self.minor > 0:
            if version.minor != self.minor:
                return False
            if version.patch != self.patch:
                return version.patch > self.patch
        elif version.minor != self.minor or version.patch != self.patch:
            return False
        return version.compare(self._lower()) >= 0

    def __str__(self) -> str:
        if self.op is Op.WILDCARD:
            parts = [str(p) for p in (self.major, self.minor) if p is not None]
            return ".".join([*parts, "*"])
        text = ".".join(str(p) for p in (self.major, self.minor, self.patch) if p is not None)
        if self.pre:
            text = f"{text}-{self.pre}"
        return f"{self.op.value}{text}"


@dataclass(frozen=True)
class VersionReq:
    """A parsed Cargo version requirement (``^1.2, <1.5``)."""

    comparators: tuple[Comparator, ...]

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        """Parse a requirement string.

        Args:
            text (str): The requirement as written in ``Cargo.toml``.

        Returns:
            VersionReq: The parsed requirement.

        Raises:
            VersionReqError: When the requirement is malformed.
        """
        text = text.strip()
        if not text:
            raise VersionReqError("empty version requirement")
        comparators = tuple(Comparator.parse(part) for part in text.split(","))
        return cls(comparators)

    @classmethod
    def star(cls) -> VersionReq:
        """Return the requirement that matches every release version (``*``)."""
        return cls((Comparator(Op.WILDCARD, None),))

    def matches(self, version: Version) -> bool:
        """Return True when ``version`` satisfies every comparator."""
        if not all(c.matches(version) for c in self.comparators):
            return False
        if not version.prerelease:
            return True
        # a pre-release only matches when some comparator opts into it explicitly
        return any(
            c.pre is not None
            and (c.major, c.minor, c.patch) == (version.major, version.minor, version.patch)
            for c in self.comparators
        )

    def __str__(self) -> str:
        return ", ".join(str(c) for c in self.comparators)
