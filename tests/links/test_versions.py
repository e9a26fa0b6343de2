# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_versions.py
#   file_relpath : tests/links/test_versions.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Cargo version requirements: parsing and matching."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st
from semver import Version

from doc2readme.links.versions import Op, VersionReq, VersionReqError, parse_version
from tests.conftest import mark_property, parametrize


@parametrize(
    "req, version, expected",
    [
        # bare versions are caret requirements
        ("1.2.3", "1.2.3", True),
        ("1.2.3", "1.9.0", True),
        ("1.2.3", "2.0.0", False),
        ("1.2.3", "1.2.2", False),
        ("0.2.3", "0.2.9", True),
        ("0.2.3", "0.3.0", False),
        ("0.0.3", "0.0.3", True),
        ("0.0.3", "0.0.4", False),
        ("^0", "0.9.0", True),
        ("^1.2", "1.5.0", True),
        ("^0.1", "0.2.0", False),
        # tilde
        ("~1.2.3", "1.2.9", True),
        ("~1.2.3", "1.3.0", False),
        ("~1", "1.9.0", True),
        # exact
        ("=1.2.3", "1.2.3", True),
        ("=1.2.3", "1.2.4", False),
        ("=1.2", "1.2.7", True),
        # comparisons
        (">1.2.3", "1.2.4", True),
        (">1.2.3", "1.2.3", False),
        (">=1.2", "1.2.0", True),
        ("<2", "1.99.0", True),
        ("<2", "2.0.0", False),
        ("<=1.2.3", "1.2.3", True),
        (">=1.2, <1.5", "1.4.9", True),
        (">=1.2, <1.5", "1.5.0", False),
        # wildcards
        ("*", "7.0.0", True),
        ("1.*", "1.8.0", True),
        ("1.*", "2.0.0", False),
        ("1.2.x", "1.2.5", True),
        ("1.2.x", "1.3.0", False),
    ],
)
def test_matches(req: str, version: str, expected: bool) -> None:
    """Requirements match the way cargo reads them."""
    assert VersionReq.parse(req).matches(Version.parse(version)) is expected


def test_prerelease_needs_explicit_opt_in() -> None:
    """A plain requirement never selects a pre-release."""
    beta = Version.parse("1.3.0-beta.1")
    assert not VersionReq.parse("^1.0").matches(beta)
    assert VersionReq.parse(">=1.3.0-beta.0").matches(beta)
    assert not VersionReq.parse(">=1.2.0-beta.0").matches(beta)


def test_default_operator_is_caret() -> None:
    """An operator-less comparator is stored as caret."""
    req = VersionReq.parse("1.2")
    assert req.comparators[0].op is Op.CARET
    assert str(req) == "^1.2"


def test_str_round_trips_common_forms() -> None:
    """Requirements print in their canonical form."""
    assert str(VersionReq.parse("=1.2.3")) == "=1.2.3"
    assert str(VersionReq.parse(">= 1.2, < 2")) == ">=1.2, <2"
    assert str(VersionReq.parse("1.*")) == "1.*"
    assert str(VersionReq.star()) == "*"


@parametrize("text", ["", "abc", "1.*.3", ">1.*", "1.2-beta", "1..2", "^"])
def test_invalid_requirements(text: str) -> None:
    """Malformed requirements raise `VersionReqError`."""
    with pytest.raises(VersionReqError):
        VersionReq.parse(text)


def test_parse_version() -> None:
    """Full versions parse; partial ones do not."""
    assert parse_version(" 1.2.3-alpha.1 ") == Version(1, 2, 3, "alpha.1")
    with pytest.raises(VersionReqError):
        parse_version("1.2")


_parts = st.integers(min_value=0, max_value=30)


@mark_property
@given(major=_parts, minor=_parts, patch=_parts, bump_minor=_parts, bump_patch=_parts)
def test_caret_accepts_newer_compatible_versions(
    major: int, minor: int, patch: int, bump_minor: int, bump_patch: int
) -> None:
    """Once a version matches ``^v``, newer versions of the same series match too."""
    req = VersionReq.parse(f"{major}.{minor}.{patch}")
    base = Version(major, minor, patch)
    assert req.matches(base)

    if major > 0:
        newer = Version(major, minor + bump_minor, patch + bump_patch)
    elif minor > 0:
        newer = Version(0, minor, patch + bump_patch)
    else:
        newer = base
    assert req.matches(newer)
    assert not req.matches(Version(major + 1, 0, 0))
