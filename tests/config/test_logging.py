# topmark:header:start
#
#   project      : Doc2Readme
#   file         : test_logging.py
#   file_relpath : tests/config/test_logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Log level selection from the environment."""

from __future__ import annotations

import logging

import pytest

from doc2readme.config.logging import (
    LOG_LEVEL_ENV,
    TRACE_LEVEL,
    get_logger,
    resolve_env_log_level,
)
from tests.conftest import parametrize


@parametrize(
    "value, level",
    [
        ("TRACE", TRACE_LEVEL),
        ("debug", logging.DEBUG),
        (" warn ", logging.WARNING),
        ("10", 10),
        ("nonsense", None),
        ("", None),
    ],
)
def test_env_log_level(monkeypatch: pytest.MonkeyPatch, value: str, level: int | None) -> None:
    """Names and numbers are accepted; anything else is ignored."""
    monkeypatch.setenv(LOG_LEVEL_ENV, value)
    assert resolve_env_log_level() == level


def test_env_log_level_unset() -> None:
    """The autouse fixture clears the variable."""
    assert resolve_env_log_level() is None


def test_trace_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """``trace`` emits records below DEBUG."""
    logger = get_logger("doc2readme.tests")
    with caplog.at_level(TRACE_LEVEL, logger="doc2readme.tests"):
        logger.trace("lookup %s", "Vec")
    assert [r.getMessage() for r in caplog.records] == ["lookup Vec"]
    assert caplog.records[0].levelname == "TRACE"
