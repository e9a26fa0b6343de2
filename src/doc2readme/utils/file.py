# topmark:header:start
#
#   project      : Doc2Readme
#   file         : file.py
#   file_relpath : src/doc2readme/utils/file.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""File helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from doc2readme.config.logging import get_logger

logger = get_logger(__name__)


def write_text_atomic(path: Path, text: str) -> Path:
    """Write ``text`` to ``path`` through a temporary file in the same directory.

    A reader never sees a partially written file; on failure the previous
    content stays in place.

    Raises:
        OSError: When the temporary file cannot be written or moved into place.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=str(path.parent),
        prefix=f".{path.name}.",
        delete=False,
    ) as handle:
        temp_name = handle.name
        try:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        except OSError:
            handle.close()
            Path(temp_name).unlink(missing_ok=True)
            raise
    try:
        Path(temp_name).replace(path)
    except OSError:
        Path(temp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d characters to %s", len(text), path)
    return path
