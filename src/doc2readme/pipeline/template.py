# topmark:header:start
#
#   project      : Doc2Readme
#   file         : template.py
#   file_relpath : src/doc2readme/pipeline/template.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Readme templates (Jinja2).

Templates see these variables:

* ``crate``, ``crate_version``, ``target`` (``lib`` or ``bin``);
* ``repository`` and ``repository_host`` (``github.com``, ...), ``license``,
  ``rust_version``, each possibly ``None``;
* ``readme``: the rewritten crate docs;
* ``links``: the link trailer (reference definitions), possibly empty.

Undefined variables are errors (`jinja2.StrictUndefined`), and trailing newlines
are kept so the output ends exactly like the template.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from importlib import resources
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import jinja2

from doc2readme.config.logging import get_logger
from doc2readme.constants import DEFAULT_TEMPLATE_NAME, DEFAULT_TEMPLATE_PACKAGE

if TYPE_CHECKING:
    from pathlib import Path

    from doc2readme.config.logging import Doc2ReadmeLogger

logger: Doc2ReadmeLogger = get_logger(__name__)


class TemplateError(Exception):
    """A template could not be read, compiled or rendered."""


@dataclass(frozen=True)
class TemplateContext:
    """Variables passed to the readme template."""

    crate: str
    crate_version: str
    target: str
    repository: str | None
    repository_host: str | None
    license: str | None
    rust_version: str | None
    readme: str
    links: str

    def as_dict(self) -> dict[str, Any]:
        """Return the context as template variables."""
        return asdict(self)


def repository_host(url: str | None) -> str | None:
    """Return the host name of a repository URL (``github.com``), if any."""
    if not url:
        return None
    host = urlparse(url).hostname
    return host.lower() if host else None


def default_template() -> str:
    """Return the source of the bundled default template."""
    return (
        resources.files(DEFAULT_TEMPLATE_PACKAGE)
        .joinpath(DEFAULT_TEMPLATE_NAME)
        .read_text(encoding="utf-8")
    )


def load_template(path: Path | None) -> str:
    """Return the template at ``path``, or the default when it does not exist.

    Raises:
        TemplateError: When ``path`` exists but cannot be read.
    """
    if path is None or not path.exists():
        logger.debug("Using the default template")
        return default_template()
    logger.info("Reading template %s", path)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateError(f"Failed to read template {path}: {exc}") from exc


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,  # noqa: S701 - the output is markdown
    )


def render_template(source: str, context: TemplateContext) -> str:
    """Render template ``source`` with ``context``.

    Raises:
        TemplateError: On syntax errors and undefined variables.
    """
    try:
        template = _environment().from_string(source)
        return template.render(context.as_dict())
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(f"Template syntax error on line {exc.lineno}: {exc.message}") from exc
    except jinja2.TemplateError as exc:
        raise TemplateError(f"Failed to render template: {exc}") from exc
