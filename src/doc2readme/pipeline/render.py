# topmark:header:start
#
#   project      : Doc2Readme
#   file         : render.py
#   file_relpath : src/doc2readme/pipeline/render.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Render a readme from an `InputFile` and a template.

The rewritten crate docs reference their links through ``__linkN`` labels. The
link trailer defines those labels, preceded by the dependency-info line::

     [__doc2readme_dependencies_info]: <token>
     [__link0]: https://docs.rs/...

Both the body and the trailer are handed to the template, which decides where
they go.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from doc2readme.config.logging import get_logger
from doc2readme.constants import DEPINFO_MARKER
from doc2readme.links.builder import LinkBuilder
from doc2readme.links.depinfo import DependencyInfo
from doc2readme.markdown.rewriter import MarkdownRewriter
from doc2readme.pipeline.template import TemplateContext, render_template, repository_host

if TYPE_CHECKING:
    from doc2readme.config.logging import Doc2ReadmeLogger
    from doc2readme.diagnostic.model import DiagnosticLog
    from doc2readme.input.model import InputFile

logger: Doc2ReadmeLogger = get_logger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one render pass.

    Attributes:
        text (str): The rendered readme.
        depinfo (DependencyInfo): The snapshot embedded in the trailer.
        links (dict[str, str]): Placeholder label → final URL.
    """

    text: str
    depinfo: DependencyInfo
    links: dict[str, str] = field(default_factory=lambda: {})


def resolve_links(
    input_file: InputFile,
    raw_links: dict[str, str],
    depinfo: DependencyInfo,
    diagnostics: DiagnosticLog | None = None,
) -> dict[str, str]:
    """Turn the raw destinations collected by the rewriter into URLs.

    Every crate a link points into is recorded in ``depinfo``.
    """
    builder = LinkBuilder(
        input_file.crate_name,
        input_file.crate_version,
        input_file.scope,
        input_file.dependencies,
        depinfo,
        diagnostics,
    )
    return {label: builder.resolve_reference(raw) for label, raw in raw_links.items()}


def format_trailer(depinfo: DependencyInfo, links: dict[str, str]) -> str:
    """Return the link trailer: the dependency-info line, then one line per link."""
    lines = [f"{DEPINFO_MARKER}{depinfo.encode()}"]
    lines.extend(f" [{label}]: {url}" for label, url in links.items())
    return "\n".join(lines)


def render_readme(
    input_file: InputFile,
    template: str,
    diagnostics: DiagnosticLog | None = None,
) -> RenderResult:
    """Render the readme of ``input_file`` with template source ``template``.

    Args:
        input_file (InputFile): The collected input.
        template (str): Template source text.
        diagnostics (DiagnosticLog | None): Collects link resolution warnings.

    Returns:
        RenderResult: The readme text and the dependency snapshot it embeds.

    Raises:
        TemplateError: When the template cannot be rendered.
    """
    rewritten = MarkdownRewriter().rewrite(input_file.rustdoc)
    depinfo = DependencyInfo.new(template, input_file.rustdoc)
    links = resolve_links(input_file, rewritten.links, depinfo, diagnostics)
    context = TemplateContext(
        crate=input_file.crate_name,
        crate_version=str(input_file.crate_version),
        target=input_file.target_type.value,
        repository=input_file.repository,
        repository_host=repository_host(input_file.repository),
        license=input_file.license,
        rust_version=input_file.rust_version,
        readme=rewritten.body.rstrip("\n"),
        links=format_trailer(depinfo, links),
    )
    text = render_template(template, context)
    logger.debug("Rendered %d characters, %d links", len(text), len(links))
    return RenderResult(text, depinfo, links)
