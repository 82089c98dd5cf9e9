"""Rendering: Markdown to HTML, link resolution and the static site builder."""

from folio.rendering.exceptions import BuildError, RenderingError, TemplateRenderError, UnsafeOutputDirError
from folio.rendering.links import Link, LinkResolver, extract_links
from folio.rendering.markdown import MarkdownRenderer, RenderedBody
from folio.rendering.site import BuildReport, SiteBuilder, page_paths

__all__ = [
    "BuildError",
    "BuildReport",
    "Link",
    "LinkResolver",
    "MarkdownRenderer",
    "RenderedBody",
    "RenderingError",
    "SiteBuilder",
    "TemplateRenderError",
    "UnsafeOutputDirError",
    "extract_links",
    "page_paths",
]
