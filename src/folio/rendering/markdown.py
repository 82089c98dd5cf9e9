"""Markdown to HTML conversion using Python-Markdown and pymdown-extensions."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markupsafe import Markup

from folio.config.settings import DEFAULT_MARKDOWN_EXTENSIONS
from folio.utils.paths import slugify_lower

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from folio.rendering.links import LinkResolver

logger = logging.getLogger(__name__)

EXCERPT_MAX_CHARS = 200
ELLIPSIS = "…"

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_SKIP_BLOCK_RE = re.compile(r"^\s*(#|<|>|\||!\[|[-*_]{3,}\s*$)")

_EXTENSION_CONFIGS: dict[str, dict[str, Any]] = {
    "pymdownx.highlight": {"use_pygments": True, "css_class": "highlight", "guess_lang": False},
    "toc": {"slugify": slugify_lower, "permalink": False},
}


@dataclass(slots=True)
class RenderedBody:
    """HTML for a post body plus what the renderer learned on the way."""

    html: Markup
    toc: Markup
    links: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


class _LinkRewriter(Treeprocessor):
    """Point ``href``/``src`` attributes at their published URLs."""

    def __init__(self, md: markdown.Markdown, renderer: MarkdownRenderer) -> None:
        super().__init__(md)
        self.renderer = renderer

    def run(self, root: Element) -> None:
        resolver = self.renderer.link_resolver
        for element in root.iter():
            attribute = {"a": "href", "img": "src"}.get(element.tag)
            if attribute is None:
                continue
            target = element.get(attribute)
            if not target:
                continue
            self.renderer.seen_links.append(target)
            if resolver is None or not resolver.is_internal(target):
                continue
            resolved = resolver.resolve(target)
            if resolved is None:
                logger.debug("Unresolved link %s", target)
                self.renderer.unresolved_links.append(target)
                continue
            element.set(attribute, resolved)


class _LinkRewriteExtension(Extension):
    def __init__(self, renderer: MarkdownRenderer) -> None:
        super().__init__()
        self.renderer = renderer

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        # Below "inline" (20) so links exist; above "prettify" (10).
        md.treeprocessors.register(_LinkRewriter(md, self.renderer), "folio_links", 15)


class MarkdownRenderer:
    """Render post bodies to HTML.

    One renderer is reused for every post; ``render`` resets the underlying
    ``markdown.Markdown`` instance between documents.
    """

    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_MARKDOWN_EXTENSIONS,
        extension_configs: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self.link_resolver: LinkResolver | None = None
        self.seen_links: list[str] = []
        self.unresolved_links: list[str] = []

        configs = {name: dict(options) for name, options in _EXTENSION_CONFIGS.items() if name in extensions}
        for name, options in (extension_configs or {}).items():
            configs.setdefault(name, {}).update(options)

        self._md = markdown.Markdown(
            extensions=[*extensions, _LinkRewriteExtension(self)],
            extension_configs=configs,
            output_format="html",
        )
        self._plain = markdown.Markdown(output_format="html")

    def render(self, body: str, *, link_resolver: LinkResolver | None = None) -> RenderedBody:
        """Convert ``body`` to HTML, rewriting internal links when a resolver is given."""
        self.link_resolver = link_resolver
        self.seen_links = []
        self.unresolved_links = []
        try:
            html = self._md.reset().convert(body)
            toc = getattr(self._md, "toc", "")
        finally:
            self.link_resolver = None
        return RenderedBody(
            html=Markup(html),
            toc=Markup(toc),
            links=list(self.seen_links),
            unresolved=list(self.unresolved_links),
        )

    def plain_text(self, body: str) -> str:
        """Return ``body`` as plain text with code blocks dropped."""
        html = self._plain.reset().convert(_strip_fenced_code(body))
        return Markup(html).striptags()

    def derive_excerpt(self, body: str, max_chars: int = EXCERPT_MAX_CHARS) -> str:
        """Return the first prose paragraph as plain text, cut at a word boundary."""
        for block in _paragraphs(_strip_fenced_code(body)):
            if _SKIP_BLOCK_RE.match(block):
                continue
            text = self.plain_text(block)
            if text:
                return truncate_words(text, max_chars)
        return ""


def truncate_words(text: str, max_chars: int) -> str:
    """Shorten ``text`` to at most ``max_chars`` characters, ellipsis included."""
    if len(text) <= max_chars:
        return text
    cut = text[: max_chars - len(ELLIPSIS) + 1]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    else:
        cut = cut[:-1]
    return f"{cut.rstrip(' ,;:.')}{ELLIPSIS}"


def _strip_fenced_code(body: str) -> str:
    kept: list[str] = []
    fence: str | None = None
    for line in body.splitlines():
        match = _FENCE_RE.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker[0] * len(marker)
                continue
            if marker.startswith(fence):
                fence = None
                continue
        if fence is None:
            kept.append(line)
    return "\n".join(kept)


def _paragraphs(text: str) -> list[str]:
    return [block.strip() for block in re.split(r"\n\s*\n", text) if block.strip()]


__all__ = ["MarkdownRenderer", "RenderedBody", "truncate_words"]
