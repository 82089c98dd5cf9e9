"""Markdown link extraction and resolution against the generated site."""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlsplit

from folio.config.settings import DEFAULT_PERMALINK
from folio.content.post import Post, split_post_filename

logger = logging.getLogger(__name__)

_LINK_RE = re.compile(
    r"(?P<image>!?)\[(?P<text>[^\]]*)\]\(\s*<?(?P<target>[^)\s>]*)>?(?:\s+[\"'(][^)]*[\"')])?\s*\)"
)
_CODE_SPAN_RE = re.compile(r"(`+)(?:(?!\1).)+?\1")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


@dataclass(frozen=True, slots=True)
class Link:
    """An inline Markdown link or image found in a post body."""

    target: str
    text: str
    line: int
    is_image: bool = False


def extract_links(body: str, *, line_offset: int = 0) -> list[Link]:
    """Return inline links and images outside code blocks and code spans.

    ``line`` is 1-based and shifted by ``line_offset``.
    """
    links: list[Link] = []
    fence: str | None = None
    for number, line in enumerate(body.splitlines(), start=1):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker[0] * len(marker)
            elif marker.startswith(fence) and not line.strip()[len(marker) :].strip():
                fence = None
            continue
        if fence is not None:
            continue
        stripped = _CODE_SPAN_RE.sub(lambda match: " " * len(match.group(0)), line)
        links.extend(
            Link(
                target=match.group("target"),
                text=match.group("text"),
                line=number + line_offset,
                is_image=bool(match.group("image")),
            )
            for match in _LINK_RE.finditer(stripped)
        )
    return links


def base_path_of(base_url: str) -> str:
    """URL path the site is served under, always ending with a slash."""
    path = urlsplit(base_url).path or "/"
    return path if path.endswith("/") else f"{path}/"


def is_external(target: str) -> bool:
    return bool(_SCHEME_RE.match(target)) or target.startswith("//")


def normalize_page(path: str) -> str:
    """Normalize a site-relative page path: ``a/index.html`` and ``a`` become ``a/``."""
    path = path.lstrip("/")
    if path.endswith("index.html"):
        path = path[: -len("index.html")]
    if path and not path.endswith("/") and "." not in posixpath.basename(path):
        path = f"{path}/"
    return path


class LinkResolver:
    """Map link targets written in posts to URLs on the generated site."""

    def __init__(
        self,
        posts: Iterable[Post],
        *,
        pages: Iterable[str] = (),
        static_files: Iterable[str] = (),
        base_path: str = "/",
        permalink: str = DEFAULT_PERMALINK,
    ) -> None:
        self.base_path = base_path if base_path.endswith("/") else f"{base_path}/"
        self.permalink = permalink
        self._by_filename: dict[str, Post] = {}
        self._by_slug: dict[str, Post] = {}
        for post in posts:
            self._by_filename.setdefault(post.filename, post)
            if post.source is not None:
                self._by_filename.setdefault(post.source.name, post)
            self._by_slug.setdefault(post.slug, post)
        self.pages = {normalize_page(page) for page in pages}
        self.pages.update(normalize_page(post.url_path(permalink)) for post in self._by_slug.values())
        self.static_files = {path.lstrip("/") for path in static_files}

    def url_for(self, post: Post) -> str:
        return f"{self.base_path}{post.url_path(self.permalink)}"

    def find_post(self, target: str) -> Post | None:
        """Return the post a ``*.md`` target points at, by filename or slug."""
        name = posixpath.basename(urlsplit(target).path)
        if name in self._by_filename:
            return self._by_filename[name]
        _, slug = split_post_filename(name)
        return self._by_slug.get(slug)

    def is_internal(self, target: str) -> bool:
        return bool(target) and not target.startswith("#") and not is_external(target)

    def resolve(self, target: str) -> str | None:
        """Return the URL for ``target``, or ``None`` if it points nowhere.

        External URLs and bare anchors are returned unchanged.
        """
        if not target:
            return None
        if not self.is_internal(target):
            return target

        parts = urlsplit(target)
        path = parts.path
        suffix = f"#{parts.fragment}" if parts.fragment else ""
        if parts.query:
            suffix = f"?{parts.query}{suffix}"

        if path.endswith(".md"):
            post = self.find_post(path)
            if post is None:
                return None
            return f"{self.url_for(post)}{suffix}"

        if path.startswith("/"):
            if path.startswith(self.base_path):
                relative = path[len(self.base_path) :]
                published = target
            else:
                # Site-absolute without the base path: publish under it.
                relative = path.lstrip("/")
                published = f"{self.base_path}{relative}{suffix}"
            if normalize_page(relative) in self.pages or relative in self.static_files:
                return published
            return None

        relative = posixpath.normpath(path)
        if relative.startswith("../") or relative == "..":
            return None
        if relative in self.static_files:
            return f"{self.base_path}{relative}{suffix}"
        if normalize_page(relative) in self.pages:
            return f"{self.base_path}{normalize_page(relative)}{suffix}"
        return None


__all__ = ["Link", "LinkResolver", "base_path_of", "extract_links", "is_external", "normalize_page"]
