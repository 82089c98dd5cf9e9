"""Static site builder: posts in, HTML pages plus an Atom feed out."""

from __future__ import annotations

import datetime as dt
import logging
import shutil
import time
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, TemplateError, select_autoescape
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from folio.config.settings import CONFIG_DIR_NAME
from folio.content.repository import LoadFailure, PostRepository
from folio.rendering.exceptions import BuildError, TemplateRenderError, UnsafeOutputDirError
from folio.rendering.links import LinkResolver, base_path_of
from folio.rendering.markdown import MarkdownRenderer
from folio.utils.paths import is_within, safe_path_join, slugify

if TYPE_CHECKING:
    from folio.config.settings import FolioConfig
    from folio.content.post import Post

logger = logging.getLogger(__name__)

ARCHIVE_PAGE = "archive/"
TAGS_PAGE = "tags/"
FEED_FILE = "feed.xml"
HIGHLIGHT_CSS = "assets/highlight.css"
EPOCH = dt.date(1970, 1, 1)


def tag_page(tag: str) -> str:
    return f"{TAGS_PAGE}{slugify(tag)}/"


def index_page(number: int) -> str:
    return "" if number == 1 else f"page/{number}/"


def page_count(post_total: int, per_page: int) -> int:
    return max(1, -(-post_total // per_page))


def page_file(page: str) -> str:
    """Output file for a normalized page path."""
    return page if page.endswith((".xml", ".css")) else f"{page}index.html"


def page_paths(posts: list[Post], config: FolioConfig) -> set[str]:
    """Every page a build of ``posts`` produces, as normalized site paths."""
    pages = {index_page(number) for number in range(1, page_count(len(posts), config.build.posts_per_page) + 1)}
    pages.update({ARCHIVE_PAGE, TAGS_PAGE, FEED_FILE, HIGHLIGHT_CSS})
    pages.update(post.url_path(config.build.permalink) for post in posts)
    pages.update(tag_page(tag) for post in posts for tag in post.tags)
    return pages


def static_files(static_dir: Path) -> set[str]:
    """Relative POSIX paths of every file under ``static_dir``."""
    if not static_dir.is_dir():
        return set()
    return {path.relative_to(static_dir).as_posix() for path in static_dir.rglob("*") if path.is_file()}


@dataclass(slots=True)
class BuildReport:
    """Summary of one ``build`` run."""

    output_dir: Path
    pages: list[str] = field(default_factory=list)
    posts: list[Post] = field(default_factory=list)
    skipped: list[LoadFailure] = field(default_factory=list)
    static_files: int = 0
    elapsed: float = 0.0

    @property
    def page_count(self) -> int:
        return len(self.pages)


class SiteBuilder:
    """Render a site root into its output directory."""

    def __init__(self, config: FolioConfig, site_root: Path) -> None:
        self.config = config
        self.site_root = site_root.resolve()
        self.repository = PostRepository(config.posts_path(self.site_root), permalink=config.build.permalink)
        self.renderer = MarkdownRenderer(config.build.markdown_extensions)
        self.base_path = base_path_of(config.site.base_url)
        self._env = self._get_template_env()

    def _get_template_env(self) -> Environment:
        """Site templates override the packaged ones by name."""
        loaders: list[Any] = []
        overrides = self.config.templates_path(self.site_root)
        if overrides.is_dir():
            loaders.append(FileSystemLoader(str(overrides)))
        loaders.append(PackageLoader("folio", "rendering/templates"))
        env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(enabled_extensions=("html", "xml", "jinja")),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.globals.update(site=self.config.site, url=self.url, absolute_url=self.absolute_url)
        env.filters["tag_url"] = lambda tag: self.url(tag_page(tag))
        return env

    def url(self, path: str) -> str:
        return f"{self.base_path}{path.lstrip('/')}"

    def absolute_url(self, path: str) -> str:
        return f"{self.config.site.base_url}{path.lstrip('/')}"

    @property
    def output_dir(self) -> Path:
        return self.config.output_path(self.site_root).resolve()

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self, *, include_drafts: bool = False, strict: bool = False) -> BuildReport:
        """Render every post, index, archive, tag page and the feed.

        Raises:
            BuildError: In strict mode, when any post fails to load, two
                posts share a URL, or a static file would replace a page
            UnsafeOutputDirError: If the output directory would clobber sources
            TemplateRenderError: If a template fails

        """
        started = time.perf_counter()
        loaded = self.repository.load_all(include_drafts=include_drafts)
        if strict and loaded.failures:
            msg = f"{len(loaded.failures)} post(s) failed to load"
            raise BuildError(msg, loaded.failures)

        posts = self._unique_posts(loaded.posts, strict=strict)
        pages = page_paths(posts, self.config)
        statics = static_files(self.config.static_path(self.site_root))
        clashes = sorted(statics & {page_file(page) for page in pages})
        if clashes:
            msg = f"static file(s) would replace generated pages: {', '.join(clashes)}"
            if strict:
                raise BuildError(msg)
            logger.warning("Not copying %s", msg)
        self._prepare_output()

        report = BuildReport(output_dir=self.output_dir, posts=posts, skipped=list(loaded.failures))
        resolver = LinkResolver(
            posts,
            pages=pages,
            static_files=statics,
            base_path=self.base_path,
            permalink=self.config.build.permalink,
        )

        for position, post in enumerate(posts):
            newer = posts[position - 1] if position > 0 else None
            older = posts[position + 1] if position + 1 < len(posts) else None
            self._render_post(post, resolver, newer=newer, older=older, report=report)

        self._render_indexes(posts, report)
        self._render_archive(posts, report)
        self._render_tags(posts, report)
        self._render_feed(posts, report)
        self._write_highlight_css(report)
        report.static_files = self._copy_static(skip=set(clashes))

        report.elapsed = time.perf_counter() - started
        logger.info(
            "Built %d page(s) from %d post(s) into %s in %.2fs",
            report.page_count,
            len(posts),
            self.output_dir,
            report.elapsed,
        )
        return report

    def _unique_posts(self, posts: list[Post], *, strict: bool) -> list[Post]:
        """Drop posts whose URL collides with an earlier (newer) post."""
        unique: list[Post] = []
        owners: dict[str, Post] = {}
        for post in posts:
            url_path = post.url_path(self.config.build.permalink)
            owner = owners.get(url_path)
            if owner is not None:
                msg = f"{post.source} and {owner.source} both publish to /{url_path}"
                if strict:
                    raise BuildError(msg)
                logger.warning("Skipping post: %s", msg)
                continue
            owners[url_path] = post
            unique.append(post)
        return unique

    def _prepare_output(self) -> None:
        output = self.output_dir
        if output == self.site_root:
            raise UnsafeOutputDirError(output, "it is the site root")
        if is_within(self.repository.posts_dir, output):
            raise UnsafeOutputDirError(output, "it contains the posts directory")
        config_dir = self.site_root / CONFIG_DIR_NAME
        sources = (
            self.config.static_path(self.site_root),
            self.config.templates_path(self.site_root),
            config_dir,
        )
        for protected in (*sources, self.config.notes_path(self.site_root)):
            if is_within(protected, output):
                raise UnsafeOutputDirError(output, f"it contains {protected.name}")
        for source in (self.repository.posts_dir, *sources):
            if is_within(output, source):
                raise UnsafeOutputDirError(output, f"it is inside {source.name}/")

        if output.exists():
            logger.debug("Cleaning %s", output)
            shutil.rmtree(output)
        output.mkdir(parents=True)

    def _write(self, page: str, template_name: str, report: BuildReport, **context: Any) -> Path:
        relative = page_file(page)
        target = safe_path_join(self.output_dir, relative)
        try:
            content = self._env.get_template(template_name).render(**context)
        except TemplateError as e:
            raise TemplateRenderError(template_name, str(e)) from e
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        report.pages.append(relative)
        return target

    def _render_post(
        self,
        post: Post,
        resolver: LinkResolver,
        *,
        newer: Post | None,
        older: Post | None,
        report: BuildReport,
    ) -> None:
        rendered = self.renderer.render(post.body, link_resolver=resolver)
        for target in rendered.unresolved:
            logger.warning("%s: link target %s does not resolve", post.filename, target)
        self._write(
            post.url_path(self.config.build.permalink),
            "post.html.jinja",
            report,
            post=post,
            summary=self._summary(post),
            content=rendered.html,
            toc=rendered.toc,
            post_url=resolver.url_for(post),
            newer=self._entry(newer),
            older=self._entry(older),
        )

    def _summary(self, post: Post) -> str:
        """Plain-text excerpt for listings, the feed and the meta description.

        Markdown in the excerpt is flattened and long excerpts are cut. An
        excerpt with no prose falls back to the first paragraph of the body.
        """
        limit = self.config.lint.max_excerpt_length
        return (
            self.renderer.derive_excerpt(post.excerpt, max_chars=limit)
            or self.renderer.derive_excerpt(post.body, max_chars=limit)
            or post.excerpt
        )

    def _entry(self, post: Post | None) -> dict[str, Any] | None:
        """Template-friendly view of a post for listings."""
        if post is None:
            return None
        path = post.url_path(self.config.build.permalink)
        return {
            "title": post.title,
            "date": post.date,
            "excerpt": post.excerpt,
            "summary": self._summary(post),
            "tags": post.tags,
            "draft": post.draft,
            "reading_minutes": post.reading_minutes,
            "path": path,
            "url": self.url(path),
            "absolute_url": self.absolute_url(path),
        }

    def _render_indexes(self, posts: list[Post], report: BuildReport) -> None:
        per_page = self.config.build.posts_per_page
        total = page_count(len(posts), per_page)
        for number in range(1, total + 1):
            chunk = posts[(number - 1) * per_page : number * per_page]
            self._write(
                index_page(number),
                "index.html.jinja",
                report,
                entries=[self._entry(post) for post in chunk],
                page_number=number,
                page_total=total,
                newer_page=self.url(index_page(number - 1)) if number > 1 else None,
                older_page=self.url(index_page(number + 1)) if number < total else None,
            )

    def _render_archive(self, posts: list[Post], report: BuildReport) -> None:
        years: dict[int, list[dict[str, Any]]] = defaultdict(list)
        for post in posts:
            years[post.year].append(self._entry(post))
        self._write(
            ARCHIVE_PAGE,
            "archive.html.jinja",
            report,
            years=sorted(years.items(), reverse=True),
        )

    def _render_tags(self, posts: list[Post], report: BuildReport) -> None:
        tagged: dict[str, list[dict[str, Any]]] = defaultdict(list)
        names: dict[str, str] = {}
        for post in posts:
            for tag in post.tags:
                key = slugify(tag)
                names.setdefault(key, tag)
                tagged[key].append(self._entry(post))

        tags = sorted(((names[key], len(entries)) for key, entries in tagged.items()), key=lambda item: item[0].casefold())
        self._write(TAGS_PAGE, "tags.html.jinja", report, tags=tags)
        for key, entries in sorted(tagged.items()):
            self._write(tag_page(names[key]), "tag.html.jinja", report, tag=names[key], entries=entries)

    def _render_feed(self, posts: list[Post], report: BuildReport) -> None:
        recent = posts[: self.config.build.feed_size]
        updated = recent[0].date if recent else EPOCH
        self._write(
            FEED_FILE,
            "feed.xml.jinja",
            report,
            entries=[self._entry(post) for post in recent],
            updated=updated,
            feed_url=self.absolute_url(FEED_FILE),
        )

    def _write_highlight_css(self, report: BuildReport) -> None:
        style = self.config.build.highlight_style
        try:
            formatter = HtmlFormatter(style=style)
        except ClassNotFound:
            logger.warning("Unknown Pygments style %r, using 'default'", style)
            formatter = HtmlFormatter(style="default")
        target = safe_path_join(self.output_dir, HIGHLIGHT_CSS)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(formatter.get_style_defs(".highlight") + "\n", encoding="utf-8")
        report.pages.append(HIGHLIGHT_CSS)

    def _copy_static(self, *, skip: set[str]) -> int:
        """Copy static files into the output, leaving generated pages in ``skip`` alone."""
        static_dir = self.config.static_path(self.site_root)
        if not static_dir.is_dir():
            return 0

        def _ignore(directory: str, names: list[str]) -> set[str]:
            base = Path(directory).relative_to(static_dir)
            return {name for name in names if (base / name).as_posix() in skip}

        shutil.copytree(static_dir, self.output_dir, ignore=_ignore, dirs_exist_ok=True)
        copied = len(static_files(static_dir) - skip)
        logger.debug("Copied %d static file(s) from %s", copied, static_dir)
        return copied


__all__ = ["BuildReport", "SiteBuilder", "page_file", "page_paths", "static_files"]
