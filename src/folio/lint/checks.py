"""Content-integrity checks for a site's posts.

Codes:
    FM001  front matter missing or unparsable               (error)
    FM002  required field missing or malformed              (error)
    FM003  filename is not YYYY-MM-DD-slug.md               (warning)
    FM004  filename date differs from front-matter date     (warning)
    FM005  unknown front-matter key                         (warning)
    DUP001 slug used by more than one post                  (error)
    DUP002 date shared by more than one post                (warning)
    LNK001 internal link or image does not resolve          (error)
    MD001  fenced code block is never closed                (error)
    MD002  excerpt longer than lint.max_excerpt_length      (warning)
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from folio.content.exceptions import FrontmatterError, PostValidationError
from folio.content.frontmatter import parse_frontmatter_strict
from folio.content.post import KNOWN_KEYS, Post, split_post_filename
from folio.content.repository import PostRepository
from folio.lint.report import Issue, LintReport, Severity
from folio.rendering.links import Link, LinkResolver, base_path_of, extract_links
from folio.rendering.site import page_paths, static_files

if TYPE_CHECKING:
    from pathlib import Path

    from folio.config.settings import FolioConfig

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


@dataclass(slots=True)
class _Checked:
    """State gathered for one file during the per-file pass."""

    path: Path
    display: Path
    post: Post | None = None
    links: list[Link] = field(default_factory=list)


class SiteLinter:
    """Run every check over the posts of one site."""

    def __init__(self, config: FolioConfig, site_root: Path) -> None:
        self.config = config
        self.site_root = site_root.resolve()
        self.repository = PostRepository(config.posts_path(self.site_root), permalink=config.build.permalink)
        self.issues: list[Issue] = []

    def _display(self, path: Path) -> Path:
        try:
            return path.resolve().relative_to(self.site_root)
        except ValueError:
            return path

    def _add(self, code: str, severity: Severity, path: Path, message: str, line: int | None = None) -> None:
        self.issues.append(Issue(code=code, severity=severity, path=path, message=message, line=line))

    def run(self) -> LintReport:
        self.issues = []
        checked = [self._check_file(path) for path in self.repository.paths()]
        loaded = [(item, item.post) for item in checked if item.post is not None]

        self._check_duplicates(loaded)
        self._check_links(checked, [post for _, post in loaded])

        report = LintReport(issues=self.issues, files_checked=len(checked))
        logger.debug("Checked %d file(s): %d issue(s)", report.files_checked, len(report.issues))
        return report

    # ------------------------------------------------------------------
    # Per-file checks
    # ------------------------------------------------------------------

    def _check_file(self, path: Path) -> _Checked:
        display = self._display(path)
        item = _Checked(path=path, display=display)
        self._check_filename(path, display)

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._add("FM001", Severity.ERROR, display, f"cannot read file: {exc}")
            return item

        try:
            metadata, body = parse_frontmatter_strict(text, display)
        except FrontmatterError as exc:
            self._add("FM001", Severity.ERROR, display, exc.reason, exc.line)
            return item

        body_offset = text[: len(text) - len(body)].count("\n")
        self._check_fences(body, display, body_offset)
        item.links = extract_links(body, line_offset=body_offset)

        allowed = KNOWN_KEYS | set(self.config.lint.allowed_keys)
        for key in metadata:
            if key not in allowed:
                self._add("FM005", Severity.WARNING, display, f"unknown front-matter key '{key}'", _key_line(text, key))

        try:
            post = Post.from_metadata(metadata, body, source=path)
        except PostValidationError as exc:
            for field_name, message in exc.errors:
                line = _key_line(text, field_name)
                self._add("FM002", Severity.ERROR, display, f"{field_name}: {message}", line)
            return item

        item.post = post
        self._check_filename_date(post, display)
        limit = self.config.lint.max_excerpt_length
        if len(post.excerpt) > limit:
            self._add(
                "MD002",
                Severity.WARNING,
                display,
                f"excerpt is {len(post.excerpt)} characters long (limit {limit})",
                _key_line(text, "excerpt"),
            )
        return item

    def _check_filename(self, path: Path, display: Path) -> None:
        file_date, _ = split_post_filename(path.name)
        if file_date is None:
            self._add("FM003", Severity.WARNING, display, "filename should look like YYYY-MM-DD-slug.md")

    def _check_filename_date(self, post: Post, display: Path) -> None:
        if post.source is None:
            return
        file_date, _ = split_post_filename(post.source.name)
        if file_date is not None and file_date != post.date:
            self._add(
                "FM004",
                Severity.WARNING,
                display,
                f"filename date {file_date.isoformat()} differs from front-matter date {post.date.isoformat()}",
            )

    def _check_fences(self, body: str, display: Path, offset: int) -> None:
        fence: str | None = None
        opened_at = 0
        for number, line in enumerate(body.splitlines(), start=1):
            match = _FENCE_RE.match(line)
            if not match:
                continue
            marker = match.group(1)
            if fence is None:
                fence = marker[0] * len(marker)
                opened_at = number
            elif marker.startswith(fence) and not line.strip()[len(marker) :].strip():
                fence = None
        if fence is not None:
            self._add("MD001", Severity.ERROR, display, f"code block opened with {fence} is never closed", opened_at + offset)

    # ------------------------------------------------------------------
    # Cross-file checks
    # ------------------------------------------------------------------

    def _check_duplicates(self, loaded: list[tuple[_Checked, Post]]) -> None:
        by_slug: dict[str, list[_Checked]] = defaultdict(list)
        by_date: dict[str, list[_Checked]] = defaultdict(list)
        for item, post in loaded:
            by_slug[post.slug].append(item)
            by_date[post.date.isoformat()].append(item)

        for slug, items in by_slug.items():
            if len(items) < 2:  # noqa: PLR2004
                continue
            for item in items:
                others = ", ".join(other.display.as_posix() for other in items if other is not item)
                self._add("DUP001", Severity.ERROR, item.display, f"slug '{slug}' is also used by {others}")

        if self.config.lint.allow_same_day:
            return
        for day, items in by_date.items():
            if len(items) < 2:  # noqa: PLR2004
                continue
            for item in items:
                others = ", ".join(other.display.as_posix() for other in items if other is not item)
                self._add("DUP002", Severity.WARNING, item.display, f"date {day} is also used by {others}")

    def _check_links(self, checked: list[_Checked], posts: list[Post]) -> None:
        resolver = LinkResolver(
            posts,
            pages=page_paths(posts, self.config),
            static_files=static_files(self.config.static_path(self.site_root)),
            base_path=base_path_of(self.config.site.base_url),
            permalink=self.config.build.permalink,
        )
        for item in checked:
            for link in item.links:
                if not resolver.is_internal(link.target):
                    continue
                if resolver.resolve(link.target) is None:
                    kind = "image" if link.is_image else "link"
                    self._add("LNK001", Severity.ERROR, item.display, f"{kind} target '{link.target}' does not resolve", link.line)


def _key_line(text: str, key: str) -> int | None:
    """Line of ``key:`` inside the front-matter block, if present."""
    pattern = re.compile(rf"^{re.escape(key)}\s*:")
    for number, line in enumerate(text.splitlines()[1:], start=2):
        if line.rstrip() == "---":
            return None
        if pattern.match(line):
            return number
    return None


def lint_site(config: FolioConfig, site_root: Path) -> LintReport:
    """Check every post under ``site_root`` (drafts included)."""
    return SiteLinter(config, site_root).run()


__all__ = ["SiteLinter", "lint_site"]
