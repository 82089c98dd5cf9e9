"""Filesystem-backed post storage.

Structure:
    site_root/posts/{date}-{slug}.md

Posts are stored as Markdown files with YAML front matter:
    ---
    title: My Post
    date: 2025-01-10
    excerpt: One line shown on the index page.
    ---

    Post content here...
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from folio.config.settings import DEFAULT_PERMALINK
from folio.content.exceptions import ContentError, PostNotFoundError
from folio.content.frontmatter import read_frontmatter_only
from folio.content.post import SLUG_MAX_LENGTH, Post, post_filename, sort_newest_first, split_post_filename
from folio.utils.paths import safe_path_join, slugify

logger = logging.getLogger(__name__)

IGNORED_NAMES = frozenset({"index.md"})


@dataclass(frozen=True, slots=True)
class LoadFailure:
    """A post file that could not be loaded."""

    path: Path
    error: Exception


@dataclass(slots=True)
class LoadResult:
    """Posts loaded from disk plus the files that failed."""

    posts: list[Post] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def __iter__(self) -> Iterator[Post]:
        return iter(self.posts)

    def __len__(self) -> int:
        return len(self.posts)


class PostRepository:
    """Read and create posts under a single directory."""

    def __init__(self, posts_dir: Path, *, permalink: str = DEFAULT_PERMALINK) -> None:
        self.posts_dir = posts_dir
        self.permalink = permalink

    def paths(self) -> list[Path]:
        """Return every post file, sorted by path."""
        if not self.posts_dir.is_dir():
            return []
        return sorted(
            path
            for path in self.posts_dir.rglob("*.md")
            if path.is_file() and path.name not in IGNORED_NAMES and not path.name.startswith("_")
        )

    def load(self, path: Path) -> Post:
        """Load one post file.

        Raises:
            FrontmatterError: If the front matter is missing or invalid
            PostValidationError: If required fields are missing or malformed
            OSError: If the file cannot be read

        """
        return Post.from_file(path)

    def load_all(self, *, include_drafts: bool = False) -> LoadResult:
        """Load every post, newest first.

        A file that fails to load is logged and recorded in ``failures``;
        the remaining files still load.
        """
        result = LoadResult()
        posts: list[Post] = []
        for path in self.paths():
            try:
                post = self.load(path)
            except (ContentError, OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping %s: %s", path, exc)
                result.failures.append(LoadFailure(path=path, error=exc))
                continue
            if post.draft and not include_drafts:
                logger.debug("Skipping draft %s", path.name)
                continue
            posts.append(post)
        result.posts = sort_newest_first(posts)
        logger.debug("Loaded %d post(s) from %s", len(result.posts), self.posts_dir)
        return result

    def get(self, slug: str, *, include_drafts: bool = True) -> Post:
        """Return the post with ``slug``.

        Raises:
            PostNotFoundError: If no loadable post has that slug

        """
        wanted = slugify(slug)
        for post in self.load_all(include_drafts=include_drafts).posts:
            if post.slug == wanted:
                return post
        raise PostNotFoundError(slug)

    def _taken_slugs(self) -> set[str]:
        """Slugs already claimed by files on disk, loadable or not."""
        taken: set[str] = set()
        for path in self.paths():
            declared = read_frontmatter_only(path).get("slug")
            _, file_slug = split_post_filename(path.name)
            taken.add(slugify(str(declared) if declared else file_slug, SLUG_MAX_LENGTH))
        return taken

    def create(
        self,
        title: str,
        *,
        date: dt.date | None = None,
        excerpt: str = "",
        body: str = "",
        tags: Iterable[str] = (),
        draft: bool = False,
        slug: str | None = None,
    ) -> Path:
        """Write a new post and return its path.

        A slug already used by another post on any date gets a numeric
        suffix, so new posts never collide on URL or slug.

        An empty excerpt is replaced by a placeholder that still passes
        validation, so freshly created posts always load.

        Raises:
            PostValidationError: If the title is empty
            PathTraversalError: If the slug would escape the posts directory

        """
        post_date = date or dt.date.today()
        base_slug = slugify(slug or title)
        excerpt = excerpt.strip()
        if not excerpt and title.strip():
            excerpt = f"Notes on {title.strip()}."

        self.posts_dir.mkdir(parents=True, exist_ok=True)
        slug_candidate = base_slug
        filepath = safe_path_join(self.posts_dir, post_filename(post_date, slug_candidate))
        taken = self._taken_slugs()
        suffix = 2
        while filepath.exists() or slug_candidate in taken:
            slug_candidate = f"{base_slug}-{suffix}"
            filepath = safe_path_join(self.posts_dir, post_filename(post_date, slug_candidate))
            suffix += 1

        post = Post.from_metadata(
            {
                "title": title,
                "date": post_date,
                "excerpt": excerpt,
                "slug": slug_candidate,
                "tags": list(tags),
                "draft": draft,
            },
            body,
            source=filepath,
        )
        filepath.write_text(post.to_text(), encoding="utf-8")
        logger.info("Created post %s", filepath.name)
        return filepath


__all__ = ["LoadFailure", "LoadResult", "PostRepository"]
