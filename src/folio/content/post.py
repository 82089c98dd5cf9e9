"""The Post model: one Markdown file with title, date and excerpt front matter."""

from __future__ import annotations

import datetime as dt
import math
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from folio.config.settings import DEFAULT_PERMALINK
from folio.content.exceptions import PostValidationError
from folio.content.frontmatter import dump_post, parse_frontmatter_strict
from folio.utils.dates import coerce_date
from folio.utils.paths import slugify

REQUIRED_KEYS: tuple[str, ...] = ("title", "date", "excerpt")
KNOWN_KEYS: frozenset[str] = frozenset({*REQUIRED_KEYS, "slug", "tags", "draft"})

WORDS_PER_MINUTE = 200
SLUG_MAX_LENGTH = 80

_FILENAME_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-(?P<slug>.+)\.md$")


def split_post_filename(name: str) -> tuple[dt.date | None, str]:
    """Split ``YYYY-MM-DD-slug.md`` into its date and slug.

    Names that do not follow the convention return ``(None, stem)``; a
    well-formed prefix that is not a real calendar date also yields ``None``.
    """
    match = _FILENAME_RE.match(name)
    if not match:
        return None, Path(name).stem
    try:
        prefix = dt.date.fromisoformat(match.group("date"))
    except ValueError:
        prefix = None
    return prefix, match.group("slug")


def post_filename(post_date: dt.date, slug: str) -> str:
    return f"{post_date.isoformat()}-{slug}.md"


class Post(BaseModel):
    """A published (or draft) blog post."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str
    date: dt.date
    excerpt: str
    body: str = ""
    slug: str
    tags: tuple[str, ...] = ()
    draft: bool = False
    source: Path | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", "excerpt", mode="before")
    @classmethod
    def _validate_text(cls, value: Any) -> str:
        if not isinstance(value, str):
            msg = f"must be a string, got {type(value).__name__}"
            raise ValueError(msg)  # noqa: TRY004
        value = value.strip()
        if not value:
            msg = "must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _validate_date(cls, value: Any) -> dt.date:
        try:
            return coerce_date(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @field_validator("slug", mode="before")
    @classmethod
    def _validate_slug(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            msg = "must be a non-empty string"
            raise ValueError(msg)
        return slugify(value, max_len=SLUG_MAX_LENGTH)

    @field_validator("tags", mode="before")
    @classmethod
    def _validate_tags(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            items = value.split(",")
        elif isinstance(value, (list, tuple)):
            items = []
            for item in value:
                if not isinstance(item, (str, int, float)) or isinstance(item, bool):
                    msg = f"tags must be strings, got {type(item).__name__}"
                    raise ValueError(msg)
                items.append(str(item))
        else:
            msg = "tags must be a list of strings or a comma-separated string"
            raise ValueError(msg)
        seen: dict[str, None] = {}
        for item in items:
            tag = item.strip()
            if tag:
                seen.setdefault(tag, None)
        return tuple(seen)

    @field_validator("draft", mode="before")
    @classmethod
    def _validate_draft(cls, value: Any) -> bool:
        if value is None:
            return False
        if not isinstance(value, bool):
            msg = "draft must be true or false"
            raise ValueError(msg)  # noqa: TRY004
        return value

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_metadata(
        cls,
        metadata: dict[str, Any],
        body: str,
        *,
        source: Path | None = None,
    ) -> Post:
        """Build a post from parsed front matter.

        The slug comes from the ``slug`` key, else the filename, else the title.

        Raises:
            PostValidationError: Listing every missing or malformed field.

        """
        extra = {key: value for key, value in metadata.items() if key not in KNOWN_KEYS}
        slug = metadata.get("slug")
        if not slug and source is not None:
            _, slug = split_post_filename(source.name)
        if not slug and isinstance(metadata.get("title"), str):
            slug = slugify(metadata["title"], max_len=SLUG_MAX_LENGTH)

        data: dict[str, Any] = {
            key: metadata[key] for key in ("title", "date", "excerpt", "tags", "draft") if key in metadata
        }
        data.update(body=body, slug=slug, source=source, extra=extra)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = [(str(error["loc"][0]) if error["loc"] else "post", _clean_message(error["msg"])) for error in e.errors()]
            raise PostValidationError(source, errors) from e

    @classmethod
    def from_text(cls, text: str, *, source: Path | None = None) -> Post:
        """Parse a full Markdown document.

        Raises:
            FrontmatterError: If the front matter block is missing or invalid
            PostValidationError: If required fields are missing or malformed

        """
        metadata, body = parse_frontmatter_strict(text, source)
        return cls.from_metadata(metadata, body, source=source)

    @classmethod
    def from_file(cls, path: Path, *, encoding: str = "utf-8") -> Post:
        return cls.from_text(path.read_text(encoding=encoding), source=path)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def filename(self) -> str:
        return post_filename(self.date, self.slug)

    @property
    def word_count(self) -> int:
        return len(self.body.split())

    @property
    def reading_minutes(self) -> int:
        return max(1, math.ceil(self.word_count / WORDS_PER_MINUTE))

    def url_path(self, permalink: str = DEFAULT_PERMALINK) -> str:
        """Return the site-relative URL path, e.g. ``2024/05/01/hello/``."""
        return permalink.format(
            year=f"{self.date.year:04d}",
            month=f"{self.date.month:02d}",
            day=f"{self.date.day:02d}",
            slug=self.slug,
        )

    def metadata(self) -> dict[str, Any]:
        """Front matter in the order posts are written."""
        data: dict[str, Any] = {"title": self.title, "date": self.date, "excerpt": self.excerpt}
        if self.slug != slugify(self.title, max_len=SLUG_MAX_LENGTH):
            data["slug"] = self.slug
        if self.tags:
            data["tags"] = list(self.tags)
        if self.draft:
            data["draft"] = True
        data.update(self.extra)
        return data

    def to_text(self) -> str:
        return dump_post(self.metadata(), self.body)


def _clean_message(message: str) -> str:
    # pydantic prefixes custom validator errors with "Value error, ".
    return message.removeprefix("Value error, ")


def sort_newest_first(posts: list[Post]) -> list[Post]:
    return sorted(posts, key=lambda post: (-post.date.toordinal(), post.slug))


__all__ = [
    "KNOWN_KEYS",
    "REQUIRED_KEYS",
    "Post",
    "post_filename",
    "sort_newest_first",
    "split_post_filename",
]
