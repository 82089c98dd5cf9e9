"""Exceptions raised while reading and writing post content."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from folio.exceptions import FolioError


class ContentError(FolioError):
    """Base class for content errors."""


class FrontmatterError(ContentError):
    """Raised when a document's front matter is missing or cannot be parsed."""

    def __init__(self, source: Path | str | None, reason: str, line: int | None = None) -> None:
        self.source = source
        self.reason = reason
        self.line = line
        where = f" in '{source}'" if source else ""
        super().__init__(f"Invalid front matter{where}: {reason}")


class PostValidationError(ContentError):
    """Raised when front-matter fields are missing or malformed.

    ``errors`` holds one ``(field, message)`` pair per failing field.
    """

    def __init__(self, source: Path | str | None, errors: Sequence[tuple[str, str]]) -> None:
        self.source = source
        self.errors = list(errors)
        where = f" '{source}'" if source else ""
        details = "; ".join(f"{field}: {message}" for field, message in self.errors)
        super().__init__(f"Invalid post{where}: {details}")


class PostNotFoundError(ContentError):
    """Raised when no post matches a slug."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"No post with slug '{slug}'")


class IdeaNotFoundError(ContentError):
    """Raised when a post-idea index is out of range."""

    def __init__(self, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(f"No idea #{index}; the notes list {count} idea(s)")
