"""Post content: front matter, the Post model, storage and README notes."""

from folio.content.exceptions import (
    ContentError,
    FrontmatterError,
    IdeaNotFoundError,
    PostNotFoundError,
    PostValidationError,
)
from folio.content.notes import Notes, promote_idea
from folio.content.post import Post, split_post_filename
from folio.content.repository import LoadFailure, LoadResult, PostRepository

__all__ = [
    "ContentError",
    "FrontmatterError",
    "IdeaNotFoundError",
    "LoadFailure",
    "LoadResult",
    "Notes",
    "Post",
    "PostNotFoundError",
    "PostRepository",
    "PostValidationError",
    "promote_idea",
    "split_post_filename",
]
