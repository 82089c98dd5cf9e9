"""Path safety utilities for secure file operations."""

from pathlib import Path

from pymdownx.slugs import slugify as _md_slugify

from folio.exceptions import FolioError


class PathTraversalError(FolioError):
    """Raised when a path would escape its intended directory."""


# Use 'NFKD' normalization to transliterate Unicode to ASCII equivalents.
slugify_lower = _md_slugify(case="lower", separator="-", normalize="NFKD")
slugify_case = _md_slugify(separator="-", normalize="NFKD")


def slugify(text: str, max_len: int = 60, *, lowercase: bool = True) -> str:
    """Convert text to a safe URL-friendly slug using Python Markdown semantics.

    Heading ids in rendered posts use the same slugifier, so anchors written
    by hand against ``slugify`` output keep working.

    Args:
        text: Input text to slugify
        max_len: Maximum length of output slug (default 60)
        lowercase: Whether to lowercase the slug (default True)

    Returns:
        Safe slug string suitable for filenames

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Hello World!", lowercase=False)
        'Hello-World'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("../../etc/passwd")
        'etcpasswd'
        >>> slugify("A" * 100, max_len=20)
        'aaaaaaaaaaaaaaaaaaaa'
        >>> slugify("!!!")
        'post'

    """
    if text is None:
        return ""

    slugifier = slugify_lower if lowercase else slugify_case
    slug = slugifier(text, sep="-")

    # NFKD normalization alone does not guarantee ASCII.
    slug = slug.encode("ascii", "ignore").decode("ascii")

    slug = slug or "post"
    if len(slug) > max_len:
        slug = slug[:max_len]

    return slug.rstrip("-")


def safe_path_join(base_dir: Path, *parts: str) -> Path:
    r"""Safely join path parts and ensure result stays within base_dir.

    Args:
        base_dir: Base directory that result must stay within
        *parts: Path parts to join

    Returns:
        Resolved path guaranteed to be within base_dir

    Raises:
        PathTraversalError: If resulting path would escape base_dir

    Examples:
        >>> base = Path("/output")
        >>> safe_path_join(base, "posts", "2025-01-01-hello.md")
        PosixPath('/output/posts/2025-01-01-hello.md')
        >>> safe_path_join(base, "../../etc/passwd")  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        PathTraversalError: Path traversal detected: ...

    """
    if any(Path(part).is_absolute() for part in parts):
        absolute_part = next(part for part in parts if Path(part).is_absolute())
        msg = f"Absolute paths not allowed: {absolute_part}"
        raise PathTraversalError(msg)

    base_resolved = base_dir.resolve()
    candidate_path = base_resolved.joinpath(*parts)

    try:
        candidate_resolved = candidate_path.resolve()
        candidate_resolved.relative_to(base_resolved)
    except (ValueError, OSError) as err:
        msg = f"Path traversal detected: joining {parts} to {base_dir} would escape base directory"
        raise PathTraversalError(msg) from err

    return candidate_resolved


def is_within(path: Path, directory: Path) -> bool:
    """Return True if ``path`` is ``directory`` or lives below it.

    Examples:
        >>> is_within(Path("/site/posts/a.md"), Path("/site"))
        True
        >>> is_within(Path("/site"), Path("/site/_site"))
        False

    """
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True
