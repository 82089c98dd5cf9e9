"""Helpers for parsing and writing YAML front matter on Markdown content."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import frontmatter
import yaml

from folio.content.exceptions import FrontmatterError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DELIMITER = "---"

_LEADING_BLANK_LINES_RE = re.compile(r"\A(?:[ \t]*\n)+")


class _FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps impossible dates (2024-13-45) as plain strings."""


def _construct_timestamp(loader: _FrontmatterLoader, node: yaml.Node) -> Any:
    try:
        return yaml.SafeLoader.construct_yaml_timestamp(loader, node)
    except ValueError:
        return loader.construct_scalar(node)


_FrontmatterLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML front matter using python-frontmatter.

    Args:
        content: Markdown content that may include front matter.

    Returns:
        Tuple of (metadata dict, body string). If parsing fails or metadata is not a
        mapping, metadata will be an empty dict and the original content is returned.

    """
    try:
        parsed = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError) as exc:
        logger.warning("Failed to parse front matter content: %s", exc)
        return {}, content

    raw_metadata = parsed.metadata or {}
    if not isinstance(raw_metadata, dict):
        logger.warning("Front matter metadata is not a mapping: %s", type(raw_metadata).__name__)
        return {}, content

    body = parsed.content if isinstance(parsed.content, str) else str(parsed.content)
    return dict(raw_metadata), body


def _split_block(content: str, source: Path | str | None) -> tuple[str, str]:
    """Split ``content`` into the raw YAML block and the body."""
    text = content.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != DELIMITER:
        raise FrontmatterError(source, "document does not start with '---'", line=1)

    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip() == DELIMITER:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return block, body

    raise FrontmatterError(source, "front matter block is not closed with '---'", line=1)


def parse_frontmatter_strict(content: str, source: Path | str | None = None) -> tuple[dict[str, Any], str]:
    """Parse front matter, raising on anything that is not a well-formed block.

    Returns:
        Tuple of (metadata dict, body string). Leading blank lines of the body
        are dropped.

    Raises:
        FrontmatterError: If the block is missing, unclosed, invalid YAML or
            not a mapping.

    """
    block, body = _split_block(content, source)
    try:
        data = yaml.load(block, Loader=_FrontmatterLoader) if block.strip() else {}  # noqa: S506
    except yaml.YAMLError as exc:
        line = None
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            # +2: the opening delimiter, and YAML marks are zero-based.
            line = mark.line + 2
        raise FrontmatterError(source, f"YAML error: {exc}", line=line) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(source, f"metadata is a {type(data).__name__}, not a mapping", line=2)

    return {str(key): value for key, value in data.items()}, body.lstrip("\n")


def read_frontmatter_only(path: Path, *, encoding: str = "utf-8") -> dict[str, Any]:
    """Read only the front matter from a Markdown file, stopping at the delimiter.

    Returns:
        Metadata dict. Returns empty dict if no front matter found or parsing fails.

    """
    try:
        with path.open("r", encoding=encoding) as f:
            first_line = f.readline()
            if first_line.lstrip("\ufeff").rstrip() != DELIMITER:
                return {}

            lines = []
            for line in f:
                if line.rstrip() == DELIMITER:
                    break
                lines.append(line)
            else:
                return {}

            if not any(line.strip() for line in lines):
                return {}
            metadata, _ = parse_frontmatter(f"{DELIMITER}\n{''.join(lines)}{DELIMITER}\n")
            return metadata

    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Failed to read front matter from %s: %s", path, exc)
        return {}


def dump_post(metadata: dict[str, Any], body: str) -> str:
    """Render metadata and body as a Markdown document with front matter."""
    yaml_front = yaml.safe_dump(
        metadata,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    text = f"{DELIMITER}\n{yaml_front}{DELIMITER}\n\n{_LEADING_BLANK_LINES_RE.sub('', body).rstrip()}"
    return text.rstrip("\n") + "\n"


__all__ = [
    "dump_post",
    "parse_frontmatter",
    "parse_frontmatter_strict",
    "read_frontmatter_only",
]
