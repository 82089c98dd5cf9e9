"""README notes: free-form Markdown with a bullet list of future post ideas.

Only the list under the ideas heading is interpreted. Everything else in the
file is kept exactly as written.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from folio.content.exceptions import IdeaNotFoundError

if TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from folio.content.repository import PostRepository

logger = logging.getLogger(__name__)

DEFAULT_IDEAS_HEADING = "Post ideas"

_HEADING_RE = re.compile(r"^(?P<level>#{1,6})\s+(?P<text>.*?)\s*#*\s*$")
_BULLET_RE = re.compile(r"^ {0,3}[-*+]\s+(?P<text>.+?)\s*$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def _track_fence(line: str, fence: str | None) -> str | None:
    """Return the open fence marker after ``line``, or None outside code blocks."""
    match = _FENCE_RE.match(line)
    if not match:
        return fence
    marker = match.group(1)
    if fence is None:
        return marker[0] * len(marker)
    if marker.startswith(fence):
        return None
    return fence


@dataclass(frozen=True, slots=True)
class _Section:
    heading_line: int
    level: int
    end: int  # exclusive


@dataclass
class Notes:
    """The notes file held as a list of lines (line endings included)."""

    path: Path
    lines: list[str] = field(default_factory=list)
    ideas_heading: str = DEFAULT_IDEAS_HEADING

    @classmethod
    def load(cls, path: Path, *, ideas_heading: str = DEFAULT_IDEAS_HEADING) -> Notes:
        """Read the notes file; a missing file yields empty notes."""
        if not path.exists():
            logger.debug("Notes file %s does not exist yet", path)
            return cls(path=path, ideas_heading=ideas_heading)
        text = path.read_bytes().decode("utf-8")
        return cls(path=path, lines=text.splitlines(keepends=True), ideas_heading=ideas_heading)

    @property
    def text(self) -> str:
        return "".join(self.lines)

    def _headings(self) -> list[tuple[int, int, str]]:
        """Return (line index, level, text) for headings outside code fences."""
        headings = []
        fence: str | None = None
        for index, line in enumerate(self.lines):
            fence = _track_fence(line, fence)
            if fence is not None or _FENCE_RE.match(line):
                continue
            heading = _HEADING_RE.match(line.rstrip("\r\n"))
            if heading:
                headings.append((index, len(heading.group("level")), heading.group("text")))
        return headings

    def _section(self) -> _Section | None:
        wanted = self.ideas_heading.strip().casefold()
        headings = self._headings()
        for position, (index, level, text) in enumerate(headings):
            if text.strip().casefold() != wanted:
                continue
            end = len(self.lines)
            for next_index, next_level, _ in headings[position + 1 :]:
                if next_level <= level:
                    end = next_index
                    break
            return _Section(heading_line=index, level=level, end=end)
        return None

    def _idea_lines(self) -> list[tuple[int, str]]:
        section = self._section()
        if section is None:
            return []
        found = []
        fence: str | None = None
        for index in range(section.heading_line + 1, section.end):
            line = self.lines[index].rstrip("\r\n")
            fence = _track_fence(line, fence)
            if fence is not None or _FENCE_RE.match(line):
                continue
            match = _BULLET_RE.match(line)
            if match:
                found.append((index, match.group("text")))
        return found

    @property
    def ideas(self) -> list[str]:
        """Bullet items listed under the ideas heading."""
        return [text for _, text in self._idea_lines()]

    def add_idea(self, text: str) -> None:
        """Append an idea, creating the ideas section if it is missing."""
        text = " ".join(text.split())
        if not text:
            msg = "Idea text must not be empty"
            raise ValueError(msg)

        bullet = f"- {text}\n"
        section = self._section()
        if section is None:
            if self.lines and not self.lines[-1].endswith("\n"):
                self.lines[-1] += "\n"
            if self.lines and self.lines[-1].strip():
                self.lines.append("\n")
            self.lines.extend([f"## {self.ideas_heading}\n", "\n", bullet])
            return

        existing = self._idea_lines()
        if existing:
            insert_at = existing[-1][0] + 1
            if not self.lines[insert_at - 1].endswith("\n"):
                self.lines[insert_at - 1] += "\n"
            self.lines.insert(insert_at, bullet)
            return

        insert_at = section.heading_line + 1
        if not self.lines[section.heading_line].endswith("\n"):
            self.lines[section.heading_line] += "\n"
        if insert_at < len(self.lines) and not self.lines[insert_at].strip():
            self.lines.insert(insert_at + 1, bullet)
        else:
            self.lines[insert_at:insert_at] = ["\n", bullet]

    def remove_idea(self, index: int) -> str:
        """Remove idea number ``index`` (1-based) and return its text.

        Raises:
            IdeaNotFoundError: If there is no idea with that number

        """
        existing = self._idea_lines()
        if not 1 <= index <= len(existing):
            raise IdeaNotFoundError(index, len(existing))
        line_index, text = existing[index - 1]
        del self.lines[line_index]
        return text

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(self.text.encode("utf-8"))
        logger.debug("Saved notes to %s", self.path)
        return self.path


def promote_idea(
    notes: Notes,
    repository: PostRepository,
    index: int,
    *,
    date: dt.date | None = None,
) -> Path:
    """Turn idea number ``index`` into a draft post and drop it from the notes.

    The notes file is only rewritten after the post exists on disk.
    """
    ideas = notes.ideas
    if not 1 <= index <= len(ideas):
        raise IdeaNotFoundError(index, len(ideas))

    title = ideas[index - 1].rstrip(".")
    path = repository.create(title, date=date, draft=True)
    notes.remove_idea(index)
    notes.save()
    logger.info("Promoted idea #%d to draft %s", index, path.name)
    return path


__all__ = ["DEFAULT_IDEAS_HEADING", "Notes", "promote_idea"]
