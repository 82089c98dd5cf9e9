"""Lint issues and the report that collects them."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Severity(str, Enum):
    """How bad an issue is; errors make ``folio check`` fail."""

    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return 1 if self is Severity.ERROR else 0


@dataclass(frozen=True, slots=True)
class Issue:
    """One problem found in one file."""

    code: str
    severity: Severity
    path: Path
    message: str
    line: int | None = None

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line else str(self.path)

    def sort_key(self) -> tuple[str, int, str]:
        return (self.path.as_posix(), self.line or 0, self.code)


@dataclass(slots=True)
class LintReport:
    """Every issue found by a lint run, sorted by path, line and code."""

    issues: list[Issue] = field(default_factory=list)
    files_checked: int = 0

    def __post_init__(self) -> None:
        self.issues = sorted(self.issues, key=Issue.sort_key)

    @property
    def errors(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity is Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def filter(self, minimum: Severity = Severity.WARNING) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity.rank >= minimum.rank]

    def counts_by_code(self) -> Counter[str]:
        return Counter(issue.code for issue in self.issues)


__all__ = ["Issue", "LintReport", "Severity"]
