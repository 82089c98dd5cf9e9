"""Exceptions raised while rendering the site."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from folio.exceptions import FolioError

if TYPE_CHECKING:
    from folio.content.repository import LoadFailure


class RenderingError(FolioError):
    """Base class for rendering errors."""


class BuildError(RenderingError):
    """Raised when a strict build finds content it cannot publish."""

    def __init__(self, message: str, failures: Sequence[LoadFailure] = ()) -> None:
        self.failures = list(failures)
        details = "".join(f"\n  {failure.path}: {failure.error}" for failure in self.failures)
        super().__init__(f"{message}{details}")


class UnsafeOutputDirError(RenderingError):
    """Raised when the output directory cannot be safely cleaned."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Refusing to use '{path}' as the output directory: {reason}")


class TemplateRenderError(RenderingError):
    """Raised when a page template fails to load or render."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Failed to render template '{template}': {reason}")
