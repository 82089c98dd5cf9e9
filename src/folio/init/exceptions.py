"""Exceptions for the site initialization and scaffolding process."""

from __future__ import annotations

from typing import TYPE_CHECKING

from folio.exceptions import FolioError

if TYPE_CHECKING:
    from pathlib import Path


class ScaffoldingError(FolioError):
    """Raised when a new site cannot be created."""

    def __init__(self, site_root: Path, original_exception: Exception) -> None:
        self.site_root = site_root
        self.original_exception = original_exception
        super().__init__(f"Failed to scaffold site at root '{site_root}': {original_exception}")
        self.__cause__ = original_exception
