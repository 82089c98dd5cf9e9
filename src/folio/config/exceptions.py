"""Custom exceptions for configuration handling."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from folio.exceptions import FolioError


class ConfigError(FolioError):
    """Base exception for all configuration-related errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file cannot be found."""

    def __init__(self, search_path: Path) -> None:
        self.search_path = search_path
        super().__init__(f"Could not find .folio/folio.toml in or above {search_path}")


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class ConfigValidationError(ConfigError):
    """Raised when the configuration file fails validation."""

    def __init__(self, path: Path | None, errors: Sequence[dict[str, Any]] | None = None) -> None:
        self.path = path
        self.errors = list(errors or [])
        details = "; ".join(
            f"{' -> '.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in self.errors
        )
        location = f" in {path}" if path else ""
        message = f"Configuration validation failed{location} with {len(self.errors)} error(s)"
        super().__init__(f"{message}: {details}" if details else f"{message}.")


class InvalidDateFormatError(ConfigError):
    """Raised when a date string is in an invalid format."""

    def __init__(self, date_string: str) -> None:
        self.date_string = date_string
        super().__init__(f"Invalid date format: '{date_string}'. Expected YYYY-MM-DD.")
