"""Centralized configuration for Folio.

Pydantic models for ``.folio/folio.toml`` plus the loading and saving
functions. Priority (highest to lowest):

1. Environment variables (``FOLIO_SECTION__KEY``)
2. Config file (``.folio/folio.toml``)
3. Defaults
"""

from __future__ import annotations

import logging
import os
import re
import string
import tomllib
from copy import deepcopy
from datetime import date, datetime
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from folio.config.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    InvalidDateFormatError,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".folio"
CONFIG_FILE_NAME = "folio.toml"
ENV_PREFIX = "FOLIO_"

DEFAULT_PERMALINK = "{year}/{month}/{day}/{slug}/"
PERMALINK_FIELDS = frozenset({"year", "month", "day", "slug"})

DEFAULT_MARKDOWN_EXTENSIONS: tuple[str, ...] = (
    "pymdownx.superfences",
    "pymdownx.highlight",
    "pymdownx.inlinehilite",
    "pymdownx.smartsymbols",
    "tables",
    "toc",
    "smarty",
    "footnotes",
)

_LANGUAGE_RE = re.compile(r"^[A-Za-z]{2,3}(-[A-Za-z0-9]{2,8})*$")


class SiteSettings(BaseModel):
    """Site identity shown in page headers and the feed."""

    name: str = Field(default="Folio", description="Site title")
    base_url: str = Field(default="https://example.com/", description="Absolute URL the site is served from")
    author: str = Field(default="", description="Default author name for the feed")
    language: str = Field(default="en", description="BCP 47 language tag for <html lang>")
    description: str = Field(default="", description="Short description for the index page and feed")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure the base URL is absolute and ends with a slash."""
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://: {v}"
            raise ValueError(msg)
        return v if v.endswith("/") else f"{v}/"

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        if not _LANGUAGE_RE.match(v):
            msg = f"language must be a language tag such as 'en' or 'pt-BR': {v}"
            raise ValueError(msg)
        return v


class PathsSettings(BaseModel):
    """Site directory paths configuration.

    All paths are relative to the site root.
    """

    posts_dir: str = Field(default="posts", description="Markdown posts directory")
    static_dir: str = Field(default="static", description="Files copied verbatim into the output")
    templates_dir: str = Field(default="templates", description="Template overrides")
    output_dir: str = Field(default="_site", description="Build output directory")
    notes_file: str = Field(default="README.md", description="Notes file holding post ideas")

    @field_validator(
        "posts_dir",
        "static_dir",
        "templates_dir",
        "output_dir",
        "notes_file",
        mode="after",
    )
    @classmethod
    def validate_safe_path(cls, v: str) -> str:
        """Validate path is relative and does not contain traversal sequences."""
        if not v:
            msg = "Path must not be empty"
            raise ValueError(msg)
        path = Path(v)
        if path.is_absolute():
            msg = f"Path must be relative, not absolute: {v}"
            raise ValueError(msg)
        if any(part == ".." for part in path.parts):
            msg = f"Path must not contain traversal sequences ('..'): {v}"
            raise ValueError(msg)
        return v


class BuildSettings(BaseModel):
    """Rendering options for ``folio build``."""

    permalink: str = Field(
        default=DEFAULT_PERMALINK,
        description="URL pattern for posts; fields: {year} {month} {day} {slug}",
    )
    posts_per_page: int = Field(default=10, ge=1, description="Posts per index page")
    feed_size: int = Field(default=20, ge=1, description="Number of entries in feed.xml")
    markdown_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_MARKDOWN_EXTENSIONS))
    highlight_style: str = Field(default="default", description="Pygments style for code blocks")

    @field_validator("permalink")
    @classmethod
    def validate_permalink(cls, v: str) -> str:
        """Permalinks are relative, must contain {slug} and only known fields."""
        fields = {name for _, name, _, _ in string.Formatter().parse(v) if name is not None}
        unknown = fields - PERMALINK_FIELDS
        if unknown:
            msg = f"Unknown permalink field(s): {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        if "slug" not in fields:
            msg = "permalink must contain {slug}"
            raise ValueError(msg)
        v = v.lstrip("/")
        if ".." in Path(v).parts:
            msg = f"permalink must not contain '..': {v}"
            raise ValueError(msg)
        return v if v.endswith("/") else f"{v}/"


class LintSettings(BaseModel):
    """Thresholds and allowances for ``folio check``."""

    allowed_keys: list[str] = Field(default_factory=list, description="Extra front-matter keys to accept")
    allow_same_day: bool = Field(default=False, description="Do not warn about posts sharing a date")
    max_excerpt_length: int = Field(default=300, ge=1)


class NotesSettings(BaseModel):
    """Where post ideas live inside the notes file."""

    ideas_heading: str = Field(default="Post ideas", min_length=1)


class FolioConfig(BaseSettings):
    """Root configuration for Folio.

    This model defines the complete .folio/folio.toml schema.

    Supports environment variable overrides with the pattern:
    FOLIO_SECTION__KEY (e.g., FOLIO_BUILD__POSTS_PER_PAGE)
    """

    site: SiteSettings = Field(default_factory=SiteSettings)
    paths: PathsSettings = Field(default_factory=PathsSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    lint: LintSettings = Field(default_factory=LintSettings)
    notes: NotesSettings = Field(default_factory=NotesSettings)

    model_config = SettingsConfigDict(
        extra="forbid",
        validate_assignment=True,
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
    )

    @classmethod
    def from_cli_overrides(cls, base_config: FolioConfig, **cli_args: Any) -> FolioConfig:
        """Return a copy of ``base_config`` with CLI options applied.

        Raises:
            ConfigValidationError: If an override is invalid

        """
        path_overrides = {
            key: value for key, value in cli_args.items() if key in PathsSettings.model_fields and value is not None
        }
        if not path_overrides:
            return base_config
        try:
            paths = PathsSettings.model_validate({**base_config.paths.model_dump(), **path_overrides})
        except ValidationError as e:
            raise ConfigValidationError(None, e.errors()) from e
        return base_config.model_copy(update={"paths": paths})

    def posts_path(self, site_root: Path) -> Path:
        return site_root / self.paths.posts_dir

    def static_path(self, site_root: Path) -> Path:
        return site_root / self.paths.static_dir

    def templates_path(self, site_root: Path) -> Path:
        return site_root / self.paths.templates_dir

    def output_path(self, site_root: Path) -> Path:
        return site_root / self.paths.output_dir

    def notes_path(self, site_root: Path) -> Path:
        return site_root / self.paths.notes_file


# ============================================================================
# Configuration Loading and Saving
# ============================================================================


def config_path_for(site_root: Path) -> Path:
    return site_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def find_folio_config(start_dir: Path) -> Path | None:
    """Search upward for .folio/folio.toml.

    Args:
        start_dir: Starting directory for upward search

    Returns:
        Path to config file if found, else None

    """
    current = start_dir.expanduser().resolve()
    for candidate in (current, *current.parents):
        config_path = config_path_for(candidate)
        if config_path.exists():
            return config_path
    return None


def find_site_root(start_dir: Path) -> Path:
    """Return the site root containing ``.folio/folio.toml``.

    Raises:
        ConfigNotFoundError: If no config exists in or above start_dir

    """
    config_path = find_folio_config(start_dir)
    if config_path is None:
        raise ConfigNotFoundError(start_dir)
    return config_path.parent.parent


def _collect_env_override_paths() -> set[tuple[str, ...]]:
    """Return the set of config paths defined via environment variables."""
    env_paths: set[tuple[str, ...]] = set()

    for key in os.environ:
        if not key.startswith(ENV_PREFIX):
            continue
        parts = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if parts:
            env_paths.add(tuple(parts))

    return env_paths


def _merge_config(
    base: dict[str, Any],
    override: dict[str, Any],
    env_override_paths: set[tuple[str, ...]],
    current_path: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Merge override into base, skipping keys provided via env vars."""
    merged = deepcopy(base)

    for key, value in override.items():
        path = (*current_path, str(key).lower())
        if path in env_override_paths:
            continue

        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_config(merged[key], value, env_override_paths, path)
        else:
            merged[key] = value

    return merged


def load_folio_config(site_root: Path) -> FolioConfig:
    """Load Folio configuration from ``<site_root>/.folio/folio.toml``.

    Args:
        site_root: Root directory of the site

    Returns:
        Validated FolioConfig instance

    Raises:
        ConfigNotFoundError: If the config file does not exist
        ConfigParseError: If the file is not valid TOML
        ConfigValidationError: If config file contains invalid data

    """
    config_path = config_path_for(site_root)
    if not config_path.exists():
        raise ConfigNotFoundError(site_root)

    logger.debug("Loading config from %s", config_path)

    try:
        file_data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    try:
        base_dict = FolioConfig().model_dump(mode="json")
        # Env vars > config file > defaults
        merged = _merge_config(base_dict, file_data, _collect_env_override_paths())
        return FolioConfig.model_validate(merged)
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(location_part) for location_part in error["loc"])
            logger.debug("  %s: %s", loc, error["msg"])
        raise ConfigValidationError(config_path, e.errors()) from e


def save_folio_config(config: FolioConfig, site_root: Path) -> Path:
    """Save FolioConfig to .folio/folio.toml.

    Creates .folio/ directory if it doesn't exist.

    Args:
        config: FolioConfig instance to save
        site_root: Root directory of the site

    Returns:
        Path to the saved config file

    """
    config_path = config_path_for(site_root)
    config_path.parent.mkdir(exist_ok=True, parents=True)

    data = config.model_dump(exclude_defaults=False, mode="json")
    config_path.write_text(tomli_w.dumps(data), encoding="utf-8")
    logger.debug("Saved config to %s", config_path)

    return config_path


def parse_date_arg(date_str: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Raises:
        InvalidDateFormatError: If date_str is not in YYYY-MM-DD format

    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise InvalidDateFormatError(date_str) from e


__all__ = [
    "BuildSettings",
    "FolioConfig",
    "LintSettings",
    "NotesSettings",
    "PathsSettings",
    "SiteSettings",
    "config_path_for",
    "find_folio_config",
    "find_site_root",
    "load_folio_config",
    "parse_date_arg",
    "save_folio_config",
]
