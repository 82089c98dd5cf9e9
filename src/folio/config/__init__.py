"""Configuration package for Folio."""

from folio.config.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    InvalidDateFormatError,
)
from folio.config.settings import (
    FolioConfig,
    find_folio_config,
    find_site_root,
    load_folio_config,
    parse_date_arg,
    save_folio_config,
)

__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
    "FolioConfig",
    "InvalidDateFormatError",
    "find_folio_config",
    "find_site_root",
    "load_folio_config",
    "parse_date_arg",
    "save_folio_config",
]
