"""Centralized logging configuration for Folio."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Final, cast

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["console", "configure_logging"]

_LOG_LEVEL_ENV: Final[str] = "FOLIO_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"

console = Console()

if TYPE_CHECKING:

    class _ManagedRichHandler(RichHandler):
        _folio_managed: bool
else:
    _ManagedRichHandler = RichHandler


def _resolve_level() -> int:
    """Return the logging level defined via environment variable."""
    level_name = os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME).upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        return logging.INFO
    return level


def configure_logging(*, debug: bool = False) -> None:
    """Configure logging once with a Rich handler.

    Repeated calls reuse the handler installed by the first call.
    """
    root_logger = logging.getLogger()
    level = logging.DEBUG if debug else _resolve_level()

    managed_handler: _ManagedRichHandler | None = None
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler) and getattr(handler, "_folio_managed", False):
            managed_handler = cast(_ManagedRichHandler, handler)
            break

    if managed_handler is None:
        root_logger.handlers.clear()
        handler = _ManagedRichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._folio_managed = True
        root_logger.addHandler(handler)

    root_logger.setLevel(level)

    # Markdown and its extensions log at DEBUG on every render.
    logging.getLogger("MARKDOWN").setLevel(max(level, logging.INFO))
    logging.captureWarnings(True)
