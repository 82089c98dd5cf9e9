"""Per-invocation state shared between the root callback and commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from folio.config.settings import FolioConfig, find_site_root, load_folio_config


@dataclass
class CliState:
    site: Path | None = None
    debug: bool = False

    def site_root(self) -> Path:
        """The ``--site`` option, else the nearest site above the working directory."""
        if self.site is not None:
            return self.site.expanduser().resolve()
        return find_site_root(Path.cwd())

    def load(self) -> tuple[FolioConfig, Path]:
        root = self.site_root()
        return load_folio_config(root), root


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_object(CliState)
    return state if state is not None else CliState()
