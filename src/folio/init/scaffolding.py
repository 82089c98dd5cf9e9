"""Site scaffolding for new Folio sites.

Creates ``.folio/folio.toml``, the posts and static directories, a welcome
post and a README with an empty post-ideas section. Existing files are never
overwritten.
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from folio.config.settings import (
    FolioConfig,
    SiteSettings,
    config_path_for,
    load_folio_config,
    save_folio_config,
)
from folio.content.frontmatter import dump_post
from folio.content.notes import DEFAULT_IDEAS_HEADING
from folio.content.post import post_filename
from folio.init.exceptions import ScaffoldingError

logger = logging.getLogger(__name__)

WELCOME_SLUG = "welcome"


def _template_env() -> Environment:
    # Markdown output: no HTML escaping.
    return Environment(
        loader=PackageLoader("folio", "init/templates"),
        autoescape=False,  # noqa: S701
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def _write_if_missing(path: Path, content: str) -> bool:
    if path.exists():
        logger.debug("Keeping existing %s", path)
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Created %s", path)
    return True


def _welcome_post(env: Environment, context: dict[str, Any]) -> str:
    # Front matter is dumped as YAML, never templated.
    site_name = context["site_name"]
    metadata = {
        "title": f"Welcome to {site_name}",
        "date": context["today"],
        "excerpt": f"The first post on {site_name}, and how posts are put together.",
        "tags": ["meta"],
    }
    return dump_post(metadata, env.get_template("welcome.md.jinja").render(**context))


def scaffold_site(
    site_root: Path,
    *,
    site_name: str | None = None,
    today: dt.date | None = None,
) -> tuple[Path, bool]:
    """Create the initial site structure.

    Args:
        site_root: Root directory for the site
        site_name: Display name for the site (defaults to the directory name)
        today: Date for the welcome post (defaults to today)

    Returns:
        tuple of (config_file_path, was_created)

    Raises:
        ScaffoldingError: If any file or directory cannot be created

    """
    site_root = site_root.expanduser().resolve()
    config_path = config_path_for(site_root)
    site_name = site_name or site_root.name or "Folio"
    today = today or dt.date.today()

    try:
        site_root.mkdir(parents=True, exist_ok=True)
        created = not config_path.exists()
        if created:
            config = FolioConfig(site=SiteSettings(name=site_name))
            save_folio_config(config, site_root)
            logger.info("Created %s", config_path)
        else:
            logger.info("Folio site already exists at %s (config: %s)", site_root, config_path)
            config = load_folio_config(site_root)

        env = _template_env()
        context = {
            "site_name": site_name,
            "today": today,
            "ideas_heading": DEFAULT_IDEAS_HEADING,
            "output_dir": config.paths.output_dir,
            "posts_dir": config.paths.posts_dir,
        }

        posts_dir = config.posts_path(site_root)
        posts_dir.mkdir(parents=True, exist_ok=True)
        if created and not any(posts_dir.glob("*.md")):
            _write_if_missing(posts_dir / post_filename(today, WELCOME_SLUG), _welcome_post(env, context))

        static_dir = config.static_path(site_root)
        static_dir.mkdir(parents=True, exist_ok=True)
        (static_dir / ".gitkeep").touch()

        _write_if_missing(config.notes_path(site_root), env.get_template("README.md.jinja").render(**context))
        _write_if_missing(site_root / ".gitignore", env.get_template("gitignore.jinja").render(**context))
    except (OSError, TemplateError) as e:
        raise ScaffoldingError(site_root, e) from e

    return config_path, created


__all__ = ["scaffold_site"]
