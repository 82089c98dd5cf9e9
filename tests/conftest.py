from __future__ import annotations

import os
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest
import yaml

from folio.config.settings import FolioConfig, load_folio_config
from folio.init import scaffold_site

WritePost = Callable[..., Path]


@pytest.fixture(autouse=True)
def _clean_folio_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FOLIO_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("FOLIO_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A freshly scaffolded site whose welcome post is dated 2024-01-15."""
    root = tmp_path / "blog"
    scaffold_site(root, site_name="Test Blog", today=date(2024, 1, 15))
    return root.resolve()


@pytest.fixture
def empty_site(site_root: Path) -> Path:
    """A scaffolded site with the welcome post removed."""
    for path in (site_root / "posts").glob("*.md"):
        path.unlink()
    return site_root


@pytest.fixture
def config(site_root: Path) -> FolioConfig:
    return load_folio_config(site_root)


def make_post_text(body: str = "Hello.\n", **metadata: Any) -> str:
    front = yaml.safe_dump(metadata, sort_keys=False, allow_unicode=True)
    return f"---\n{front}---\n\n{body}"


@pytest.fixture
def write_post(site_root: Path) -> WritePost:
    """Write ``posts/<name>`` with the given front matter and body."""

    def _write(name: str, body: str = "Hello.\n", *, raw: str | None = None, **metadata: Any) -> Path:
        path = site_root / "posts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(raw if raw is not None else make_post_text(body, **metadata), encoding="utf-8")
        return path

    return _write
