from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

from folio.config.settings import load_folio_config
from folio.content.notes import Notes
from folio.content.post import Post
from folio.init import scaffold_site
from folio.init.exceptions import ScaffoldingError
from folio.lint import lint_site


def test_scaffold_creates_site(tmp_path: Path):
    root = tmp_path / "my-blog"

    config_path, created = scaffold_site(root, today=date(2024, 6, 1))

    assert created is True
    assert config_path == root.resolve() / ".folio" / "folio.toml"
    config = load_folio_config(root)
    assert config.site.name == "my-blog"
    assert (root / "static" / ".gitkeep").is_file()
    assert "_site/" in (root / ".gitignore").read_text(encoding="utf-8")

    welcome = Post.from_file(root / "posts" / "2024-06-01-welcome.md")
    assert welcome.title == "Welcome to my-blog"
    assert welcome.date == date(2024, 6, 1)
    assert welcome.tags == ("meta",)

    notes = Notes.load(root / "README.md")
    assert notes.ideas == []


def test_scaffold_uses_given_name(tmp_path: Path):
    scaffold_site(tmp_path / "site", site_name="Field Notes")

    assert load_folio_config(tmp_path / "site").site.name == "Field Notes"


@pytest.mark.parametrize("site_name", ["Notes: on code", "Blog #1", "'Quoted' [draft]"])
def test_welcome_post_survives_yaml_syntax_in_name(tmp_path: Path, site_name: str):
    root = tmp_path / "site"
    scaffold_site(root, site_name=site_name, today=date(2024, 6, 1))

    welcome = Post.from_file(root / "posts" / "2024-06-01-welcome.md")
    assert welcome.title == f"Welcome to {site_name}"
    assert site_name in welcome.excerpt
    assert lint_site(load_folio_config(root), root).issues == []


def test_scaffold_never_overwrites(tmp_path: Path):
    root = tmp_path / "site"
    scaffold_site(root, today=date(2024, 6, 1))
    readme = root / "README.md"
    readme.write_text("# Mine\n", encoding="utf-8")
    (root / "posts" / "2024-06-01-welcome.md").unlink()

    config_path, created = scaffold_site(root, site_name="Other", today=date(2024, 7, 1))

    assert created is False
    assert config_path.is_file()
    assert readme.read_text(encoding="utf-8") == "# Mine\n"
    assert load_folio_config(root).site.name == "site"
    assert list((root / "posts").glob("*.md")) == []


def test_scaffold_keeps_existing_posts(tmp_path: Path):
    root = tmp_path / "site"
    (root / "posts").mkdir(parents=True)
    existing = root / "posts" / "2020-01-01-old.md"
    existing.write_text("---\ntitle: Old\ndate: 2020-01-01\nexcerpt: e\n---\n", encoding="utf-8")

    scaffold_site(root)

    assert list((root / "posts").glob("*.md")) == [existing]


def test_scaffold_wraps_os_errors(tmp_path: Path):
    with (
        patch("folio.init.scaffolding.save_folio_config", side_effect=PermissionError("denied")),
        pytest.raises(ScaffoldingError) as exc_info,
    ):
        scaffold_site(tmp_path / "site")

    assert isinstance(exc_info.value.original_exception, PermissionError)
    assert exc_info.value.site_root == (tmp_path / "site").resolve()
