from pathlib import Path

import pytest
from typer.testing import CliRunner

from folio.cli.main import app
from folio.config.exceptions import ConfigNotFoundError
from folio.content.notes import Notes
from folio.content.post import Post

runner = CliRunner()


def _invoke(site_root: Path, *args: str):
    return runner.invoke(app, ["--site", str(site_root), *args])


def test_init_creates_site(tmp_path: Path):
    result = runner.invoke(app, ["init", str(tmp_path / "blog"), "--name", "Field Notes"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "blog" / ".folio" / "folio.toml").is_file()
    assert "Site initialized" in result.output


def test_init_existing_site(site_root: Path):
    result = runner.invoke(app, ["init", str(site_root)])

    assert result.exit_code == 0
    assert "already exists" in result.output


def test_new_creates_post(site_root: Path):
    result = _invoke(site_root, "new", "Hello World", "--date", "2024-02-01", "--tag", "intro", "--tag", "misc")

    assert result.exit_code == 0, result.output
    assert "posts/2024-02-01-hello-world.md" in result.output
    post = Post.from_file(site_root / "posts" / "2024-02-01-hello-world.md")
    assert post.title == "Hello World"
    assert post.excerpt
    assert post.tags == ("intro", "misc")


def test_new_rejects_bad_date(site_root: Path):
    result = _invoke(site_root, "new", "Hello", "--date", "02/01/2024")

    assert result.exit_code == 1
    assert not list((site_root / "posts").glob("*hello*"))


def test_list_shows_posts(site_root: Path):
    _invoke(site_root, "new", "Hidden thoughts", "--date", "2024-02-01", "--draft")

    result = _invoke(site_root, "list")
    assert result.exit_code == 0, result.output
    assert "welcome" in result.output
    assert "hidden-thoughts" not in result.output

    result = _invoke(site_root, "list", "--drafts")
    assert "hidden-thoughts" in result.output


def test_build_writes_site(site_root: Path):
    result = _invoke(site_root, "build")

    assert result.exit_code == 0, result.output
    assert (site_root / "_site" / "index.html").is_file()
    assert (site_root / "_site" / "2024" / "01" / "15" / "welcome" / "index.html").is_file()


def test_build_output_override(site_root: Path):
    result = _invoke(site_root, "build", "--output", "public")

    assert result.exit_code == 0, result.output
    assert (site_root / "public" / "feed.xml").is_file()
    assert not (site_root / "_site").exists()


def test_build_rejects_escaping_output(site_root: Path):
    result = _invoke(site_root, "build", "--output", "../elsewhere")

    assert result.exit_code == 1
    assert not (site_root.parent / "elsewhere").exists()


def test_build_strict_fails_on_broken_post(site_root: Path, write_post):
    write_post("2024-02-01-broken.md", title="Broken", date="2024-02-01")

    assert _invoke(site_root, "build").exit_code == 0
    assert _invoke(site_root, "build", "--strict").exit_code == 1


def test_check_clean_site(site_root: Path):
    result = _invoke(site_root, "check")

    assert result.exit_code == 0, result.output
    assert "1 file(s) checked" in result.output


def test_check_reports_errors(site_root: Path, write_post):
    write_post("2024-02-01-broken.md", title="Broken", date="2024-02-01")

    result = _invoke(site_root, "check")

    assert result.exit_code == 1
    assert "FM002" in result.output


def test_check_hides_warnings(site_root: Path, write_post):
    write_post("notes.md", title="Loose", date="2024-02-01", excerpt="e")

    shown = _invoke(site_root, "check")
    hidden = _invoke(site_root, "check", "--no-warnings")

    assert shown.exit_code == 0
    assert "FM003" in shown.output
    assert hidden.exit_code == 0
    assert "FM003" not in hidden.output


def test_ideas_round_trip(site_root: Path):
    result = _invoke(site_root, "ideas", "add", "Write about caching")
    assert result.exit_code == 0, result.output
    assert Notes.load(site_root / "README.md").ideas == ["Write about caching"]

    result = _invoke(site_root, "ideas", "list")
    assert "Write about caching" in result.output

    result = _invoke(site_root, "ideas", "promote", "1", "--date", "2024-05-05")
    assert result.exit_code == 0, result.output
    post = Post.from_file(site_root / "posts" / "2024-05-05-write-about-caching.md")
    assert post.draft is True
    assert Notes.load(site_root / "README.md").ideas == []

    result = _invoke(site_root, "ideas", "list")
    assert "No ideas" in result.output


def test_ideas_promote_unknown_index(site_root: Path):
    result = _invoke(site_root, "ideas", "promote", "5")

    assert result.exit_code == 1


def test_site_is_found_from_working_directory(site_root: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(site_root / "posts")

    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0, result.output
    assert "welcome" in result.output


def test_missing_site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)

    assert runner.invoke(app, ["list"]).exit_code == 1

    result = runner.invoke(app, ["--debug", "list"])
    assert isinstance(result.exception, ConfigNotFoundError)
