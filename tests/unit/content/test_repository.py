from datetime import date
from pathlib import Path

import pytest

from folio.content.exceptions import FrontmatterError, PostNotFoundError, PostValidationError
from folio.content.repository import PostRepository


@pytest.fixture
def repo(empty_site: Path) -> PostRepository:
    return PostRepository(empty_site / "posts")


def test_paths_skip_index_and_underscore_files(repo: PostRepository, write_post):
    write_post("2024-01-01-a.md", title="A", date="2024-01-01", excerpt="a")
    write_post("index.md", title="Index", date="2024-01-01", excerpt="i")
    write_post("_template.md", title="T", date="2024-01-01", excerpt="t")
    write_post("series/2024-02-01-b.md", title="B", date="2024-02-01", excerpt="b")

    names = [path.name for path in repo.paths()]
    assert names == ["2024-01-01-a.md", "2024-02-01-b.md"]


def test_paths_when_directory_missing(tmp_path: Path):
    assert PostRepository(tmp_path / "nope").paths() == []


def test_load_all_orders_newest_first_and_hides_drafts(repo: PostRepository, write_post):
    write_post("2024-01-01-old.md", title="Old", date=date(2024, 1, 1), excerpt="o")
    write_post("2024-03-01-new.md", title="New", date=date(2024, 3, 1), excerpt="n")
    write_post("2024-04-01-draft.md", title="Draft", date=date(2024, 4, 1), excerpt="d", draft=True)

    assert [post.slug for post in repo.load_all()] == ["new", "old"]
    assert [post.slug for post in repo.load_all(include_drafts=True)] == ["draft", "new", "old"]


def test_load_all_records_failures_without_stopping(repo: PostRepository, write_post):
    write_post("2024-01-01-good.md", title="Good", date=date(2024, 1, 1), excerpt="g")
    write_post("2024-01-02-no-fm.md", raw="# No front matter\n")
    write_post("2024-01-03-no-title.md", date=date(2024, 1, 3), excerpt="x")

    result = repo.load_all()
    assert [post.slug for post in result] == ["good"]
    assert not result.ok
    errors = {failure.path.name: type(failure.error) for failure in result.failures}
    assert errors == {
        "2024-01-02-no-fm.md": FrontmatterError,
        "2024-01-03-no-title.md": PostValidationError,
    }


def test_get_by_slug(repo: PostRepository, write_post):
    write_post("2024-01-01-hello.md", title="Hello", date=date(2024, 1, 1), excerpt="h", draft=True)
    assert repo.get("hello").title == "Hello"
    with pytest.raises(PostNotFoundError):
        repo.get("hello", include_drafts=False)
    with pytest.raises(PostNotFoundError):
        repo.get("missing")


def test_create_writes_loadable_post(repo: PostRepository):
    path = repo.create("Manual wiring beats containers", date=date(2024, 6, 1), tags=["di"])
    assert path.name == "2024-06-01-manual-wiring-beats-containers.md"

    post = repo.load(path)
    assert post.title == "Manual wiring beats containers"
    assert post.excerpt == "Notes on Manual wiring beats containers."
    assert post.tags == ("di",)


def test_create_adds_suffix_on_collision(repo: PostRepository):
    first = repo.create("Same", date=date(2024, 6, 1))
    second = repo.create("Same", date=date(2024, 6, 1))
    third = repo.create("Same", date=date(2024, 6, 1))

    assert first.name == "2024-06-01-same.md"
    assert second.name == "2024-06-01-same-2.md"
    assert third.name == "2024-06-01-same-3.md"
    assert repo.load(second).slug == "same-2"


def test_create_avoids_slugs_used_on_other_days(repo: PostRepository):
    first = repo.create("Same", date=date(2024, 6, 1))
    custom = repo.posts_dir / "2024-05-01-renamed.md"
    custom.write_text("---\ntitle: Old\nslug: kept\n---\n", encoding="utf-8")

    second = repo.create("Same", date=date(2024, 7, 1))
    third = repo.create("Kept", date=date(2024, 7, 1))

    assert first.name == "2024-06-01-same.md"
    assert second.name == "2024-07-01-same-2.md"
    assert third.name == "2024-07-01-kept-2.md"


def test_create_rejects_empty_title(repo: PostRepository):
    with pytest.raises(PostValidationError):
        repo.create("   ", date=date(2024, 6, 1))
    assert repo.paths() == []


def test_create_draft(repo: PostRepository):
    path = repo.create("Later", date=date(2024, 6, 1), draft=True, excerpt="Soon.")
    text = path.read_text(encoding="utf-8")
    assert "draft: true" in text
    assert "excerpt: Soon." in text
