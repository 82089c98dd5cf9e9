from datetime import date
from pathlib import Path

import pytest

from folio.content.exceptions import FrontmatterError, PostValidationError
from folio.content.post import Post, sort_newest_first, split_post_filename

VALID = """---
title: Testing without mocks
date: 2024-05-01
excerpt: Fakes beat mocks for most collaborators.
tags: [testing, design]
---

Some words here.
"""


def test_from_text_reads_required_fields():
    post = Post.from_text(VALID)
    assert post.title == "Testing without mocks"
    assert post.date == date(2024, 5, 1)
    assert post.excerpt == "Fakes beat mocks for most collaborators."
    assert post.tags == ("testing", "design")
    assert post.body == "Some words here.\n"
    assert post.draft is False


def test_slug_defaults_to_title():
    assert Post.from_text(VALID).slug == "testing-without-mocks"


def test_slug_comes_from_filename_before_title():
    post = Post.from_text(VALID, source=Path("posts/2024-05-01-no-mocks.md"))
    assert post.slug == "no-mocks"


def test_explicit_slug_wins_and_is_normalized():
    text = VALID.replace("tags:", "slug: Custom Slug!\ntags:")
    post = Post.from_text(text, source=Path("2024-05-01-other.md"))
    assert post.slug == "custom-slug"


def test_missing_fields_are_all_reported():
    with pytest.raises(PostValidationError) as exc_info:
        Post.from_text("---\ndate: 2024-05-01\n---\nBody", source=Path("2024-05-01-x.md"))
    fields = {field for field, _ in exc_info.value.errors}
    assert {"title", "excerpt"} <= fields
    assert "date" not in fields


def test_malformed_fields_are_reported():
    text = "---\ntitle: 42\ndate: '2024-13-45'\nexcerpt: '   '\ndraft: maybe\n---\n"
    with pytest.raises(PostValidationError) as exc_info:
        Post.from_text(text, source=Path("2024-01-01-x.md"))
    messages = dict(exc_info.value.errors)
    assert set(messages) == {"title", "date", "excerpt", "draft"}
    assert "must be a string" in messages["title"]
    assert "must not be empty" in messages["excerpt"]


def test_missing_front_matter_raises():
    with pytest.raises(FrontmatterError):
        Post.from_text("# Just a heading\n")


def test_string_date_and_comma_tags():
    text = "---\ntitle: T\ndate: '2023-12-31T23:00:00'\nexcerpt: E\ntags: ' a, b ,a,, '\n---\n"
    post = Post.from_text(text)
    assert post.date == date(2023, 12, 31)
    assert post.tags == ("a", "b")


def test_url_path_uses_permalink():
    post = Post.from_text(VALID)
    assert post.url_path() == "2024/05/01/testing-without-mocks/"
    assert post.url_path("posts/{slug}/") == "posts/testing-without-mocks/"


def test_filename_and_reading_time():
    post = Post.from_text(VALID.replace("Some words here.", "word " * 401))
    assert post.filename == "2024-05-01-testing-without-mocks.md"
    assert post.word_count == 401
    assert post.reading_minutes == 3


def test_to_text_round_trip_keeps_extra_keys():
    text = VALID.replace("tags:", "author: Sam\ntags:")
    post = Post.from_text(text)
    assert post.extra == {"author": "Sam"}

    again = Post.from_text(post.to_text())
    assert again == post
    assert list(again.metadata()) == ["title", "date", "excerpt", "tags", "author"]


def test_from_file(tmp_path: Path):
    path = tmp_path / "2024-05-01-from-disk.md"
    path.write_text(VALID, encoding="utf-8")
    post = Post.from_file(path)
    assert post.source == path
    assert post.slug == "from-disk"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("2024-05-01-hello-world.md", (date(2024, 5, 1), "hello-world")),
        ("2024-02-30-bad-day.md", (None, "bad-day")),
        ("notes.md", (None, "notes")),
    ],
)
def test_split_post_filename(name, expected):
    assert split_post_filename(name) == expected


def test_sort_newest_first_breaks_ties_by_slug():
    posts = [
        Post.from_text(VALID.replace("2024-05-01", "2024-01-01"), source=Path("2024-01-01-a.md")),
        Post.from_text(VALID, source=Path("2024-05-01-b.md")),
        Post.from_text(VALID, source=Path("2024-05-01-a.md")),
    ]
    assert [post.slug for post in sort_newest_first(posts)] == ["a", "b", "a"]
    assert [post.date.month for post in sort_newest_first(posts)] == [5, 5, 1]


def test_unquoted_impossible_date_is_a_field_error():
    with pytest.raises(PostValidationError) as exc_info:
        Post.from_text("---\ntitle: T\ndate: 2024-13-45\nexcerpt: E\n---\n")
    assert [field for field, _ in exc_info.value.errors] == ["date"]


def test_round_trip_keeps_leading_indented_code():
    post = Post.from_metadata(
        {"title": "Snippet", "date": "2024-01-01", "excerpt": "Code first."},
        "    indented code\n\nprose\n",
    )
    again = Post.from_text(post.to_text())
    assert again.body == "    indented code\n\nprose\n"
