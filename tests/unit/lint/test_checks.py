from pathlib import Path

import pytest

from folio.config.settings import FolioConfig
from folio.lint import lint_site
from folio.lint.report import Issue, LintReport, Severity

META = {"title": "A post", "date": "2024-03-01", "excerpt": "Short."}


def _codes(report: LintReport) -> list[str]:
    return [issue.code for issue in report.issues]


def test_fresh_scaffold_is_clean(site_root: Path, config: FolioConfig):
    report = lint_site(config, site_root)

    assert report.issues == []
    assert report.files_checked == 1
    assert report.ok


def test_unparsable_front_matter(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-bad.md", raw="---\ntitle: [unclosed\n---\n\nBody\n")

    report = lint_site(config, empty_site)

    assert _codes(report) == ["FM001"]
    issue = report.issues[0]
    assert issue.severity is Severity.ERROR
    assert issue.path == Path("posts/2024-03-01-bad.md")


def test_missing_front_matter(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-bare.md", raw="Just text.\n")

    report = lint_site(config, empty_site)

    assert _codes(report) == ["FM001"]
    assert report.issues[0].line == 1


def test_missing_required_fields_are_all_reported(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-partial.md", title="Partial", date="2024-03-01")
    write_post("2024-03-02-baddate.md", title="Bad", date="March", excerpt="e")

    report = lint_site(config, empty_site)

    assert _codes(report) == ["FM002", "FM002"]
    messages = [issue.message for issue in report.issues]
    assert messages[0].startswith("excerpt")
    assert messages[1].startswith("date")
    # "date:" is the third line of the file
    assert report.issues[1].line == 3


def test_impossible_date_is_a_field_error(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-a-post.md", raw="---\ntitle: A post\ndate: 2024-13-45\nexcerpt: Short.\n---\n\nBody\n")

    report = lint_site(config, empty_site)

    assert _codes(report) == ["FM002"]
    assert report.issues[0].line == 3
    assert "calendar date" in report.issues[0].message


def test_filename_warnings(empty_site: Path, config: FolioConfig, write_post):
    write_post("notes.md", **{**META, "date": "2024-01-01"})
    write_post("2024-02-28-off.md", **{**META, "title": "Off by a day"})

    report = lint_site(config, empty_site)

    by_path = {issue.path.name: issue.code for issue in report.issues}
    assert by_path == {"notes.md": "FM003", "2024-02-28-off.md": "FM004"}
    assert report.ok


def test_unknown_key_warns_unless_allowed(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-a-post.md", **META, author="Sam")

    report = lint_site(config, empty_site)
    assert _codes(report) == ["FM005"]
    assert report.issues[0].line == 5

    config.lint.allowed_keys = ["author"]
    assert lint_site(config, empty_site).issues == []


def test_duplicate_slug_flags_every_file(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-same.md", **META)
    write_post("2024-03-02-same.md", **{**META, "date": "2024-03-02"})

    report = lint_site(config, empty_site)

    assert _codes(report) == ["DUP001", "DUP001"]
    assert "posts/2024-03-02-same.md" in report.issues[0].message
    assert not report.ok


def test_duplicate_date(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-first.md", **META)
    write_post("2024-03-01-second.md", **{**META, "title": "Second"})

    report = lint_site(config, empty_site)
    assert _codes(report) == ["DUP002", "DUP002"]
    assert report.ok

    config.lint.allow_same_day = True
    assert lint_site(config, empty_site).issues == []


def test_broken_links(empty_site: Path, config: FolioConfig, write_post):
    body = "See [that](2024-03-01-a-post.md).\n\n[gone](gone.md) and ![pic](/images/none.png)\n\n`[code](skip.md)`\n"
    write_post("2024-03-02-links.md", body, **{**META, "date": "2024-03-02", "title": "Links"})
    write_post("2024-03-01-a-post.md", **META)

    report = lint_site(config, empty_site)

    assert _codes(report) == ["LNK001", "LNK001"]
    gone, pic = report.issues
    assert "'gone.md'" in gone.message
    assert gone.line == 9
    assert pic.message.startswith("image")


def test_links_to_static_files_resolve(empty_site: Path, config: FolioConfig, write_post):
    (empty_site / "static" / "images").mkdir()
    (empty_site / "static" / "images" / "logo.png").write_bytes(b"png")
    write_post("2024-03-01-a-post.md", "![logo](/images/logo.png)\n", **META)

    assert lint_site(config, empty_site).issues == []


def test_unclosed_fence(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-a-post.md", "Intro.\n\n```python\nx = 1\n", **META)

    report = lint_site(config, empty_site)

    assert _codes(report) == ["MD001"]
    assert report.issues[0].line == 9


def test_long_excerpt(empty_site: Path, config: FolioConfig, write_post):
    config.lint.max_excerpt_length = 10
    write_post("2024-03-01-a-post.md", **{**META, "excerpt": "This excerpt runs on."})

    report = lint_site(config, empty_site)

    assert _codes(report) == ["MD002"]
    assert report.issues[0].line == 4


def test_drafts_are_checked(empty_site: Path, config: FolioConfig, write_post):
    write_post("2024-03-01-draft.md", title="Draft", date="2024-03-01", draft=True)

    assert _codes(lint_site(config, empty_site)) == ["FM002"]


class TestLintReport:
    @pytest.fixture
    def report(self) -> LintReport:
        return LintReport(
            issues=[
                Issue("LNK001", Severity.ERROR, Path("posts/b.md"), "broken", 4),
                Issue("FM003", Severity.WARNING, Path("posts/b.md"), "name"),
                Issue("FM002", Severity.ERROR, Path("posts/a.md"), "missing", 2),
            ],
            files_checked=2,
        )

    def test_sorted_by_path_line_code(self, report: LintReport):
        assert [issue.code for issue in report.issues] == ["FM002", "FM003", "LNK001"]

    def test_filter_by_severity(self, report: LintReport):
        assert len(report.filter()) == 3
        assert [issue.code for issue in report.filter(Severity.ERROR)] == ["FM002", "LNK001"]

    def test_counts_and_ok(self, report: LintReport):
        assert report.counts_by_code() == {"FM002": 1, "FM003": 1, "LNK001": 1}
        assert len(report.warnings) == 1
        assert not report.ok
        assert LintReport().ok

    def test_location(self, report: LintReport):
        assert report.issues[0].location == "posts/a.md:2"
        assert report.issues[1].location == "posts/b.md"
