"""Content-integrity checks for post files."""

from folio.lint.checks import SiteLinter, lint_site
from folio.lint.report import Issue, LintReport, Severity

__all__ = ["Issue", "LintReport", "Severity", "SiteLinter", "lint_site"]
