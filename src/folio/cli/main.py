"""Main Typer application for Folio."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from folio.cli._state import CliState, get_state
from folio.cli.errorhandler import handle_cli_errors
from folio.cli.ideas import ideas_app
from folio.config.settings import FolioConfig, parse_date_arg
from folio.content.repository import PostRepository
from folio.init import scaffold_site
from folio.lint import Severity, lint_site
from folio.logging_setup import configure_logging
from folio.rendering import SiteBuilder

app = typer.Typer(
    name="folio",
    help="Publish a directory of Markdown posts as a static site",
    add_completion=False,
    no_args_is_help=True,
)
app.add_typer(ideas_app)

console = Console()
logger = logging.getLogger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    site: Annotated[
        Path | None,
        typer.Option("--site", "-s", help="Site root (default: nearest directory with .folio/folio.toml)"),
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Verbose logging and full tracebacks")] = False,
) -> None:
    """Folio command line."""
    configure_logging(debug=debug)
    ctx.obj = CliState(site=site, debug=debug)


@app.command()
def init(
    ctx: typer.Context,
    output_dir: Annotated[Path, typer.Argument(help="Directory for the new site (e.g., 'my-blog')")],
    name: Annotated[str | None, typer.Option("--name", "-n", help="Site name (default: directory name)")] = None,
) -> None:
    """Create a new site with a config, a welcome post and a README."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        site_root = output_dir.expanduser().resolve()
        config_path, created = scaffold_site(site_root, site_name=name)
        if created:
            console.print(
                Panel(
                    f"[bold green]✅ Site initialized![/bold green]\n\n"
                    f"📁 Site root: {site_root}\n⚙️  Config: {config_path}\n\n"
                    f"[bold]Next steps:[/bold]\n"
                    f"• [cyan]cd {output_dir}[/cyan]\n"
                    f"• [cyan]folio new \"My first post\"[/cyan]\n"
                    f"• [cyan]folio build[/cyan]",
                    title="🛠️ Initialization Complete",
                    border_style="green",
                )
            )
        else:
            console.print(
                Panel(
                    f"[bold yellow]⚠️ A site already exists at {site_root}[/bold yellow]\n\n"
                    f"Missing directories were created; existing files were left alone.",
                    title="📁 Site Exists",
                    border_style="yellow",
                )
            )


@app.command()
def new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Post title")],
    date: Annotated[str | None, typer.Option("--date", "-d", help="Post date (YYYY-MM-DD), default today")] = None,
    excerpt: Annotated[str, typer.Option("--excerpt", "-e", help="One-line summary")] = "",
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable)")] = None,
    slug: Annotated[str | None, typer.Option("--slug", help="Slug (default: from title)")] = None,
    draft: Annotated[bool, typer.Option("--draft", help="Mark the post as a draft")] = False,
) -> None:
    """Create a new post file."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        config, root = get_state(ctx).load()
        repository = PostRepository(config.posts_path(root), permalink=config.build.permalink)
        path = repository.create(
            title,
            date=parse_date_arg(date) if date else None,
            excerpt=excerpt,
            tags=tag or (),
            draft=draft,
            slug=slug,
        )
        console.print(str(path.relative_to(root)))


@app.command("list")
def list_posts(
    ctx: typer.Context,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include drafts")] = False,
) -> None:
    """List posts, newest first."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        config, root = get_state(ctx).load()
        repository = PostRepository(config.posts_path(root), permalink=config.build.permalink)
        loaded = repository.load_all(include_drafts=drafts)

        table = Table(title=f"{config.site.name} ({len(loaded)} posts)")
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("Slug", style="magenta")
        table.add_column("Title")
        table.add_column("Tags", style="dim")
        for post in loaded:
            title = f"{post.title} [yellow](draft)[/yellow]" if post.draft else post.title
            table.add_row(post.date.isoformat(), post.slug, title, ", ".join(post.tags))
        console.print(table)

        if loaded.failures:
            console.print(f"[yellow]{len(loaded.failures)} file(s) could not be loaded; run 'folio check'.[/yellow]")


@app.command()
def build(
    ctx: typer.Context,
    drafts: Annotated[bool, typer.Option("--drafts", help="Publish drafts too")] = False,
    strict: Annotated[bool, typer.Option("--strict", help="Fail instead of skipping broken posts")] = False,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output directory, relative to the site root")
    ] = None,
) -> None:
    """Render the site into the output directory."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        config, root = get_state(ctx).load()
        config = FolioConfig.from_cli_overrides(config, output_dir=output)
        report = SiteBuilder(config, root).build(include_drafts=drafts, strict=strict)

        console.print(
            f"[green]Built {report.page_count} file(s) from {len(report.posts)} post(s)[/green] "
            f"into {report.output_dir} in {report.elapsed:.2f}s"
        )
        for failure in report.skipped:
            console.print(f"[yellow]Skipped[/yellow] {failure.path.name}: {failure.error}")


@app.command()
def check(
    ctx: typer.Context,
    warnings: Annotated[bool, typer.Option("--warnings/--no-warnings", help="Show warnings too")] = True,
) -> None:
    """Check posts for broken front matter, duplicates and dead links."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        config, root = get_state(ctx).load()
        report = lint_site(config, root)

    minimum = Severity.WARNING if warnings else Severity.ERROR
    for issue in report.filter(minimum):
        color = "red" if issue.severity is Severity.ERROR else "yellow"
        console.print(f"{escape(issue.location)}: [{color}]{issue.code}[/{color}] {escape(issue.message)}", highlight=False)

    summary = f"{report.files_checked} file(s) checked: {len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    if report.ok:
        console.print(f"[green]✓[/green] {summary}")
        return
    console.print(f"[red]✗[/red] {summary}")
    raise typer.Exit(1)
