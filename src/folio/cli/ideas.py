"""``folio ideas``: manage the post ideas listed in the notes file."""

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from folio.cli._state import get_state
from folio.cli.errorhandler import handle_cli_errors
from folio.config.settings import parse_date_arg
from folio.content.notes import Notes, promote_idea
from folio.content.repository import PostRepository

console = Console()

ideas_app = typer.Typer(
    name="ideas",
    help="List, add and promote post ideas kept in the README",
    no_args_is_help=True,
)


def _load_notes(ctx: typer.Context):
    config, root = get_state(ctx).load()
    notes = Notes.load(config.notes_path(root), ideas_heading=config.notes.ideas_heading)
    return config, root, notes


@ideas_app.command("list")
def list_ideas(ctx: typer.Context) -> None:
    """Show the numbered post ideas."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        _, _, notes = _load_notes(ctx)
        ideas = notes.ideas
        if not ideas:
            console.print(f"[dim]No ideas under '{notes.ideas_heading}' in {notes.path.name}.[/dim]")
            return
        for number, idea in enumerate(ideas, start=1):
            console.print(f"[cyan]{number:>3}[/cyan]  {escape(idea)}", highlight=False)


@ideas_app.command("add")
def add_idea(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="The idea, one line")],
) -> None:
    """Append an idea to the notes file."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        _, _, notes = _load_notes(ctx)
        notes.add_idea(text)
        notes.save()
        console.print(f"[green]Added idea #{len(notes.ideas)}[/green]")


@ideas_app.command("promote")
def promote(
    ctx: typer.Context,
    index: Annotated[int, typer.Argument(help="Idea number from 'folio ideas list'")],
    date: Annotated[str | None, typer.Option("--date", help="Post date (YYYY-MM-DD), default today")] = None,
) -> None:
    """Turn an idea into a draft post and remove it from the notes."""
    with handle_cli_errors(debug=get_state(ctx).debug):
        config, root, notes = _load_notes(ctx)
        repository = PostRepository(config.posts_path(root), permalink=config.build.permalink)
        post_date = parse_date_arg(date) if date else None
        path = promote_idea(notes, repository, index, date=post_date)
        console.print(f"[green]Created draft[/green] {path.relative_to(root)}")
