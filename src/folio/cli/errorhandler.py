"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console

from folio.config.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from folio.content.exceptions import ContentError, IdeaNotFoundError, PostValidationError
from folio.init.exceptions import ScaffoldingError
from folio.rendering.exceptions import BuildError, RenderingError, UnsafeOutputDirError
from folio.utils.paths import PathTraversalError

console = Console(stderr=True)


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise so the full traceback is shown.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit, typer.Abort):
        raise
    except ConfigNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]📁 Not a Folio site:[/bold red] {e}")
        console.print("Run [cyan]folio init DIR[/cyan] or pass [cyan]--site PATH[/cyan].")
        raise typer.Exit(1) from e
    except ConfigValidationError as e:
        if debug:
            raise
        console.print(f"[bold red]⚙️ Invalid Configuration:[/bold red] {e.path or 'command-line options'}")
        for error in e.errors:
            loc = " -> ".join(str(part) for part in error.get("loc", ()))
            console.print(f"  - {loc}: {error.get('msg', '')}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]⚙️ Configuration Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except PostValidationError as e:
        if debug:
            raise
        console.print(f"[bold red]📝 Invalid Post:[/bold red] {e.source or 'post'}")
        for field_name, message in e.errors:
            console.print(f"  - {field_name}: {message}")
        raise typer.Exit(1) from e
    except IdeaNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]💡 Unknown Idea:[/bold red] {e}")
        console.print("Run [cyan]folio ideas list[/cyan] to see the numbered ideas.")
        raise typer.Exit(1) from e
    except ContentError as e:
        if debug:
            raise
        console.print(f"[bold red]📝 Content Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except UnsafeOutputDirError as e:
        if debug:
            raise
        console.print(f"[bold red]🛑 Unsafe Output Directory:[/bold red] {e}")
        console.print("Set [bold]paths.output_dir[/bold] to a dedicated directory such as [cyan]_site[/cyan].")
        raise typer.Exit(1) from e
    except BuildError as e:
        if debug:
            raise
        console.print(f"[bold red]🏗️ Build Failed:[/bold red] {e}")
        raise typer.Exit(1) from e
    except RenderingError as e:
        if debug:
            raise
        console.print(f"[bold red]🎨 Rendering Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except ScaffoldingError as e:
        if debug:
            raise
        console.print(f"[bold red]🛠️ Initialization Failed:[/bold red] {e}")
        raise typer.Exit(1) from e
    except PathTraversalError as e:
        if debug:
            raise
        console.print(f"[bold red]🚫 Unsafe Path:[/bold red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        if debug:
            console.print_exception(show_locals=False)
            raise typer.Exit(1) from e

        console.print(f"[bold red]💥 An unexpected error occurred:[/bold red] {e}")
        console.print("[dim]Run with [bold]--debug[/bold] for more details.[/dim]")
        raise typer.Exit(1) from e
