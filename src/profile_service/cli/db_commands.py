"""Database CLI commands."""

import typer
from rich.console import Console

console = Console()

db_app = typer.Typer(help="Database commands")


@db_app.command("init")
def init_command() -> None:
    """Create the users table if it does not exist."""
    from src.profile_service.runtime.init_db import init_db

    try:
        init_db()
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]✅ Database initialized[/green]")
