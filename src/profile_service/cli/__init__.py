"""Main CLI application module."""

import typer

from .db_commands import db_app
from .server_commands import config_command, seed_command, serve_command

app = typer.Typer(
    help="User profile service CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="serve")(serve_command)
app.command(name="seed")(seed_command)
app.command(name="config")(config_command)
app.add_typer(db_app, name="db")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
