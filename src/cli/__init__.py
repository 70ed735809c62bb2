"""Main CLI application module."""

import typer

from .db_commands import db_app
from .mode_commands import mode_app
from .server_commands import serve

app = typer.Typer(
    help="Product API CLI - run the server, manage the store and the execution mode",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="serve")(serve)
app.add_typer(db_app, name="db")
app.add_typer(mode_app, name="mode")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
