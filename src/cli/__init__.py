"""Main CLI application module."""

import typer

from .account_commands import accounts_app
from .db_commands import db_app
from .server_commands import serve

# Create the main CLI application
app = typer.Typer(
    help="TaskFlow identity service CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.add_typer(accounts_app, name="accounts")
app.command(name="serve")(serve)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
