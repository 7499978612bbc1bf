"""Database management commands."""

import typer
from sqlalchemy.exc import SQLAlchemyError

from src.taskflow.runtime.context import get_config
from src.taskflow.runtime.init_db import init_db

from .utils import console, fail, get_database_service

db_app = typer.Typer(help="Manage the account database")


@db_app.command("init")
def init() -> None:
    """Create the account and chat-link tables."""
    try:
        init_db(get_database_service().engine)
    except SQLAlchemyError as e:
        raise fail("Failed to initialize database", e) from e
    url = get_config().database.url
    console.print(f"[green]✅ Tables created[/green] [dim]({url.split('@')[-1]})[/dim]")


@db_app.command("check")
def check() -> None:
    """Verify the database answers."""
    if not get_database_service().health_check():
        raise fail("Database is not reachable")
    console.print("[green]✅ Database is reachable[/green]")
