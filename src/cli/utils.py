"""Shared CLI helpers."""

from functools import lru_cache

import typer
from rich.console import Console

from src.taskflow.core.errors import IdentityError
from src.taskflow.core.services import DbSessionService

console = Console()


@lru_cache(maxsize=1)
def get_database_service() -> DbSessionService:
    """Database service built from the current configuration."""
    return DbSessionService()


def fail(message: str, error: Exception | None = None) -> typer.Exit:
    """Print an error and return the exit to raise."""
    if isinstance(error, IdentityError):
        details = "".join(f" {k}={v}" for k, v in error.extra.items())
        console.print(f"[red]❌ {message}: {error.code}{details}[/red]")
    elif error is not None:
        console.print(f"[red]❌ {message}: {error}[/red]")
    else:
        console.print(f"[red]❌ {message}[/red]")
    return typer.Exit(code=1)
