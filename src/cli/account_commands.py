"""Account administration commands."""

import typer
from rich.table import Table

from src.taskflow.core.errors import IdentityError
from src.taskflow.core.models.account_view import AccountView
from src.taskflow.core.services import (
    AccountResolver,
    IdentityStore,
    RoleAssignmentService,
    SessionIssuer,
)
from src.taskflow.entities.core.account import Account, ProfileFields

from .utils import console, fail, get_database_service

accounts_app = typer.Typer(help="Inspect and administer accounts")


def _store() -> IdentityStore:
    return IdentityStore(get_database_service())


def _resolve(public_id: str) -> Account:
    try:
        return AccountResolver(_store()).resolve_by_public_id(public_id)
    except IdentityError as e:
        raise fail(f"Cannot resolve '{public_id}'", e) from e


def _print_account(account: Account) -> None:
    view = AccountView.from_account(account)
    table = Table(title=f"Account {view.id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in view.to_response().items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@accounts_app.command("show")
def show(
    public_ids: list[str] = typer.Argument(..., help="tg_<id> or internal ids"),
) -> None:
    """Show one or more accounts."""
    if len(public_ids) == 1:
        _print_account(_resolve(public_ids[0]))
        return

    try:
        accounts = AccountResolver(_store()).resolve_many(public_ids)
    except IdentityError as e:
        raise fail("Lookup failed", e) from e
    if not accounts:
        console.print("[yellow]No matching accounts[/yellow]")
        return

    table = Table(title="Accounts")
    table.add_column("ID", style="cyan")
    table.add_column("Role", style="yellow")
    table.add_column("Name", style="green")
    table.add_column("Internal ID", style="dim")
    for account in accounts:
        view = AccountView.from_account(account)
        table.add_row(view.id, view.role, view.full_name, view.internal_id)
    console.print(table)
    console.print(f"\n[green]Found {len(accounts)} of {len(public_ids)}[/green]")


@accounts_app.command("create")
def create(
    full_name: str = typer.Option("", "--full-name", "-n", help="Display name"),
    username: str = typer.Option("", "--username", "-u", help="Handle"),
) -> None:
    """Create an account with no Telegram identity."""
    try:
        account = _store().create_account(
            ProfileFields(full_name=full_name, username=username)
        )
    except IdentityError as e:
        raise fail("Failed to create account", e) from e
    console.print(f"[green]✅ Created account {account.id}[/green]")
    _print_account(account)


@accounts_app.command("issue-token")
def issue_token(
    public_id: str = typer.Argument(..., help="tg_<id> or internal id"),
    ttl: int | None = typer.Option(None, "--ttl", min=1, help="Lifetime in seconds"),
) -> None:
    """Mint a session token for an account."""
    account = _resolve(public_id)
    try:
        token = SessionIssuer().issue(
            account.id, account.telegram_user_id, expires_in_seconds=ttl
        )
    except IdentityError as e:
        raise fail("Cannot issue token", e) from e
    # bare token on stdout so it can be piped
    typer.echo(token)


@accounts_app.command("set-role")
def set_role(
    public_id: str = typer.Argument(..., help="tg_<id> or internal id"),
    role: str = typer.Argument(..., help="customer or executor"),
) -> None:
    """Assign the account's role (only once)."""
    account = _resolve(public_id)
    try:
        assigned = RoleAssignmentService(_store()).assign(account.id, role)
    except IdentityError as e:
        raise fail(f"Cannot set role for '{public_id}'", e) from e
    console.print(f"[green]✅ Role is {assigned.value}[/green]")
