"""
gitix CLI - Config commands.

Read and write the settings gitix keeps in the repository's git config.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from gitix.cli.errors import get_repo_context, handle_error
from gitix.core.config import (
    load_settings,
    parse_bool,
    set_pull_rebase,
    set_user_email,
    set_user_name,
)
from gitix.core.errors import GitixError

app = typer.Typer(
    name="config",
    help="Show and change gitix settings",
    no_args_is_help=True,
)

console = Console()


@app.command()
def show(ctx: typer.Context) -> None:
    """Show identity and pull settings."""
    try:
        settings = load_settings(get_repo_context(ctx))
    except GitixError as e:
        handle_error(e)

    table = Table(title="Configuration", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("user.name", settings.user_name or "[dim](not set)[/dim]")
    table.add_row("user.email", settings.user_email or "[dim](not set)[/dim]")
    table.add_row("gitix.pull.rebase", "true" if settings.pull_rebase else "false")
    console.print(table)


@app.command("set-name")
def set_name(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Author name for commits"),
) -> None:
    """Set user.name in the repository config."""
    try:
        set_user_name(name, get_repo_context(ctx))
    except GitixError as e:
        handle_error(e)
    console.print(f"[green]user.name set to[/green] {name.strip()}")


@app.command("set-email")
def set_email(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Author email for commits"),
) -> None:
    """Set user.email in the repository config."""
    try:
        set_user_email(email, get_repo_context(ctx))
    except GitixError as e:
        handle_error(e)
    console.print(f"[green]user.email set to[/green] {email.strip()}")


@app.command("set-pull-rebase")
def set_pull_rebase_command(
    ctx: typer.Context,
    value: str = typer.Argument(..., help="true to rebase on pull, false to merge"),
) -> None:
    """Set gitix.pull.rebase in the repository config."""
    try:
        enabled = parse_bool(value)
        set_pull_rebase(enabled, get_repo_context(ctx))
    except GitixError as e:
        handle_error(e)
    console.print(f"[green]gitix.pull.rebase set to[/green] {'true' if enabled else 'false'}")
