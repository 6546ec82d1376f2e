"""
gitix CLI - Remote sync commands.

fetch, pull, push and refresh against the origin remote.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from gitix.cli.errors import ExitCode, get_repo_context, handle_error, print_error
from gitix.core.config import load_settings
from gitix.core.errors import GitixError
from gitix.core.sync import RemoteStatus, RemoteSyncController, SyncOperation

console = Console()


def _controller(ctx: typer.Context, remote: str) -> RemoteSyncController:
    return RemoteSyncController(get_repo_context(ctx), remote_name=remote)


def _report(operation: SyncOperation) -> None:
    if operation.succeeded:
        console.print(f"[green]✓[/green] {operation.message}")
        return
    print_error(operation.message)
    raise typer.Exit(ExitCode.GENERAL_ERROR)


def _print_remote_status(status: RemoteStatus) -> None:
    table = Table(title=f"Remote: {status.name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("URL", status.url or "[dim]-[/dim]")
    table.add_row("Ahead", str(status.ahead))
    table.add_row("Behind", str(status.behind))
    last_fetch = status.last_fetch.strftime("%Y-%m-%d %H:%M:%S") if status.last_fetch else "never"
    table.add_row("Last fetch", last_fetch)

    console.print(table)


def fetch(
    ctx: typer.Context,
    remote: str = typer.Option(RemoteSyncController.DEFAULT_REMOTE, "--remote", help="Remote name"),
) -> None:
    """Download objects and refs from the remote."""
    _report(_controller(ctx, remote).fetch())


def pull(
    ctx: typer.Context,
    rebase: bool | None = typer.Option(
        None,
        "--rebase/--merge",
        help="Rebase local commits or merge (default: gitix.pull.rebase)",
    ),
    remote: str = typer.Option(RemoteSyncController.DEFAULT_REMOTE, "--remote", help="Remote name"),
) -> None:
    """
    Fetch and integrate the remote branch.

    Examples:

        gitix pull

        gitix pull --rebase
    """
    context = get_repo_context(ctx)
    if rebase is None:
        try:
            rebase = load_settings(context).pull_rebase
        except GitixError as e:
            handle_error(e)
    _report(RemoteSyncController(context, remote_name=remote).pull(rebase=rebase))


def push(
    ctx: typer.Context,
    remote: str = typer.Option(RemoteSyncController.DEFAULT_REMOTE, "--remote", help="Remote name"),
) -> None:
    """Push the current branch to the same-named remote branch."""
    _report(_controller(ctx, remote).push())


def refresh(
    ctx: typer.Context,
    remote: str = typer.Option(RemoteSyncController.DEFAULT_REMOTE, "--remote", help="Remote name"),
) -> None:
    """Fetch, then show how far ahead and behind the branch is."""
    controller = _controller(ctx, remote)
    operation = controller.refresh()
    if operation.succeeded and controller.last_remote_status is not None:
        _print_remote_status(controller.last_remote_status)
    _report(operation)
