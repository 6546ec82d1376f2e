"""
gitix CLI - Working tree commands.

status, stage, unstage, commit, template and init.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from gitix.cli.errors import ExitCode, get_repo_context, handle_error, print_error
from gitix.core.commit import CONVENTIONAL_COMMIT_TEMPLATE, CommitService
from gitix.core.errors import GitixError
from gitix.core.repo import init_repository
from gitix.core.staging import StagingController, StagingReport
from gitix.core.status import FileStatusKind, StatusEngine, format_file_size

console = Console()

KIND_STYLES = {
    FileStatusKind.MODIFIED: "yellow",
    FileStatusKind.ADDED: "green",
    FileStatusKind.DELETED: "red",
    FileStatusKind.UNTRACKED: "dim",
    FileStatusKind.RENAMED: "cyan",
    FileStatusKind.TYPE_CHANGED: "magenta",
}


def status(ctx: typer.Context) -> None:
    """
    Show changed files in the working tree and index.

    Examples:

        gitix status

        gitix --repo ~/src/project status
    """
    try:
        records = StatusEngine(get_repo_context(ctx)).compute_status()
    except GitixError as e:
        handle_error(e)

    if not records:
        console.print("[green]Working tree clean[/green]")
        return

    table = Table(title="Status")
    table.add_column("", width=1)
    table.add_column("Path", style="bold")
    table.add_column("Change")
    table.add_column("Staged", justify="center")
    table.add_column("Size", justify="right")

    for record in records:
        style = KIND_STYLES.get(record.kind, "white")
        path = record.path
        if record.renamed_from:
            path = f"{record.renamed_from} → {record.path}"
        table.add_row(
            f"[{style}]{record.kind.symbol}[/{style}]",
            path,
            f"[{style}]{record.kind.description}[/{style}]",
            "[green]✓[/green]" if record.staged else "",
            format_file_size(record.size),
        )

    console.print(table)
    staged = sum(1 for record in records if record.staged)
    console.print(f"[dim]{len(records)} changed, {staged} staged[/dim]")


def _print_report(report: StagingReport) -> None:
    if report.success:
        console.print(f"[green]{report.summary()}[/green]")
        return
    console.print(f"[yellow]{report.summary()}[/yellow]")
    for path, message in report.failed.items():
        console.print(f"  [red]✗[/red] {path}: {message}")
    raise typer.Exit(ExitCode.GENERAL_ERROR)


def stage(
    ctx: typer.Context,
    paths: list[str] | None = typer.Argument(None, help="Paths to stage"),
    all_paths: bool = typer.Option(False, "--all", "-a", help="Stage every changed path"),
) -> None:
    """
    Stage paths for the next commit.

    Examples:

        gitix stage src/app.py README.md

        gitix stage --all
    """
    if not paths and not all_paths:
        print_error("Nothing to stage", solution="gitix stage PATH...  # or --all")
        raise typer.Exit(ExitCode.USER_ERROR)

    controller = StagingController(get_repo_context(ctx))
    try:
        if all_paths:
            _print_report(controller.stage_all())
            return
        for path in paths or []:
            controller.stage(path)
            console.print(f"[green]Staged[/green] {path}")
    except GitixError as e:
        handle_error(e)


def unstage(
    ctx: typer.Context,
    paths: list[str] | None = typer.Argument(None, help="Paths to unstage"),
    all_paths: bool = typer.Option(False, "--all", "-a", help="Unstage every staged path"),
) -> None:
    """
    Remove paths from the staging area, keeping working tree changes.

    Examples:

        gitix unstage src/app.py

        gitix unstage --all
    """
    if not paths and not all_paths:
        print_error("Nothing to unstage", solution="gitix unstage PATH...  # or --all")
        raise typer.Exit(ExitCode.USER_ERROR)

    controller = StagingController(get_repo_context(ctx))
    try:
        if all_paths:
            _print_report(controller.unstage_all())
            return
        for path in paths or []:
            controller.unstage(path)
            console.print(f"[green]Unstaged[/green] {path}")
    except GitixError as e:
        handle_error(e)


def commit(
    ctx: typer.Context,
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
) -> None:
    """
    Commit the staged changes.

    Lines starting with '#' are dropped from the message.

    Examples:

        gitix commit -m "feat: add login form"
    """
    try:
        sha = CommitService(get_repo_context(ctx)).commit(message)
    except (GitixError, ValueError) as e:
        handle_error(e)
    console.print(f"[green]Committed[/green] {sha[:7]}")


def template() -> None:
    """Print the conventional commit message template."""
    typer.echo(CONVENTIONAL_COMMIT_TEMPLATE)


def init(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="Directory to initialise (default: --repo or cwd)"),
) -> None:
    """
    Initialise a new git repository.

    Examples:

        gitix init

        gitix init ~/src/new-project
    """
    target = path or get_repo_context(ctx).path
    try:
        root = init_repository(target)
    except GitixError as e:
        handle_error(e)
    console.print(f"[green]Initialised empty repository in[/green] {root}")
