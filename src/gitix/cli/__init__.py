"""
gitix CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console

from gitix import __version__
from gitix.cli import config, sync, worktree
from gitix.core.repo import RepoContext

PANEL_WORKTREE = "Working Tree"
PANEL_REMOTE = "Remote"
PANEL_SETUP = "Setup"

app = typer.Typer(
    name="gitix",
    help="Stage, commit and sync git repositories",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-C",
        help="Run as if started in this directory",
    ),
) -> None:
    """
    gitix - a small git client.

    Quick Start:
        gitix status                 # What changed?
        gitix stage --all            # Stage everything
        gitix commit -m "feat: x"    # Commit it
        gitix pull && gitix push     # Sync with origin
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = {"debug": debug, "context": RepoContext(repo)}


app.command(name="status", rich_help_panel=PANEL_WORKTREE)(worktree.status)
app.command(name="stage", rich_help_panel=PANEL_WORKTREE)(worktree.stage)
app.command(name="unstage", rich_help_panel=PANEL_WORKTREE)(worktree.unstage)
app.command(name="commit", rich_help_panel=PANEL_WORKTREE)(worktree.commit)
app.command(name="template", rich_help_panel=PANEL_WORKTREE)(worktree.template)

app.command(name="fetch", rich_help_panel=PANEL_REMOTE)(sync.fetch)
app.command(name="pull", rich_help_panel=PANEL_REMOTE)(sync.pull)
app.command(name="push", rich_help_panel=PANEL_REMOTE)(sync.push)
app.command(name="refresh", rich_help_panel=PANEL_REMOTE)(sync.refresh)

app.command(name="init", rich_help_panel=PANEL_SETUP)(worktree.init)
app.add_typer(config.app, name="config", rich_help_panel=PANEL_SETUP)


@app.command(rich_help_panel=PANEL_SETUP)
def version() -> None:
    """Show gitix version and exit."""
    console.print(f"gitix version {__version__}")


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
