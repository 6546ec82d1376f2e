"""
Standardized error handling and exit codes for the gitix CLI.
"""

from __future__ import annotations

from enum import IntEnum
from typing import NoReturn

import typer
from rich.console import Console

from gitix.core.errors import (
    AuthenticationError,
    IdentityNotConfiguredError,
    NothingToCommitError,
    RepositoryAccessError,
)
from gitix.core.repo import RepoContext

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for gitix CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """A git operation failed."""

    USER_ERROR = 2
    """Invalid input or arguments (actionable by user)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Not a git repository",
        ...     solution="gitix init",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def _solution_for(error: Exception) -> str | None:
    if isinstance(error, RepositoryAccessError):
        return "gitix init  # or cd into a repository"
    if isinstance(error, IdentityNotConfiguredError):
        return 'gitix config set-name "Your Name" && gitix config set-email you@example.com'
    if isinstance(error, NothingToCommitError):
        return "gitix stage PATH  # or gitix stage --all"
    if isinstance(error, AuthenticationError):
        return "start ssh-agent or configure a git credential helper"
    return None


def handle_error(error: Exception) -> NoReturn:
    """
    Report an error from the core and exit.

    Value errors (bad paths, bad messages, bad config values) exit with
    USER_ERROR; everything else with GENERAL_ERROR.
    """
    print_error(str(error), solution=_solution_for(error))
    if isinstance(error, ValueError):
        raise typer.Exit(ExitCode.USER_ERROR)
    raise typer.Exit(ExitCode.GENERAL_ERROR)


def get_repo_context(ctx: typer.Context) -> RepoContext:
    """RepoContext chosen by the global --repo option."""
    obj = ctx.obj or {}
    return obj.get("context") or RepoContext()
