"""
Explicit repository context.

No repository handle is cached across calls: every operation asks its
RepoContext for a fresh `git.Repo` and closes it when done, so a stale
index or ref snapshot can never leak from one call into the next.
"""

from __future__ import annotations

import logging
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import GitCommandError

from gitix.core.errors import PathOutsideRepositoryError, RepositoryAccessError
from gitix.core.git_cli import GitRunner

logger = logging.getLogger(__name__)


class RepoContext:
    """
    Where to find the repository an operation works on.

    The context only stores the start path; discovery (walking up to the
    enclosing working tree) happens on every `open()`.

    Example:
        >>> context = RepoContext(Path("."))
        >>> with context.open() as repo:
        ...     print(repo.working_tree_dir)
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or Path.cwd()).resolve()

    def open(self) -> Repo:
        """
        Open the repository enclosing the context path.

        Returns:
            A new git.Repo; close it (or use it as a context manager).

        Raises:
            RepositoryAccessError: If no repository encloses the path, or
                the repository has no working tree.
        """
        try:
            repo = Repo(self.path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryAccessError(f"Not a git repository: {self.path}") from e

        if repo.bare or repo.working_tree_dir is None:
            repo.close()
            raise RepositoryAccessError(f"Repository has no working tree: {self.path}")
        return repo

    def is_repository(self) -> bool:
        """Check whether the context path is inside a working tree."""
        try:
            self.open().close()
        except RepositoryAccessError:
            return False
        return True

    def git(self) -> GitRunner:
        """External git runner rooted at the context path."""
        return GitRunner(self.path)


def is_unborn(repo: Repo) -> bool:
    """True when HEAD points at a branch that has no commits yet."""
    return not repo.head.is_valid()


def relative_path(repo: Repo, path: str | Path) -> str:
    """
    Resolve a user-supplied path to a repository-relative POSIX path.

    Relative paths are taken relative to the working tree root.

    Raises:
        PathOutsideRepositoryError: If the path escapes the working tree.
    """
    root = Path(str(repo.working_tree_dir)).resolve()
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = root / candidate

    # Resolve the parent only so a symlink at the path itself is staged as a link
    resolved = candidate.parent.resolve() / candidate.name
    try:
        rel = resolved.relative_to(root)
    except ValueError as e:
        raise PathOutsideRepositoryError(f"Path is outside the repository: {path}") from e

    if not rel.parts or rel.parts[0] == ".git":
        raise PathOutsideRepositoryError(f"Not a working tree file: {path}")
    return rel.as_posix()


def init_repository(path: Path) -> Path:
    """
    Create a new repository at path.

    Returns:
        The working tree root of the new repository.

    Raises:
        RepositoryAccessError: If initialisation fails.
    """
    try:
        repo = Repo.init(path)
    except (OSError, GitCommandError) as e:
        raise RepositoryAccessError(f"Failed to initialise repository at {path}: {e}") from e

    with repo:
        root = Path(str(repo.working_tree_dir))
    logger.info("Initialised repository at %s", root)
    return root
