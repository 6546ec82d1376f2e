"""
Error taxonomy for gitix.

Every failure the core can report is a subclass of GitixError, so callers
(the CLI, the UI layer) can catch one type and still branch on the
category when they need to.
"""

from __future__ import annotations


class GitixError(Exception):
    """Base exception for all gitix core failures."""


class RepositoryAccessError(GitixError):
    """Raised when a repository cannot be opened or discovered."""


class ObjectAccessError(GitixError):
    """Raised when a blob, tree or commit cannot be read."""


class IndexIOError(GitixError):
    """Raised when the staging index cannot be read or written."""


class AuthenticationError(GitixError):
    """Raised when no credential provider could authenticate."""


class NetworkError(GitixError):
    """Raised when talking to a remote fails at the transport level."""


class ConflictError(GitixError):
    """Raised when a merge or a replayed commit produces conflicts."""

    def __init__(self, message: str, paths: list[str] | None = None):
        super().__init__(message)
        self.paths = paths or []


class UnbornBranchError(GitixError):
    """Raised when an operation needs a commit but HEAD has none yet."""


class StatusError(GitixError):
    """Raised when every status backend failed."""


class PathOutsideRepositoryError(GitixError, ValueError):
    """Raised when a path does not resolve inside the working tree."""


class IdentityNotConfiguredError(GitixError):
    """Raised when user.name or user.email is missing for a commit."""


class NothingToCommitError(GitixError):
    """Raised when a commit is requested with an empty staging area."""


class GitError(GitixError):
    """Raised when an external git invocation fails."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class PathNotFoundError(GitixError, FileNotFoundError):
    """Raised when a path exists in neither the working tree nor the index."""


class RemoteNotConfiguredError(GitixError):
    """Raised when the requested remote does not exist."""


class DetachedHeadError(GitixError):
    """Raised when an operation needs a checked-out branch."""


class ConfigValueError(GitixError, ValueError):
    """Raised when a configuration value cannot be parsed."""
