"""
Commit creation.

CommitService turns the staged index into a commit on the current branch.
The GitPython path is tried first; if the library fails to write the
commit, the external `git commit` takes over.
"""

from __future__ import annotations

import logging

from git import Actor
from git.exc import GitError as LibraryGitError

from gitix.core.config import load_settings
from gitix.core.errors import IdentityNotConfiguredError, NothingToCommitError
from gitix.core.repo import RepoContext
from gitix.core.status import StatusEngine

logger = logging.getLogger(__name__)

CONVENTIONAL_COMMIT_TEMPLATE = "\n".join(
    [
        "feat: ",
        "",
        "# Conventional Commits Format:",
        "# <type>[optional scope]: <description>",
        "#",
        "# Types: feat, fix, docs, style, refactor, test, chore",
        "# Example: feat(auth): add user login validation",
    ]
)


def clean_message(message: str) -> str:
    """
    Strip comment lines and surrounding blank lines from a commit message.

    Example:
        >>> clean_message(CONVENTIONAL_COMMIT_TEMPLATE.replace("feat: ", "feat: add x"))
        'feat: add x'
    """
    lines = [line.rstrip() for line in message.splitlines() if not line.lstrip().startswith("#")]
    return "\n".join(lines).strip("\n")


class CommitService:
    """
    Commit whatever is staged.

    Example:
        >>> service = CommitService(RepoContext(Path(".")))
        >>> sha = service.commit("fix: handle empty input")
    """

    def __init__(
        self,
        context: RepoContext | None = None,
        status_engine: StatusEngine | None = None,
    ) -> None:
        self.context = context or RepoContext()
        self.status_engine = status_engine or StatusEngine(self.context)

    def has_staged_changes(self) -> bool:
        return any(record.staged for record in self.status_engine.compute_status())

    def commit(self, message: str) -> str:
        """
        Record the index as a new commit on the current branch.

        Args:
            message: Commit message; lines starting with '#' are dropped.

        Returns:
            Hex SHA of the new commit.

        Raises:
            ValueError: If the message is empty once comments are removed.
            IdentityNotConfiguredError: If user.name or user.email is unset.
            NothingToCommitError: If nothing is staged.
            GitError: If both the library and the external git fail.
        """
        text = clean_message(message)
        if not text.strip():
            raise ValueError("Commit message cannot be empty")

        settings = load_settings(self.context)
        if not settings.has_identity:
            raise IdentityNotConfiguredError(
                "Set user.name and user.email before committing "
                "(gitix config set-name / set-email)"
            )

        if not self.has_staged_changes():
            raise NothingToCommitError("No changes staged for commit")

        actor = Actor(settings.user_name, settings.user_email)
        try:
            with self.context.open() as repo:
                commit = repo.index.commit(text, author=actor, committer=actor)
        except (LibraryGitError, OSError, ValueError) as e:
            logger.warning("Library commit failed (%s), falling back to git commit", e)
            return self._external_commit(text)

        logger.info("Created commit %s", commit.hexsha[:7])
        return commit.hexsha

    def _external_commit(self, text: str) -> str:
        git = self.context.git()
        git.run(["commit", "--cleanup=verbatim", "-m", text])
        sha = git.run(["rev-parse", "HEAD"])
        logger.info("Created commit %s via git", sha[:7])
        return sha
