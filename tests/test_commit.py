"""
Tests for CommitService and commit message handling.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from git import IndexFile

from conftest import git
from gitix.core.commit import CONVENTIONAL_COMMIT_TEMPLATE, CommitService, clean_message
from gitix.core.errors import GitError, IdentityNotConfiguredError, NothingToCommitError
from gitix.core.repo import RepoContext


@pytest.fixture
def staged_repo(git_repo_with_commit: Path) -> Path:
    (git_repo_with_commit / "feature.py").write_text("print('hi')\n")
    git(git_repo_with_commit, "add", "feature.py")
    return git_repo_with_commit


class TestCleanMessage:
    def test_strips_comment_lines(self) -> None:
        message = CONVENTIONAL_COMMIT_TEMPLATE.replace("feat: ", "feat: add login")

        assert clean_message(message) == "feat: add login"

    def test_keeps_body(self) -> None:
        assert clean_message("fix: x\n\nLonger body\n# note\n") == "fix: x\n\nLonger body"

    def test_trims_surrounding_blank_lines(self) -> None:
        assert clean_message("\n\n  docs: y  \n\n") == "  docs: y"

    def test_template_shape(self) -> None:
        lines = CONVENTIONAL_COMMIT_TEMPLATE.splitlines()

        assert lines[0] == "feat: "
        assert all(line.startswith("#") for line in lines[2:])


class TestCommit:
    def test_commit_staged_changes(self, staged_repo: Path) -> None:
        sha = CommitService(RepoContext(staged_repo)).commit("feat: add feature")

        assert sha == git(staged_repo, "rev-parse", "HEAD")
        assert git(staged_repo, "log", "-1", "--format=%s") == "feat: add feature"
        assert git(staged_repo, "log", "-1", "--format=%an <%ae>") == "Test User <test@example.com>"
        assert git(staged_repo, "show", "--name-only", "--format=", "HEAD") == "feature.py"

    def test_comments_are_not_committed(self, staged_repo: Path) -> None:
        message = CONVENTIONAL_COMMIT_TEMPLATE.replace("feat: ", "feat: add feature")

        CommitService(RepoContext(staged_repo)).commit(message)

        assert "#" not in git(staged_repo, "log", "-1", "--format=%B")

    @pytest.mark.parametrize("message", ["", "   ", "# only a comment\n#another"])
    def test_empty_message(self, staged_repo: Path, message: str) -> None:
        with pytest.raises(ValueError, match="empty"):
            CommitService(RepoContext(staged_repo)).commit(message)

    def test_nothing_staged(self, git_repo_with_commit: Path) -> None:
        (git_repo_with_commit / "README.md").write_text("unstaged edit\n")

        with pytest.raises(NothingToCommitError):
            CommitService(RepoContext(git_repo_with_commit)).commit("fix: nothing")

    def test_identity_required(self, staged_repo: Path) -> None:
        git(staged_repo, "config", "--unset", "user.email")
        before = git(staged_repo, "rev-parse", "HEAD")

        with pytest.raises(IdentityNotConfiguredError):
            CommitService(RepoContext(staged_repo)).commit("feat: add feature")

        assert git(staged_repo, "rev-parse", "HEAD") == before

    def test_first_commit_on_unborn_branch(self, git_repo: Path) -> None:
        (git_repo / "first.txt").write_text("1\n")
        git(git_repo, "add", "first.txt")

        sha = CommitService(RepoContext(git_repo)).commit("chore: initial commit")

        assert sha == git(git_repo, "rev-parse", "main")
        assert git(git_repo, "rev-list", "--count", "HEAD") == "1"

    def test_staged_deletion_can_be_committed(self, git_repo_with_commit: Path) -> None:
        git(git_repo_with_commit, "rm", "-q", "README.md")

        CommitService(RepoContext(git_repo_with_commit)).commit("chore: drop readme")

        assert git(git_repo_with_commit, "ls-files") == ""


class TestCommitFallback:
    def test_falls_back_to_external_git(self, staged_repo: Path) -> None:
        with patch.object(IndexFile, "commit", side_effect=OSError("index locked")):
            sha = CommitService(RepoContext(staged_repo)).commit("feat: via git")

        assert sha == git(staged_repo, "rev-parse", "HEAD")
        assert git(staged_repo, "log", "-1", "--format=%s") == "feat: via git"

    def test_failing_fallback_raises_git_error(self, staged_repo: Path) -> None:
        (staged_repo / ".git" / "index.lock").write_text("")

        with patch.object(IndexFile, "commit", side_effect=OSError("index locked")):
            with pytest.raises(GitError) as exc_info:
                CommitService(RepoContext(staged_repo)).commit("feat: blocked")

        assert exc_info.value.command is not None
        assert "commit" in exc_info.value.command
