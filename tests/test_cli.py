"""
Tests for the gitix CLI.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import commit_file, git
from gitix import __version__
from gitix.cli import app
from gitix.cli.errors import ExitCode

runner = CliRunner()


def invoke(repo: Path, *args: str):
    return runner.invoke(app, ["--repo", str(repo), *args])


class TestStatusCommand:
    def test_clean(self, git_repo_with_commit: Path) -> None:
        result = invoke(git_repo_with_commit, "status")

        assert result.exit_code == 0
        assert "Working tree clean" in result.output

    def test_lists_changes(self, git_repo_with_commit: Path) -> None:
        (git_repo_with_commit / "README.md").write_text("changed\n")
        (git_repo_with_commit / "new.txt").write_text("x")

        result = invoke(git_repo_with_commit, "status")

        assert result.exit_code == 0
        assert "README.md" in result.output
        assert "Modified" in result.output
        assert "new.txt" in result.output
        assert "Untracked" in result.output
        assert "2 changed, 0 staged" in result.output

    def test_not_a_repository(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        result = invoke(plain, "status")

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Not a git repository" in result.output


class TestStagingCommands:
    def test_stage_and_unstage(self, git_repo_with_commit: Path) -> None:
        (git_repo_with_commit / "new.txt").write_text("x")

        result = invoke(git_repo_with_commit, "stage", "new.txt")
        assert result.exit_code == 0
        assert git(git_repo_with_commit, "diff", "--cached", "--name-only") == "new.txt"

        result = invoke(git_repo_with_commit, "unstage", "new.txt")
        assert result.exit_code == 0
        assert git(git_repo_with_commit, "diff", "--cached", "--name-only") == ""

    def test_stage_all(self, git_repo_with_commit: Path) -> None:
        (git_repo_with_commit / "a.txt").write_text("a")
        (git_repo_with_commit / "b.txt").write_text("b")

        result = invoke(git_repo_with_commit, "stage", "--all")

        assert result.exit_code == 0
        assert "stage_all: 2 paths" in result.output

    def test_stage_requires_paths(self, git_repo_with_commit: Path) -> None:
        result = invoke(git_repo_with_commit, "stage")

        assert result.exit_code == ExitCode.USER_ERROR

    def test_stage_outside_repository(self, git_repo_with_commit: Path) -> None:
        result = invoke(git_repo_with_commit, "stage", "../outside.txt")

        assert result.exit_code == ExitCode.USER_ERROR
        assert "outside the repository" in result.output


class TestCommitCommand:
    def test_commit(self, git_repo_with_commit: Path) -> None:
        (git_repo_with_commit / "new.txt").write_text("x")
        git(git_repo_with_commit, "add", "new.txt")

        result = invoke(git_repo_with_commit, "commit", "-m", "feat: add new")

        assert result.exit_code == 0
        assert "Committed" in result.output
        assert git(git_repo_with_commit, "log", "-1", "--format=%s") == "feat: add new"

    def test_nothing_to_commit(self, git_repo_with_commit: Path) -> None:
        result = invoke(git_repo_with_commit, "commit", "-m", "feat: nothing")

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "No changes staged" in result.output

    def test_empty_message(self, git_repo_with_commit: Path) -> None:
        result = invoke(git_repo_with_commit, "commit", "-m", "# just a comment")

        assert result.exit_code == ExitCode.USER_ERROR

    def test_template(self) -> None:
        result = runner.invoke(app, ["template"])

        assert result.exit_code == 0
        assert result.output.startswith("feat: ")
        assert "# Conventional Commits Format:" in result.output


class TestSyncCommands:
    def test_push_and_refresh(self, remote_repos: dict[str, Path]) -> None:
        local = remote_repos["local"]
        commit_file(local, "local.txt", "mine\n")

        result = invoke(local, "push")
        assert result.exit_code == 0
        assert "Pushed main to origin/main" in result.output

        result = invoke(local, "refresh")
        assert result.exit_code == 0
        assert "0 ahead, 0 behind" in result.output

    def test_pull_uses_configured_rebase(self, remote_repos: dict[str, Path]) -> None:
        local = remote_repos["local"]
        commit_file(remote_repos["other"], "other.txt", "theirs\n")
        git(remote_repos["other"], "push", "-q", "origin", "main")
        theirs = git(remote_repos["other"], "rev-parse", "HEAD")
        git(local, "config", "gitix.pull.rebase", "true")

        result = invoke(local, "pull")

        assert result.exit_code == 0, result.output
        assert "Rebased main onto origin/main" in result.output
        assert git(local, "rev-parse", "HEAD") == theirs

    def test_pull_merge_flag_overrides_config(self, remote_repos: dict[str, Path]) -> None:
        local = remote_repos["local"]
        commit_file(remote_repos["other"], "other.txt", "theirs\n")
        git(remote_repos["other"], "push", "-q", "origin", "main")
        git(local, "config", "gitix.pull.rebase", "true")

        result = invoke(local, "pull", "--merge")

        assert result.exit_code == 0, result.output
        assert "Merged origin/main into main" in result.output

    def test_failed_operation_exits_nonzero(self, git_repo_with_commit: Path) -> None:
        result = invoke(git_repo_with_commit, "fetch")

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Remote 'origin' is not configured" in result.output


class TestConfigCommands:
    def test_set_and_show(self, git_repo: Path) -> None:
        assert invoke(git_repo, "config", "set-name", "Ada").exit_code == 0
        assert invoke(git_repo, "config", "set-email", "ada@example.com").exit_code == 0
        assert invoke(git_repo, "config", "set-pull-rebase", "true").exit_code == 0

        result = invoke(git_repo, "config", "show")

        assert result.exit_code == 0
        assert "Ada" in result.output
        assert "ada@example.com" in result.output
        assert git(git_repo, "config", "gitix.pull.rebase") == "true"

    def test_invalid_boolean(self, git_repo: Path) -> None:
        result = invoke(git_repo, "config", "set-pull-rebase", "maybe")

        assert result.exit_code == ExitCode.USER_ERROR


class TestInitAndVersion:
    def test_init(self, tmp_path: Path) -> None:
        target = tmp_path / "project"

        result = runner.invoke(app, ["init", str(target)])

        assert result.exit_code == 0
        assert (target / ".git").is_dir()

    def test_init_uses_repo_option(self, tmp_path: Path) -> None:
        target = tmp_path / "other"
        target.mkdir()

        result = invoke(target, "init")

        assert result.exit_code == 0
        assert (target / ".git").is_dir()

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output


@pytest.mark.parametrize("command", ["status", "stage", "unstage", "commit", "pull", "push", "config"])
def test_help(command: str) -> None:
    result = runner.invoke(app, [command, "--help"])

    assert result.exit_code == 0
