"""
Pytest configuration and shared fixtures.

Every fixture builds real throw-away repositories with the git executable
in tmp_path. Global and system git configuration are hidden so the
developer's own settings (identity, pull.rebase, signing) cannot leak in.
"""

import subprocess
from pathlib import Path

import pytest

from gitix.core.repo import RepoContext


README_LINES = "line one\nline two\nline three\nline four\nline five\n"


def git(cwd: Path, *args: str) -> str:
    """Run a git command in cwd and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def configure_identity(repo: Path) -> None:
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "user.name", "Test User")


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> str:
    """Write a file, commit it, and return the new HEAD sha."""
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-m", message or f"Update {name}")
    return git(repo, "rev-parse", "HEAD")


# ==============================================================================
# Environment
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Hide the user's global and system git configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)


# ==============================================================================
# Repository Fixtures
# ==============================================================================


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create an empty repository on branch main with an identity configured."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "--initial-branch=main")
    configure_identity(repo)
    return repo


@pytest.fixture
def git_repo_with_commit(git_repo: Path) -> Path:
    """Create a git repo with an initial commit of README.md."""
    commit_file(git_repo, "README.md", "# Test Repo\n", "Initial commit")
    return git_repo


@pytest.fixture
def context(git_repo_with_commit: Path) -> RepoContext:
    return RepoContext(git_repo_with_commit)


@pytest.fixture
def remote_repos(tmp_path: Path) -> dict[str, Path]:
    """
    A bare remote plus two clones that share one initial commit.

    Returns a dict with keys "remote" (bare), "local" and "other".
    """
    remote = tmp_path / "remote.git"
    git(tmp_path, "init", "--bare", "--initial-branch=main", str(remote))

    seed = tmp_path / "seed"
    git(tmp_path, "clone", str(remote), str(seed))
    configure_identity(seed)
    git(seed, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_file(seed, "README.md", README_LINES, "Initial commit")
    git(seed, "push", "origin", "main")

    clones = {"remote": remote}
    for name in ("local", "other"):
        clone = tmp_path / name
        git(tmp_path, "clone", str(remote), str(clone))
        configure_identity(clone)
        clones[name] = clone
    return clones
