"""
External git invocation.

The fallback paths (porcelain status, fetch transport, commit) talk to the
`git` executable directly instead of going through GitPython, so a failure
in the library layer does not take them down with it.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from gitix.core.errors import GitError

logger = logging.getLogger(__name__)


class GitRunner:
    """
    Run `git` subcommands in a fixed directory.

    Example:
        >>> runner = GitRunner(Path("."))
        >>> runner.run(["rev-parse", "--git-dir"])
        '.git'
    """

    def __init__(self, cwd: Path, timeout: float = 60) -> None:
        self.cwd = cwd
        self.timeout = timeout

    def run(
        self,
        args: list[str],
        *,
        check: bool = True,
        strip: bool = True,
        input_data: str | None = None,
        env: dict[str, str] | None = None,
    ) -> str:
        """
        Run a git command and return its stdout.

        Args:
            args: Git command arguments (without "git" prefix).
            check: Whether to raise on non-zero exit code.
            strip: Strip surrounding whitespace from stdout. Porcelain
                parsers need the raw output since leading spaces carry
                meaning there.
            input_data: Optional stdin data to pass to the command.
            env: Extra environment variables layered over os.environ.

        Returns:
            Command stdout as string.

        Raises:
            GitError: If the command fails and check=True, times out, or
                git is not installed.
        """
        cmd = ["git"] + args
        logger.debug("Running git command: %s", " ".join(cmd))

        run_env = None
        if env:
            run_env = dict(os.environ)
            run_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                input=input_data,
                env=run_env,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(f"Git command timed out: {' '.join(cmd)}", command=cmd) from e
        except FileNotFoundError as e:
            raise GitError("git not found in PATH", command=cmd) from e

        if check and result.returncode != 0:
            stderr = result.stderr.strip() if result.stderr else ""
            raise GitError(
                f"Git command failed: {' '.join(cmd)}",
                command=cmd,
                stderr=stderr,
            )

        stdout = result.stdout or ""
        return stdout.strip() if strip else stdout
