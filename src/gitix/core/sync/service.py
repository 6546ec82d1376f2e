"""
Remote synchronisation service.

RemoteSyncController drives fetch, pull (merge or rebase), push and
refresh against a remote. Every public action runs synchronously,
finishes in a SyncOperation (never an exception), and records that
operation in the controller's OperationLog.

Merges and rebases are computed on temporary indexes: the branch ref,
the real index and the working tree are only touched once the whole
result is known to be conflict free.
"""

from __future__ import annotations

import logging
import stat
import tempfile
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from git import Commit, Head, IndexFile, PushInfo, RemoteReference, Repo
from git.exc import GitCommandError
from git.exc import GitError as LibraryGitError
from git.index.typ import BaseIndexEntry, IndexEntry
from git.objects import Blob, Tree
from git.remote import Remote

from gitix.core.errors import (
    AuthenticationError,
    ConflictError,
    DetachedHeadError,
    GitError,
    GitixError,
    NetworkError,
    ObjectAccessError,
    RemoteNotConfiguredError,
    UnbornBranchError,
)
from gitix.core.git_cli import GitRunner
from gitix.core.repo import RepoContext, is_unborn
from gitix.core.sync.credentials import (
    Credential,
    CredentialProvider,
    default_credential_providers,
    is_auth_failure,
    negotiate_credentials,
)
from gitix.core.sync.models import (
    ActionState,
    OperationLog,
    OperationOutcome,
    RemoteStatus,
    SyncOperation,
    SyncOperationKind,
)

logger = logging.getLogger(__name__)


class RemoteSyncController:
    """
    Synchronise the current branch with a remote.

    Blocks the calling thread for the full duration of every action,
    network I/O included; there is no cancellation.

    Example:
        >>> sync = RemoteSyncController(RepoContext(Path(".")))
        >>> op = sync.pull(rebase=True)
        >>> print(op.summary())
        >>> for entry in sync.log:
        ...     print(entry.kind.value, entry.outcome.value)
    """

    DEFAULT_REMOTE = "origin"
    FETCH_TIMEOUT = 300

    def __init__(
        self,
        context: RepoContext | None = None,
        remote_name: str = DEFAULT_REMOTE,
        credential_providers: Sequence[CredentialProvider] | None = None,
        log: OperationLog | None = None,
    ) -> None:
        self.context = context or RepoContext()
        self.remote_name = remote_name
        if credential_providers is None:
            credential_providers = default_credential_providers()
        self.credential_providers = list(credential_providers)
        self.log = log if log is not None else OperationLog()
        self.state = ActionState.IDLE
        self.last_remote_status: RemoteStatus | None = None

    # ------------------------------------------------------------------
    # Public actions
    # ------------------------------------------------------------------

    def fetch(self) -> SyncOperation:
        """Fetch from the remote, retrying once through external git."""
        return self._run(SyncOperationKind.FETCH, self._fetch)

    def pull(self, rebase: bool = False) -> SyncOperation:
        """
        Fetch, then integrate the remote-tracking branch.

        Args:
            rebase: Replay local-only commits on top of the remote tip
                instead of creating a merge commit.
        """
        return self._run(SyncOperationKind.PULL, lambda repo: self._pull(repo, rebase))

    def push(self) -> SyncOperation:
        """Push the current branch to the same-named branch on the remote."""
        return self._run(SyncOperationKind.PUSH, self._push)

    def refresh(self) -> SyncOperation:
        """Fetch and recompute ahead/behind in one operation."""
        return self._run(SyncOperationKind.REFRESH, self._refresh)

    def ahead_behind(self) -> tuple[int, int]:
        """
        Count commits only on HEAD (ahead) and only on the remote-tracking
        ref (behind).

        Without a remote-tracking ref, every commit reachable from HEAD
        counts as ahead.

        Raises:
            RepositoryAccessError: If the repository cannot be opened.
            ObjectAccessError: If the commit graph cannot be walked.
        """
        with self.context.open() as repo:
            return self._ahead_behind(repo)

    def remote_status(self) -> RemoteStatus:
        """
        Describe the remote and the branch's position relative to it.

        Raises:
            RemoteNotConfiguredError: If the remote does not exist.
            ObjectAccessError: If the commit graph cannot be walked.
        """
        with self.context.open() as repo:
            status = self._remote_status(repo)
        self.last_remote_status = status
        return status

    # ------------------------------------------------------------------
    # Action plumbing
    # ------------------------------------------------------------------

    def _run(self, kind: SyncOperationKind, action: Callable[[Repo], str]) -> SyncOperation:
        self.state = ActionState.RUNNING
        logger.info("Starting %s against %s", kind.value, self.remote_name)

        try:
            with self.context.open() as repo:
                message = action(repo)
        except GitixError as e:
            outcome, message = OperationOutcome.ERROR, str(e)
            logger.error("%s failed: %s", kind.value, e)
        except (LibraryGitError, OSError, ValueError) as e:
            outcome, message = OperationOutcome.ERROR, f"Unexpected git failure: {e}"
            logger.exception("%s failed unexpectedly", kind.value)
        else:
            outcome = OperationOutcome.SUCCESS
            logger.info("%s succeeded: %s", kind.value, message)

        self.state = (
            ActionState.SUCCEEDED if outcome == OperationOutcome.SUCCESS else ActionState.FAILED
        )
        operation = SyncOperation(kind=kind, outcome=outcome, message=message)
        self.log.record(operation)
        return operation

    def _remote(self, repo: Repo) -> Remote:
        try:
            return repo.remote(self.remote_name)
        except ValueError as e:
            raise RemoteNotConfiguredError(f"Remote '{self.remote_name}' is not configured") from e

    def _remote_url(self, repo: Repo) -> str:
        with repo.config_reader() as reader:
            return str(reader.get_value(f'remote "{self.remote_name}"', "url", default=""))

    def _current_branch(self, repo: Repo) -> Head:
        if repo.head.is_detached:
            raise DetachedHeadError("HEAD is detached; check out a branch first")
        return repo.active_branch

    def _credential(self, repo: Repo) -> Credential:
        return negotiate_credentials(self._remote_url(repo), repo, self.credential_providers)

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def _fetch(self, repo: Repo) -> str:
        remote = self._remote(repo)
        credential = self._credential(repo)

        try:
            with repo.git.custom_environment(**credential.env):
                remote.fetch()
        # GitPython asserts that a fetch refspec is configured
        except (GitCommandError, AssertionError, ValueError) as e:
            stderr = getattr(e, "stderr", "") or str(e)
            if is_auth_failure(stderr):
                raise AuthenticationError(
                    f"Authentication to '{self.remote_name}' failed: {stderr.strip()}"
                ) from e
            logger.warning(
                "Fetch from %s failed (%s); retrying with external git",
                self.remote_name,
                stderr.strip(),
            )
            self._external_fetch(repo, credential)

        return f"Fetched from {self.remote_name}"

    def _external_fetch(self, repo: Repo, credential: Credential) -> None:
        runner = GitRunner(Path(str(repo.working_tree_dir)), timeout=self.FETCH_TIMEOUT)
        try:
            runner.run(["fetch", self.remote_name], env=credential.env)
        except GitError as e:
            if is_auth_failure(e.stderr):
                raise AuthenticationError(
                    f"Authentication to '{self.remote_name}' failed: {e.stderr}"
                ) from e
            raise NetworkError(
                f"Fetch from '{self.remote_name}' failed: {e.stderr or e}"
            ) from e

    # ------------------------------------------------------------------
    # Ahead / behind
    # ------------------------------------------------------------------

    def _tracking_ref(self, repo: Repo) -> RemoteReference | None:
        if repo.head.is_detached:
            return None

        branch = repo.head.reference
        tracking = branch.tracking_branch() if isinstance(branch, Head) else None
        if tracking is not None and tracking.is_valid():
            return tracking

        candidate = RemoteReference(repo, f"refs/remotes/{self.remote_name}/{branch.name}")
        return candidate if candidate.is_valid() else None

    def _ahead_behind(self, repo: Repo) -> tuple[int, int]:
        if is_unborn(repo):
            return 0, 0

        tracking = self._tracking_ref(repo)
        if tracking is None:
            return _count_commits(repo, "HEAD"), 0

        ahead = _count_commits(repo, f"{tracking.path}..HEAD")
        behind = _count_commits(repo, f"HEAD..{tracking.path}")
        return ahead, behind

    def _remote_status(self, repo: Repo) -> RemoteStatus:
        self._remote(repo)
        ahead, behind = self._ahead_behind(repo)
        return RemoteStatus(
            name=self.remote_name,
            url=self._remote_url(repo),
            ahead=ahead,
            behind=behind,
            last_fetch=_last_fetch(repo),
        )

    def _refresh(self, repo: Repo) -> str:
        self._fetch(repo)
        status = self._remote_status(repo)
        self.last_remote_status = status
        return (
            f"Fetched from {self.remote_name}: "
            f"{status.ahead} ahead, {status.behind} behind"
        )

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    def _pull(self, repo: Repo, rebase: bool) -> str:
        self._fetch(repo)

        branch = self._current_branch(repo)
        tracking = self._tracking_ref(repo)
        if tracking is None:
            raise ObjectAccessError(
                f"No remote-tracking branch {self.remote_name}/{branch.name} to pull from"
            )
        remote_tip = tracking.commit

        if is_unborn(repo):
            self._ensure_clean(repo, incoming=remote_tip.tree, current=None)
            self._move_branch(repo, branch, remote_tip)
            return f"Checked out {tracking.name} ({remote_tip.hexsha[:8]})"

        local_tip = repo.head.commit
        if local_tip == remote_tip:
            return "Already up to date"
        if repo.is_ancestor(remote_tip, local_tip):
            return f"Already up to date ({tracking.name} is behind local)"

        if not repo.merge_base(local_tip, remote_tip):
            raise ConflictError(
                f"{branch.name} and {tracking.name} share no history; refusing to combine them"
            )

        self._ensure_clean(repo, incoming=None, current=local_tip.tree)

        if rebase:
            new_tip = self._rebase(repo, local_tip, remote_tip)
            summary = f"Rebased {branch.name} onto {tracking.name}"
        else:
            new_tip = self._merge(repo, local_tip, remote_tip, tracking.name)
            summary = f"Merged {tracking.name} into {branch.name}"

        self._ensure_clean(repo, incoming=new_tip.tree, current=local_tip.tree)
        self._move_branch(repo, branch, new_tip)
        return f"{summary} ({new_tip.hexsha[:8]})"

    def _merge(self, repo: Repo, local_tip: Commit, remote_tip: Commit, remote_name: str) -> Commit:
        base = repo.merge_base(local_tip, remote_tip)[0]
        tree = three_way_merge(repo, base, local_tip, remote_tip)
        message = f"Merge remote-tracking branch '{remote_name}'"
        return Commit.create_from_tree(
            repo,
            tree,
            message,
            parent_commits=[local_tip, remote_tip],
            head=False,
        )

    def _rebase(self, repo: Repo, local_tip: Commit, remote_tip: Commit) -> Commit:
        """Replay local-only commits onto remote_tip, oldest first."""
        replay = [
            commit
            for commit in repo.iter_commits(f"{remote_tip.hexsha}..{local_tip.hexsha}", reverse=True)
            if len(commit.parents) == 1
        ]

        onto = remote_tip
        for commit in replay:
            try:
                tree = three_way_merge(repo, commit.parents[0], onto, commit)
            except ConflictError as e:
                raise ConflictError(
                    f"Rebase stopped at {commit.hexsha[:8]} ({commit.summary!s}): {e}",
                    paths=e.paths,
                ) from e

            if tree.binsha == onto.tree.binsha:
                logger.info("Skipping %s: already applied upstream", commit.hexsha[:8])
                continue

            onto = Commit.create_from_tree(
                repo,
                tree,
                str(commit.message),
                parent_commits=[onto],
                head=False,
                author=commit.author,
                author_date=commit.authored_datetime,
            )
            logger.debug("Replayed %s as %s", commit.hexsha[:8], onto.hexsha[:8])

        return onto

    def _ensure_clean(self, repo: Repo, incoming: Tree | None, current: Tree | None) -> None:
        """
        Refuse to update the working tree when it would lose data.

        Tracked files must have no uncommitted changes, and no untracked
        file may sit where the incoming tree adds a path.
        """
        if is_unborn(repo):
            dirty = bool(repo.index.entries)
        else:
            dirty = repo.is_dirty(index=True, working_tree=True, untracked_files=False)
        if dirty:
            raise ConflictError("Uncommitted changes in tracked files; commit or unstage them first")

        if incoming is None:
            return

        added = _tree_paths(incoming) - (_tree_paths(current) if current is not None else set())
        clobbered = sorted(added & set(repo.untracked_files))
        if clobbered:
            raise ConflictError(
                "Untracked files would be overwritten: " + ", ".join(clobbered),
                paths=clobbered,
            )

    def _move_branch(self, repo: Repo, branch: Head, new_tip: Commit) -> None:
        # A branch with no commits has no previous value to log against
        logmsg = None if is_unborn(repo) else f"gitix pull: {new_tip.hexsha}"
        branch.set_commit(new_tip, logmsg=logmsg)
        repo.head.reset(index=True, working_tree=True)
        logger.info("Moved %s to %s", branch.name, new_tip.hexsha[:8])

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def _push(self, repo: Repo) -> str:
        if is_unborn(repo):
            raise UnbornBranchError("Nothing to push: the current branch has no commits yet")

        branch = self._current_branch(repo)
        remote = self._remote(repo)
        credential = self._credential(repo)
        refspec = f"refs/heads/{branch.name}:refs/heads/{branch.name}"

        try:
            with repo.git.custom_environment(**credential.env):
                results = remote.push(refspec=refspec)
            results.raise_if_error()
        except GitCommandError as e:
            stderr = (e.stderr or str(e)).strip()
            if is_auth_failure(stderr):
                raise AuthenticationError(
                    f"Authentication to '{self.remote_name}' failed: {stderr}"
                ) from e
            raise NetworkError(f"Push to '{self.remote_name}' failed: {stderr}") from e

        if not results:
            raise NetworkError(f"Push to '{self.remote_name}' reported no result")

        failure_flags = (
            PushInfo.ERROR | PushInfo.REJECTED | PushInfo.REMOTE_REJECTED | PushInfo.REMOTE_FAILURE
        )
        for info in results:
            if info.flags & failure_flags:
                raise NetworkError(
                    f"Push to '{self.remote_name}' rejected: {info.summary.strip()}"
                )

        if all(info.flags & PushInfo.UP_TO_DATE for info in results):
            return "Everything up to date"
        return f"Pushed {branch.name} to {self.remote_name}/{branch.name}"


def three_way_merge(repo: Repo, base: Commit, ours: Commit, theirs: Commit) -> Tree:
    """
    Merge three trees and write the result to the object database.

    Tree-level merging is done by read-tree on a temporary index; paths
    changed on both sides get a content merge through merge-file.

    Raises:
        ConflictError: If any path cannot be merged cleanly.
        ObjectAccessError: If the trees cannot be read.
    """
    try:
        index = IndexFile.from_tree(repo, base, ours, theirs)
    except GitCommandError as e:
        raise ObjectAccessError(f"Cannot read trees for merge: {e.stderr or e}") from e

    conflicts = []
    for path, stages in sorted(index.unmerged_blobs().items()):
        by_stage = dict(stages)
        merged = _merge_blob(repo, by_stage.get(1), by_stage.get(2), by_stage.get(3))
        if merged is None:
            conflicts.append(str(path))
            continue

        for stage_number in (1, 2, 3):
            index.entries.pop((path, stage_number), None)
        mode = by_stage[2].mode
        index.entries[(path, 0)] = IndexEntry.from_base(BaseIndexEntry((mode, merged, 0, path)))

    if conflicts:
        raise ConflictError(
            "Merge conflicts detected in: " + ", ".join(conflicts),
            paths=conflicts,
        )

    return index.write_tree()


def _merge_blob(repo: Repo, base: Blob | None, ours: Blob | None, theirs: Blob | None) -> bytes | None:
    """Content-merge one path; returns the merged blob's binsha or None on conflict."""
    if base is None or ours is None or theirs is None:
        return None
    if ours.mode != theirs.mode or not stat.S_ISREG(ours.mode):
        return None

    with tempfile.TemporaryDirectory() as tmp:
        files = {}
        for name, blob in (("ours", ours), ("base", base), ("theirs", theirs)):
            files[name] = Path(tmp) / name
            files[name].write_bytes(blob.data_stream.read())

        status, _, _ = repo.git.merge_file(
            str(files["ours"]),
            str(files["base"]),
            str(files["theirs"]),
            with_extended_output=True,
            with_exceptions=False,
        )
        if status != 0:
            return None

        return bytes.fromhex(repo.git.hash_object("-w", str(files["ours"])))


def _tree_paths(tree: Tree) -> set[str]:
    return {str(item.path) for item in tree.traverse() if item.type != "tree"}


def _count_commits(repo: Repo, rev: str) -> int:
    try:
        return sum(1 for _ in repo.iter_commits(rev))
    except GitCommandError as e:
        raise ObjectAccessError(f"Cannot walk commits for {rev}: {e.stderr or e}") from e


def _last_fetch(repo: Repo) -> datetime | None:
    fetch_head = Path(repo.git_dir) / "FETCH_HEAD"
    try:
        return datetime.fromtimestamp(fetch_head.stat().st_mtime)
    except OSError:
        return None
