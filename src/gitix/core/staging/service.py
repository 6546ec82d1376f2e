"""
Staging index mutations.

StagingController only ever touches the index. Unstaging never deletes
data: a path HEAD knows about is reset to HEAD's object id and mode, and
only paths HEAD has never seen are dropped from the index.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from git import Repo
from git.exc import GitCommandError
from git.index import IndexFile
from git.index.typ import BaseIndexEntry, IndexEntry

from gitix.core.errors import GitixError, IndexIOError, PathNotFoundError
from gitix.core.repo import RepoContext, is_unborn, relative_path
from gitix.core.staging.models import StagingReport
from gitix.core.status import StatusEngine

logger = logging.getLogger(__name__)


class StagingController:
    """
    Stage and unstage paths.

    Example:
        >>> staging = StagingController(RepoContext(Path(".")))
        >>> staging.stage("a.txt")
        >>> staging.unstage("a.txt")
        >>> report = staging.stage_all()
    """

    def __init__(
        self,
        context: RepoContext | None = None,
        status_engine: StatusEngine | None = None,
    ) -> None:
        self.context = context or RepoContext()
        self.status_engine = status_engine or StatusEngine(self.context)

    def stage(self, path: str | Path) -> None:
        """
        Copy the working tree content at path into the index.

        A path missing from the working tree but present in the index is
        removed from the index, staging its deletion.

        Raises:
            PathOutsideRepositoryError: If path is outside the working tree.
            PathNotFoundError: If path is in neither working tree nor index.
            IndexIOError: If the index cannot be written.
        """
        with self.context.open() as repo:
            self._stage_path(repo, relative_path(repo, path))

    def unstage(self, path: str | Path) -> None:
        """
        Undo whatever the index holds for path, without touching the
        working tree.

        Paths with no staged change are left alone.

        Raises:
            PathOutsideRepositoryError: If path is outside the working tree.
            StatusError: If the current classification cannot be computed.
            IndexIOError: If the index cannot be written.
        """
        with self.context.open() as repo:
            rel = relative_path(repo, path)
            record = self.status_engine.status_for(rel)
            if record is None or not record.staged:
                logger.debug("Nothing staged for %s", rel)
                return
            self._unstage_path(repo, rel)

    def stage_all(self) -> StagingReport:
        """Stage every path in the current status snapshot."""
        report = StagingReport(operation="stage_all")
        records = self.status_engine.compute_status()

        with self.context.open() as repo:
            for record in records:
                try:
                    self._stage_path(repo, record.path)
                except GitixError as e:
                    logger.warning("Failed to stage %s: %s", record.path, e)
                    report.failed[record.path] = str(e)
                else:
                    report.succeeded.append(record.path)

        return report

    def unstage_all(self) -> StagingReport:
        """Unstage every staged path in the current status snapshot."""
        report = StagingReport(operation="unstage_all")
        records = [r for r in self.status_engine.compute_status() if r.staged]

        with self.context.open() as repo:
            for record in records:
                try:
                    self._unstage_path(repo, record.path)
                except GitixError as e:
                    logger.warning("Failed to unstage %s: %s", record.path, e)
                    report.failed[record.path] = str(e)
                else:
                    report.succeeded.append(record.path)

        return report

    def _stage_path(self, repo: Repo, rel: str) -> None:
        index = repo.index
        on_disk = os.path.lexists(Path(str(repo.working_tree_dir)) / rel)

        if not on_disk and not _index_has(index, rel):
            if not is_unborn(repo) and _head_item(repo, rel) is not None:
                logger.debug("Deletion of %s already staged", rel)
                return
            raise PathNotFoundError(f"Nothing to stage at {rel}")

        try:
            if on_disk:
                index.add([rel])
                logger.info("Staged %s", rel)
            else:
                _drop_entries(index, rel)
                index.write(ignore_extension_data=True)
                logger.info("Staged deletion of %s", rel)
        except (OSError, ValueError, GitCommandError) as e:
            raise IndexIOError(f"Failed to stage {rel}: {e}") from e

    def _unstage_path(self, repo: Repo, rel: str) -> None:
        index = repo.index
        head_item = None if is_unborn(repo) else _head_item(repo, rel)

        try:
            _drop_entries(index, rel)
            if head_item is None:
                # HEAD never had this path, so dropping it returns the file to untracked
                logger.info("Removed %s from index", rel)
            else:
                base = BaseIndexEntry((head_item.mode, head_item.binsha, 0, rel))
                index.entries[(rel, 0)] = IndexEntry.from_base(base)
                logger.info("Reset index entry for %s to HEAD", rel)
            index.write(ignore_extension_data=True)
        except (OSError, ValueError) as e:
            raise IndexIOError(f"Failed to unstage {rel}: {e}") from e


def _index_has(index: IndexFile, rel: str) -> bool:
    return any(path == rel for path, _ in index.entries)


def _drop_entries(index: IndexFile, rel: str) -> None:
    for key in [k for k in index.entries if k[0] == rel]:
        del index.entries[key]


def _head_item(repo: Repo, rel: str):
    """HEAD's blob or submodule entry at rel, or None."""
    try:
        item = repo.head.commit.tree / rel
    except KeyError:
        return None
    if item.type == "tree":
        return None
    return item
