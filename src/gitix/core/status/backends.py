"""
Status backends.

Two interchangeable implementations of the same contract: given a
RepoContext, return the reconciled status list (at most one record per
path, sorted by path).

- LibraryStatusBackend reads HEAD, the index and the working tree through
  GitPython and reconciles them itself.
- PorcelainStatusBackend parses `git status --porcelain -z` from the
  external git executable. It exists so status keeps working when the
  library path breaks.
"""

from __future__ import annotations

import logging
import stat
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from git import Repo
from git.exc import ODBError

from gitix.core.errors import ObjectAccessError
from gitix.core.repo import RepoContext, is_unborn
from gitix.core.status.models import FileStatusKind, FileStatusRecord

logger = logging.getLogger(__name__)


class StatusBackend(Protocol):
    """Contract shared by every status implementation."""

    name: str

    def collect(self, context: RepoContext) -> list[FileStatusRecord]:
        """Return the reconciled status list for the repository."""
        ...


def worktree_size(root: Path, path: str) -> int | None:
    """Size of a working tree file, or None if it is missing or a directory."""
    try:
        st = (root / path).lstat()
    except OSError:
        return None
    if stat.S_ISDIR(st.st_mode):
        return None
    return st.st_size


def reconcile(
    unstaged: Iterable[tuple[str, FileStatusKind]],
    staged: Iterable[tuple[str, FileStatusKind]],
    root: Path,
) -> list[FileStatusRecord]:
    """
    Merge the unstaged and staged passes into one record per path.

    A staged change on a path that already has an unstaged record only
    flips that record's `staged` flag; the unstaged kind wins because it
    describes what the working tree holds now.
    """
    records: dict[str, FileStatusRecord] = {}

    for path, kind in unstaged:
        records[path] = FileStatusRecord(path=path, kind=kind, size=worktree_size(root, path))

    for path, kind in staged:
        existing = records.get(path)
        if existing is not None:
            records[path] = existing.model_copy(update={"staged": True})
        else:
            records[path] = FileStatusRecord(
                path=path,
                kind=kind,
                staged=True,
                size=worktree_size(root, path),
            )

    return [records[path] for path in sorted(records)]


# Raw diff change types for index-vs-worktree differences
_UNSTAGED_KINDS = {
    "M": FileStatusKind.MODIFIED,
    "D": FileStatusKind.DELETED,
    "T": FileStatusKind.TYPE_CHANGED,
}


class LibraryStatusBackend:
    """
    Reconcile HEAD, index and working tree through GitPython.

    The unstaged pass folds content moves into plain modifications; no
    rename detection happens here.
    """

    name = "library"

    def collect(self, context: RepoContext) -> list[FileStatusRecord]:
        with context.open() as repo:
            root = Path(str(repo.working_tree_dir))
            unstaged = list(self._unstaged_changes(repo))
            staged = list(self._staged_changes(repo))
        return reconcile(unstaged, staged, root)

    def _unstaged_changes(self, repo: Repo) -> Iterator[tuple[str, FileStatusKind]]:
        for diff in repo.index.diff(None):
            path = diff.a_path or diff.b_path
            if path is None:
                continue
            yield path, _UNSTAGED_KINDS.get(diff.change_type or "", FileStatusKind.MODIFIED)

        for path in repo.untracked_files:
            yield path, FileStatusKind.UNTRACKED

    def _staged_changes(self, repo: Repo) -> Iterator[tuple[str, FileStatusKind]]:
        index_view = index_snapshot(repo)

        if is_unborn(repo):
            for path in sorted(index_view):
                yield path, FileStatusKind.ADDED
            return

        head_view = head_snapshot(repo)
        for path in sorted(index_view.keys() | head_view.keys()):
            in_index = index_view.get(path)
            in_head = head_view.get(path)
            if in_head is None:
                yield path, FileStatusKind.ADDED
            elif in_index is None:
                yield path, FileStatusKind.DELETED
            elif in_index != in_head:
                index_sha, index_mode = in_index
                head_sha, head_mode = in_head
                if stat.S_IFMT(index_mode) != stat.S_IFMT(head_mode):
                    yield path, FileStatusKind.TYPE_CHANGED
                elif index_sha != head_sha or index_mode != head_mode:
                    yield path, FileStatusKind.MODIFIED


def index_snapshot(repo: Repo) -> dict[str, tuple[bytes | None, int]]:
    """
    Map each index path to (object id, mode).

    Unmerged paths carry no single object id, so they map to None and
    always compare as changed.
    """
    view: dict[str, tuple[bytes | None, int]] = {}
    for (path, stage_number), entry in repo.index.entries.items():
        if stage_number == 0:
            view[path] = (entry.binsha, entry.mode)
        elif path not in view:
            view[path] = (None, entry.mode)
    return view


def head_snapshot(repo: Repo) -> dict[str, tuple[bytes | None, int]]:
    """
    Index-shaped view of the HEAD tree: every non-tree entry by path.

    Raises:
        ObjectAccessError: If the HEAD commit or one of its trees is missing.
    """
    try:
        tree = repo.head.commit.tree
        return {
            item.path: (item.binsha, item.mode)
            for item in tree.traverse()
            if item.type != "tree"
        }
    except (ValueError, ODBError) as e:
        raise ObjectAccessError(f"Cannot read HEAD tree: {e}") from e


# Porcelain codes: X is the index side, Y the working tree side
_INDEX_CODES = {
    "M": FileStatusKind.MODIFIED,
    "A": FileStatusKind.ADDED,
    "D": FileStatusKind.DELETED,
    "R": FileStatusKind.RENAMED,
    "C": FileStatusKind.ADDED,
    "T": FileStatusKind.TYPE_CHANGED,
}

_WORKTREE_CODES = {
    "M": FileStatusKind.MODIFIED,
    "D": FileStatusKind.DELETED,
    "T": FileStatusKind.TYPE_CHANGED,
    "A": FileStatusKind.ADDED,
}


def record_from_codes(x: str, y: str, path: str, root: Path) -> FileStatusRecord | None:
    """
    Translate one porcelain status pair into a record.

    Uses the same rules as the library reconciliation: the working tree
    code decides the kind when present, and any index code marks the
    record staged. Returns None for ignored entries.
    """
    if x == "!":
        return None

    if x == "?" and y == "?":
        return FileStatusRecord(
            path=path,
            kind=FileStatusKind.UNTRACKED,
            size=worktree_size(root, path),
        )

    staged = x not in (" ", "?")
    if y != " ":
        kind = _WORKTREE_CODES.get(y, FileStatusKind.MODIFIED)
    else:
        kind = _INDEX_CODES.get(x, FileStatusKind.MODIFIED)

    return FileStatusRecord(
        path=path,
        kind=kind,
        staged=staged,
        size=worktree_size(root, path),
        renamed_from="" if kind is FileStatusKind.RENAMED else None,
    )


def parse_porcelain(output: str, root: Path) -> list[FileStatusRecord]:
    """
    Parse NUL-delimited `git status --porcelain -z` output.

    Each record is two status characters, a space, and the path. Records
    shorter than three characters are malformed and skipped. Lines for the
    same path are merged into one record.

    Example:
        >>> [r.path for r in parse_porcelain(" M a.txt\\0?? b.txt\\0", Path("."))]
        ['a.txt', 'b.txt']
    """
    records: dict[str, FileStatusRecord] = {}
    fields = output.split("\0")
    i = 0

    while i < len(fields):
        field = fields[i]
        i += 1

        if len(field) < 3 or field[2] != " ":
            if field:
                logger.debug("Skipping malformed status record: %r", field)
            continue

        x, y, path = field[0], field[1], field[3:]

        if x in "RC" or y in "RC":
            # The rename source arrives as its own field; consume it,
            # renamed_from stays empty on this path
            i += 1

        record = record_from_codes(x, y, path, root)
        if record is None:
            continue

        previous = records.get(path)
        if previous is not None:
            # A path can appear twice (e.g. "D " then "??" after rm --cached).
            # As in reconcile(), the working tree side decides the kind and
            # any index side marks the record staged.
            kept = record if y != " " else previous
            record = kept.model_copy(update={"staged": previous.staged or record.staged})
        records[path] = record

    return [records[path] for path in sorted(records)]


class PorcelainStatusBackend:
    """Status from the external `git status --porcelain -z` command."""

    name = "porcelain"

    def collect(self, context: RepoContext) -> list[FileStatusRecord]:
        git = context.git()
        root = Path(git.run(["rev-parse", "--show-toplevel"]))
        output = git.run(
            ["status", "--porcelain", "-z", "--untracked-files=all"],
            strip=False,
        )
        return parse_porcelain(output, root)
