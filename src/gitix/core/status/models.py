"""
Data models for working directory status.

Defines the per-file status record the StatusEngine produces and the
helpers the UI layer uses to present it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FileStatusKind(str, Enum):
    """Kind of change recorded for a path."""

    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    UNTRACKED = "untracked"
    RENAMED = "renamed"
    TYPE_CHANGED = "type_changed"

    @property
    def symbol(self) -> str:
        """Single-letter code shown in status tables."""
        return _SYMBOLS[self]

    @property
    def description(self) -> str:
        """Human-readable label."""
        return _DESCRIPTIONS[self]


_SYMBOLS = {
    FileStatusKind.MODIFIED: "M",
    FileStatusKind.ADDED: "A",
    FileStatusKind.DELETED: "D",
    FileStatusKind.UNTRACKED: "?",
    FileStatusKind.RENAMED: "R",
    FileStatusKind.TYPE_CHANGED: "T",
}

_DESCRIPTIONS = {
    FileStatusKind.MODIFIED: "Modified",
    FileStatusKind.ADDED: "New file",
    FileStatusKind.DELETED: "Deleted",
    FileStatusKind.UNTRACKED: "Untracked",
    FileStatusKind.RENAMED: "Renamed",
    FileStatusKind.TYPE_CHANGED: "Type changed",
}


class FileStatusRecord(BaseModel):
    """
    Status of one path after reconciling HEAD, index and working tree.

    A status list never holds two records for the same path. When a path
    has both a staged and an unstaged change, the record carries the
    unstaged kind with `staged=True`.

    Example:
        >>> record = FileStatusRecord(path="a.txt", kind=FileStatusKind.MODIFIED)
        >>> record.kind.symbol
        'M'
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Repository-relative POSIX path")

    kind: FileStatusKind = Field(description="Kind of change")

    staged: bool = Field(
        default=False,
        description="Whether the index holds a change for this path",
    )

    size: int | None = Field(
        default=None,
        ge=0,
        description="Working tree file size in bytes (None when absent)",
    )

    renamed_from: str | None = Field(
        default=None,
        description=(
            "Source path for RENAMED records. Empty when the backend "
            "cannot resolve it; None for every other kind."
        ),
    )


def format_file_size(size: int | None) -> str:
    """
    Format a byte count for display.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size is None:
        return "-"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.1f} GB"
