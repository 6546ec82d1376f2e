"""
Data models for remote synchronisation.

Defines Pydantic models for remote status and sync operation records, and
the capped in-memory operation log.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SyncOperationKind(str, Enum):
    """Which sync action an operation record describes."""

    FETCH = "fetch"
    PULL = "pull"
    PUSH = "push"
    REFRESH = "refresh"


class OperationOutcome(str, Enum):
    """Outcome of a sync operation."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    ERROR = "error"


class ActionState(str, Enum):
    """Lifecycle of the action a RemoteSyncController is running."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RemoteStatus(BaseModel):
    """
    Relationship between the local branch and its remote.

    Recomputed on demand; never persisted.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Remote name")

    url: str = Field(default="", description="Remote URL")

    ahead: int = Field(default=0, ge=0, description="Commits only on the local branch")

    behind: int = Field(default=0, ge=0, description="Commits only on the remote-tracking ref")

    last_fetch: datetime | None = Field(
        default=None,
        description="When the repository last fetched (from FETCH_HEAD)",
    )

    @property
    def up_to_date(self) -> bool:
        """Whether local and remote point at the same history."""
        return self.ahead == 0 and self.behind == 0


class SyncOperation(BaseModel):
    """
    Record of one fetch, pull, push or refresh attempt.

    Created once the attempt finishes and never modified afterwards.

    Example:
        >>> op = SyncOperation(
        ...     kind=SyncOperationKind.FETCH,
        ...     outcome=OperationOutcome.SUCCESS,
        ...     message="Fetched from origin",
        ... )
        >>> op.succeeded
        True
    """

    model_config = ConfigDict(frozen=True)

    kind: SyncOperationKind = Field(description="Which action was attempted")

    outcome: OperationOutcome = Field(description="How the attempt ended")

    message: str = Field(default="", description="Human-readable result message")

    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the attempt finished",
    )

    @property
    def succeeded(self) -> bool:
        return self.outcome == OperationOutcome.SUCCESS

    def summary(self) -> str:
        """One-line description for logs and status bars."""
        return f"{self.kind.value} {self.outcome.value}: {self.message}"


class OperationLog:
    """
    Most recent sync operations, newest first.

    Append-only from the caller's point of view: recording an operation
    pushes it to the front and drops the oldest entries beyond the cap.
    """

    MAX_ENTRIES = 10

    def __init__(self, max_entries: int = MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: list[SyncOperation] = []

    def record(self, operation: SyncOperation) -> None:
        self._entries.insert(0, operation)
        del self._entries[self.max_entries :]

    @property
    def entries(self) -> tuple[SyncOperation, ...]:
        return tuple(self._entries)

    @property
    def latest(self) -> SyncOperation | None:
        return self._entries[0] if self._entries else None

    def __iter__(self) -> Iterator[SyncOperation]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
