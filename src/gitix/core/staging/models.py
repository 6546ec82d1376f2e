"""
Data models for staging operations.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StagingReport(BaseModel):
    """
    Outcome of a bulk stage or unstage.

    Every path is attempted independently; a failure on one path is
    recorded here instead of aborting the rest.
    """

    operation: str = Field(description="Bulk operation (stage_all, unstage_all)")

    succeeded: list[str] = Field(
        default_factory=list,
        description="Paths the operation was applied to",
    )

    failed: dict[str, str] = Field(
        default_factory=dict,
        description="Paths that failed, mapped to the error message",
    )

    @property
    def success(self) -> bool:
        """Whether every path succeeded."""
        return not self.failed

    def summary(self) -> str:
        """Generate a human-readable summary of the report."""
        parts = [f"{self.operation}: {len(self.succeeded)} paths"]
        if self.failed:
            parts.append(f"{len(self.failed)} failed")
        return ", ".join(parts)
