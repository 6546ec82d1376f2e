"""
Configuration data models for gitix.

Settings are not kept in a gitix-specific file: they are read from the
repository's own git configuration (all levels, repository wins).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GitixSettings(BaseModel):
    """
    Settings gitix reads from git configuration.

    Example:
        >>> settings = GitixSettings(user_name="Ada", user_email="ada@example.com")
        >>> settings.has_identity
        True
    """

    user_name: str | None = Field(
        default=None,
        description="Commit author name (user.name)",
    )

    user_email: str | None = Field(
        default=None,
        description="Commit author email (user.email)",
    )

    pull_rebase: bool = Field(
        default=False,
        description="Rebase instead of merge on pull (gitix.pull.rebase, then pull.rebase)",
    )

    @property
    def has_identity(self) -> bool:
        return bool(self.user_name and self.user_email)
