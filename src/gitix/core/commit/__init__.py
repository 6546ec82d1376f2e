"""
Commit creation.

Example:
    >>> from gitix.core.commit import CommitService
    >>> CommitService().commit("docs: fix typo")
"""

from gitix.core.commit.service import (
    CONVENTIONAL_COMMIT_TEMPLATE,
    CommitService,
    clean_message,
)

__all__ = ["CommitService", "CONVENTIONAL_COMMIT_TEMPLATE", "clean_message"]
