"""
Working directory status.

Reconciles the committed tree, the staging index and the working tree
into a single status list with at most one record per path.

Example:
    >>> from gitix.core.status import StatusEngine
    >>> records = StatusEngine().compute_status()
    >>> staged = [r.path for r in records if r.staged]
"""

from gitix.core.status.backends import (
    LibraryStatusBackend,
    PorcelainStatusBackend,
    StatusBackend,
    parse_porcelain,
)
from gitix.core.status.models import FileStatusKind, FileStatusRecord, format_file_size
from gitix.core.status.service import StatusEngine

__all__ = [
    "StatusEngine",
    "StatusBackend",
    "LibraryStatusBackend",
    "PorcelainStatusBackend",
    "FileStatusKind",
    "FileStatusRecord",
    "format_file_size",
    "parse_porcelain",
]
