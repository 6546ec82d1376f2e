"""
gitix - a small git client

Status reconciliation, staging, commits and remote sync on top of
GitPython, with the git executable as a fallback.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from gitix.core.status.models import FileStatusKind, FileStatusRecord
from gitix.core.sync.models import RemoteStatus, SyncOperation

__all__ = ["FileStatusKind", "FileStatusRecord", "RemoteStatus", "SyncOperation", "__version__"]
