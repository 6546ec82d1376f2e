"""
Status reconciliation service.

StatusEngine produces the authoritative per-file status list. It is
strictly read-only: no backend writes the index, refs or working tree.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from gitix.core.errors import StatusError
from gitix.core.repo import RepoContext
from gitix.core.status.backends import (
    LibraryStatusBackend,
    PorcelainStatusBackend,
    StatusBackend,
)
from gitix.core.status.models import FileStatusRecord

logger = logging.getLogger(__name__)


class StatusEngine:
    """
    Compute working directory status with an ordered fallback policy.

    Backends are tried in order; the first one that succeeds wins. By
    default the GitPython reconciliation runs first and the porcelain
    parser takes over if it fails for any reason.

    Example:
        >>> engine = StatusEngine(RepoContext(Path(".")))
        >>> for record in engine.compute_status():
        ...     print(record.kind.symbol, record.path)
    """

    def __init__(
        self,
        context: RepoContext | None = None,
        backends: Sequence[StatusBackend] | None = None,
    ) -> None:
        self.context = context or RepoContext()
        if backends is None:
            backends = [LibraryStatusBackend(), PorcelainStatusBackend()]
        self.backends = list(backends)

    def compute_status(self) -> list[FileStatusRecord]:
        """
        Reconcile HEAD, index and working tree into one record per path.

        Returns:
            Records sorted by path, never two with the same path.

        Raises:
            StatusError: If every backend failed. The last backend's
                error is chained as the cause.
        """
        failures: list[str] = []
        last_error: Exception | None = None

        for backend in self.backends:
            try:
                records = backend.collect(self.context)
            except Exception as e:
                logger.warning("Status backend '%s' failed: %s", backend.name, e)
                failures.append(f"{backend.name}: {e}")
                last_error = e
                continue

            if failures:
                logger.info("Status computed by fallback backend '%s'", backend.name)
            return records

        raise StatusError(
            "Could not compute status (" + "; ".join(failures) + ")"
        ) from last_error

    def status_for(self, path: str) -> FileStatusRecord | None:
        """Return the record for a repository-relative path, if any."""
        for record in self.compute_status():
            if record.path == path:
                return record
        return None
