"""
Remote synchronisation.

Fetch, pull (merge or rebase), push and refresh against a remote, with
ahead/behind tracking and a capped log of recent operations.

Example:
    >>> from gitix.core.sync import RemoteSyncController
    >>> sync = RemoteSyncController()
    >>> op = sync.refresh()
    >>> if not op.succeeded:
    ...     print(op.message)
"""

from gitix.core.sync.credentials import (
    Credential,
    CredentialHelperProvider,
    CredentialProvider,
    SshAgentProvider,
    default_credential_providers,
    negotiate_credentials,
)
from gitix.core.sync.models import (
    ActionState,
    OperationLog,
    OperationOutcome,
    RemoteStatus,
    SyncOperation,
    SyncOperationKind,
)
from gitix.core.sync.service import RemoteSyncController, three_way_merge

__all__ = [
    "RemoteSyncController",
    "RemoteStatus",
    "SyncOperation",
    "SyncOperationKind",
    "OperationOutcome",
    "OperationLog",
    "ActionState",
    "Credential",
    "CredentialProvider",
    "SshAgentProvider",
    "CredentialHelperProvider",
    "default_credential_providers",
    "negotiate_credentials",
    "three_way_merge",
]
