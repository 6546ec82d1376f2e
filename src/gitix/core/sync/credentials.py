"""
Credential negotiation for remote transports.

Providers are tried in order and the first one that finds a usable
credential wins. A provider never prompts: it either hands back the
environment git needs to authenticate non-interactively, or reports that
it has nothing (None).
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from git import Repo

logger = logging.getLogger(__name__)

# Never let git fall back to an interactive prompt that would hang the session
NON_INTERACTIVE_ENV = {"GIT_TERMINAL_PROMPT": "0"}

_SCP_LIKE = re.compile(r"^(?:[^@/:]+@)?[^/:]+:(?!//)")

_AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "invalid username or password",
    "http basic: access denied",
)


@dataclass(frozen=True)
class Credential:
    """Environment a provider supplies for one git transport call."""

    provider: str
    env: dict[str, str] = field(default_factory=dict)


class CredentialProvider(Protocol):
    """Something that may be able to authenticate against a URL."""

    name: str

    def resolve(self, url: str, repo: Repo) -> Credential | None:
        """Return a credential for url, or None if this provider has none."""
        ...


def is_ssh_url(url: str) -> bool:
    """Whether url uses the SSH transport (ssh:// or scp-like user@host:path)."""
    if url.startswith(("ssh://", "git+ssh://", "ssh+git://")):
        return True
    if "://" in url or url.startswith(("/", ".")):
        return False
    return bool(_SCP_LIKE.match(url))


def is_http_url(url: str) -> bool:
    return url.startswith(("https://", "http://"))


def requires_credentials(url: str) -> bool:
    """
    Whether the transport for url authenticates at all.

    Local paths, file:// and git:// remotes do not.
    """
    return is_ssh_url(url) or is_http_url(url)


def is_auth_failure(stderr: str) -> bool:
    """Whether git's stderr describes a rejected or missing credential."""
    text = stderr.lower()
    return any(marker in text for marker in _AUTH_FAILURE_MARKERS)


def batch_ssh_command(repo: Repo, environ: Mapping[str, str]) -> str:
    """
    The user's ssh command with interactive prompts switched off.

    GIT_SSH_COMMAND wins over core.sshCommand, as in git itself; custom
    options such as `-i key` are kept.
    """
    command = environ.get("GIT_SSH_COMMAND", "").strip()
    if not command:
        with repo.config_reader() as reader:
            if reader.has_option("core", "sshcommand"):
                command = str(reader.get_value("core", "sshcommand")).strip()
    command = command or "ssh"

    if "batchmode" in command.lower():
        return command
    return f"{command} -o BatchMode=yes"


class SshAgentProvider:
    """Authenticate SSH remotes with keys held by a running ssh-agent."""

    name = "ssh-agent"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = environ if environ is not None else os.environ

    def resolve(self, url: str, repo: Repo) -> Credential | None:
        if not is_ssh_url(url):
            return None

        socket_path = self.environ.get("SSH_AUTH_SOCK")
        if not socket_path or not Path(socket_path).exists():
            logger.debug("No ssh-agent socket available for %s", url)
            return None

        env = dict(NON_INTERACTIVE_ENV)
        env["SSH_AUTH_SOCK"] = socket_path
        env["GIT_SSH_COMMAND"] = batch_ssh_command(repo, self.environ)
        return Credential(provider=self.name, env=env)


class CredentialHelperProvider:
    """Authenticate HTTPS remotes through a configured git credential helper."""

    name = "credential-helper"

    def resolve(self, url: str, repo: Repo) -> Credential | None:
        if not is_http_url(url):
            return None

        helper = self._helper_for(url, repo)
        if not helper:
            logger.debug("No credential helper configured for %s", url)
            return None

        logger.debug("Using credential helper '%s' for %s", helper, url)
        return Credential(provider=self.name, env=dict(NON_INTERACTIVE_ENV))

    def _helper_for(self, url: str, repo: Repo) -> str | None:
        with repo.config_reader() as reader:
            # URL-scoped sections: [credential "https://example.com"]
            for section in reader.sections():
                if not section.startswith('credential "'):
                    continue
                scope = section[len('credential "') : -1]
                if url.startswith(scope) and reader.has_option(section, "helper"):
                    return str(reader.get_value(section, "helper"))

            helper = reader.get_value("credential", "helper", default="")
            return str(helper) if helper else None


def default_credential_providers() -> list[CredentialProvider]:
    """SSH agent first, then the HTTPS credential helper."""
    return [SshAgentProvider(), CredentialHelperProvider()]


def negotiate_credentials(
    url: str,
    repo: Repo,
    providers: Sequence[CredentialProvider],
) -> Credential:
    """
    Pick the first provider that can authenticate against url.

    When no provider has anything, the transport is still attempted
    anonymously with prompts disabled: public HTTPS remotes need no
    credential. If the server does demand one, git fails and the caller
    reports that as an authentication failure (see `is_auth_failure`).
    """
    if not requires_credentials(url):
        return Credential(provider="none", env=dict(NON_INTERACTIVE_ENV))

    for provider in providers:
        credential = provider.resolve(url, repo)
        if credential is not None:
            logger.debug("Authenticating %s with %s", url, credential.provider)
            return credential

    tried = ", ".join(p.name for p in providers) or "none"
    logger.debug("No credential for %s (tried: %s); trying anonymously", url, tried)
    env = dict(NON_INTERACTIVE_ENV)
    if is_ssh_url(url):
        env["GIT_SSH_COMMAND"] = batch_ssh_command(repo, os.environ)
    return Credential(provider="anonymous", env=env)
