"""
Read and write gitix settings in git configuration.

Keys:
    user.name, user.email   commit identity
    gitix.pull.rebase       pull preference; git's pull.rebase is the fallback

Reads go through every configuration level; writes always land in the
repository's own .git/config.
"""

from __future__ import annotations

import logging
from typing import Any

from git import Repo

from gitix.core.errors import ConfigValueError
from gitix.core.repo import RepoContext

from .models import GitixSettings

logger = logging.getLogger(__name__)

USER_SECTION = "user"
GITIX_PULL_SECTION = 'gitix "pull"'
PULL_SECTION = "pull"

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0", ""}


def parse_bool(value: Any) -> bool:
    """
    Interpret a git config boolean.

    GitPython already converts true/false and integers; everything else
    arrives as a string.

    Raises:
        ConfigValueError: If value is not a recognised boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0

    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigValueError(f"Invalid boolean value: {value!r}")


def _read(repo: Repo, section: str, option: str) -> Any | None:
    with repo.config_reader() as reader:
        if not reader.has_option(section, option):
            return None
        return reader.get_value(section, option)


def _write(repo: Repo, section: str, option: str, value: str) -> None:
    with repo.config_writer(config_level="repository") as writer:
        writer.set_value(section, option, value)
    logger.info("Set %s.%s in repository config", section, option)


def _text(value: Any | None) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _context(context: RepoContext | None) -> RepoContext:
    return context or RepoContext()


def get_user_name(context: RepoContext | None = None) -> str | None:
    """Configured user.name, or None if unset or blank."""
    with _context(context).open() as repo:
        value = _read(repo, USER_SECTION, "name")
    return _text(value)


def get_user_email(context: RepoContext | None = None) -> str | None:
    """Configured user.email, or None if unset or blank."""
    with _context(context).open() as repo:
        value = _read(repo, USER_SECTION, "email")
    return _text(value)


def get_pull_rebase(context: RepoContext | None = None) -> bool | None:
    """
    Pull preference: gitix.pull.rebase, then pull.rebase, else None.

    Raises:
        ConfigValueError: If the configured value is not a boolean.
    """
    with _context(context).open() as repo:
        value = _read(repo, GITIX_PULL_SECTION, "rebase")
        if value is None:
            value = _read(repo, PULL_SECTION, "rebase")
    if value is None:
        return None
    return parse_bool(value)


def set_user_name(name: str, context: RepoContext | None = None) -> None:
    """Store user.name in the repository config."""
    name = name.strip()
    if not name:
        raise ConfigValueError("user.name cannot be empty")
    with _context(context).open() as repo:
        _write(repo, USER_SECTION, "name", name)


def set_user_email(email: str, context: RepoContext | None = None) -> None:
    """Store user.email in the repository config."""
    email = email.strip()
    if not email:
        raise ConfigValueError("user.email cannot be empty")
    with _context(context).open() as repo:
        _write(repo, USER_SECTION, "email", email)


def set_pull_rebase(rebase: bool, context: RepoContext | None = None) -> None:
    """Store gitix.pull.rebase in the repository config."""
    with _context(context).open() as repo:
        _write(repo, GITIX_PULL_SECTION, "rebase", "true" if rebase else "false")


def load_settings(context: RepoContext | None = None) -> GitixSettings:
    """
    Load every gitix setting in one go.

    Returns:
        GitixSettings with unset values at their defaults.
    """
    context = _context(context)
    rebase = get_pull_rebase(context)
    return GitixSettings(
        user_name=get_user_name(context),
        user_email=get_user_email(context),
        pull_rebase=bool(rebase),
    )
