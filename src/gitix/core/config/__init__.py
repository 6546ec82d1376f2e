"""
Configuration for gitix, backed by git's own configuration store.
"""

from .loader import (
    get_pull_rebase,
    get_user_email,
    get_user_name,
    load_settings,
    parse_bool,
    set_pull_rebase,
    set_user_email,
    set_user_name,
)
from .models import GitixSettings

__all__ = [
    "GitixSettings",
    "load_settings",
    "get_user_name",
    "get_user_email",
    "get_pull_rebase",
    "set_user_name",
    "set_user_email",
    "set_pull_rebase",
    "parse_bool",
]
