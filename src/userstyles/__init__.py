"""Userstyles: per-site user stylesheets scoped with @-moz-document."""
from __future__ import annotations

from userstyles.config import UserstylesConfig
from userstyles.registry import Registry, ReloadResult
from userstyles.runner import UserstylesRunner

__all__ = [
    "Registry",
    "ReloadResult",
    "UserstylesConfig",
    "UserstylesRunner",
]
