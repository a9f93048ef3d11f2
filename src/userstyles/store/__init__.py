from userstyles.store.db import Database
from userstyles.store.migrations import run_migrations
from userstyles.store.repositories import EnabledStateRepository

__all__ = ["Database", "EnabledStateRepository", "run_migrations"]
