from __future__ import annotations

import pytest

from userstyles.injection.memory import MemoryInjection
from userstyles.registry import Registry
from userstyles.store.db import Database
from userstyles.store.migrations import run_migrations
from userstyles.store.repositories import EnabledStateRepository


class DictDiscovery:
    """Discovery stand-in serving stylesheet sources from a dict."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files = dict(files or {})
        self.unreadable: set[str] = set()

    def list_files(self) -> list[str]:
        return list(self.files)

    def read(self, file_id: str) -> str:
        if file_id in self.unreadable:
            raise OSError(f"Permission denied: {file_id}")
        return self.files[file_id]


@pytest.fixture
def db():
    """Create a fresh in-memory database with migrations for each test."""
    database = Database(":memory:")
    database.connect()
    run_migrations(database)
    yield database
    database.close()


@pytest.fixture
def store(db) -> EnabledStateRepository:
    return EnabledStateRepository(db)


@pytest.fixture
def injection() -> MemoryInjection:
    return MemoryInjection()


@pytest.fixture
def discovery() -> DictDiscovery:
    return DictDiscovery()


@pytest.fixture
def registry(discovery, store, injection) -> Registry:
    return Registry(discovery, store, injection)


# ---------------------------------------------------------------------------
# Sample sources
# ---------------------------------------------------------------------------

DARK_EXAMPLE = """
@-moz-document domain("example.com") {
    body { background: #111; color: #eee; }
}
"""

DOCS_AND_NEWS = """
/* Docs and news tweaks */
@-moz-document url-prefix("https://docs.python.org/"), url("https://news.example.org/") {
    .sidebar { display: none; }
}
@-moz-document regexp("https?://(www[.])?github[.]com/.*/issues") {
    .comment { font-size: 14px; }
}
"""

GLOBAL_FONTS = """/* i really want this to be global */
* { font-family: sans-serif !important; }
"""

LEGACY = "body { color: red; }\n"

MALFORMED = """
@-moz-document domain("example.com") {
    body { color: red; }
"""
