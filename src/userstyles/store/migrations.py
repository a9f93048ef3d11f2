from __future__ import annotations

from userstyles.store.db import Database

SCHEMA = """
CREATE TABLE IF NOT EXISTS by_file (
    id INTEGER PRIMARY KEY,
    file TEXT NOT NULL UNIQUE,
    enabled INTEGER NOT NULL DEFAULT 1
);
"""


def run_migrations(db: Database) -> None:
    """Create all tables."""
    db.connection.executescript(SCHEMA)
    db.commit()
