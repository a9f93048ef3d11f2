"""SQLite connection holding the per-stylesheet enabled flags."""

from __future__ import annotations

import sqlite3

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    # Each toggle must be on disk before the command returns.
    "PRAGMA synchronous=FULL",
    "PRAGMA secure_delete=ON",
)


class Database:
    """One SQLite connection shared by the registry's persistence calls.

    The connection may be used from any thread; callers serialize access
    (the registry does so under its lock).
    """

    def __init__(self, path: str = ":memory:") -> None:
        self._path = path
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Open the connection and apply the durability pragmas."""
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        for pragma in _PRAGMAS:
            self._conn.execute(pragma)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    @property
    def connection(self) -> sqlite3.Connection:
        assert self._conn is not None, "Database not connected"
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.connection.execute(sql, params)

    def fetch_one(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        """Execute a query and return the first row, or None."""
        return self.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def commit(self) -> None:
        self.connection.commit()
