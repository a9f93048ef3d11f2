from __future__ import annotations

from userstyles.store.db import Database


class EnabledStateRepository:
    """Per-file enabled flags, keyed by stylesheet file id."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def get(self, file_id: str) -> bool:
        """Return the stored flag for *file_id*; unknown files are enabled."""
        row = self._db.fetch_one("SELECT enabled FROM by_file WHERE file = ?", (file_id,))
        if row is None:
            return True
        return row["enabled"] != 0

    def set(self, file_id: str, enabled: bool) -> None:
        """Record the flag for *file_id* and commit before returning."""
        self._db.execute(
            """INSERT INTO by_file (file, enabled) VALUES (?, ?)
               ON CONFLICT(file) DO UPDATE SET enabled = excluded.enabled""",
            (file_id, int(enabled)),
        )
        self._db.commit()

    def list_all(self) -> dict[str, bool]:
        """Return every stored flag, ordered by file id."""
        rows = self._db.fetch_all("SELECT file, enabled FROM by_file ORDER BY file")
        return {r["file"]: r["enabled"] != 0 for r in rows}

    def delete(self, file_id: str) -> None:
        """Forget the flag for *file_id*."""
        self._db.execute("DELETE FROM by_file WHERE file = ?", (file_id,))
        self._db.commit()
