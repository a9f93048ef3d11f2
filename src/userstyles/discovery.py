"""Stylesheet discovery in the styles directory."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DirectoryDiscovery:
    """Enumerates stylesheet files in one directory and reads their text.

    File ids are names relative to the directory.
    """

    def __init__(self, directory: str | Path, extension: str = ".css") -> None:
        self.directory = Path(directory)
        self.extension = extension

    def list_files(self) -> list[str]:
        """Return the sorted names of stylesheet files in the directory."""
        if not self.directory.is_dir():
            logger.info("Stylesheet directory '%s' doesn't exist", self.directory)
            return []
        return sorted(
            entry.name
            for entry in self.directory.iterdir()
            if entry.name.endswith(self.extension) and entry.is_file()
        )

    def path_of(self, file_id: str) -> Path:
        return self.directory / file_id

    def read(self, file_id: str) -> str:
        """Return the contents of *file_id* decoded as UTF-8."""
        return self.path_of(file_id).read_text(encoding="utf-8")
