from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR_ENV = "USERSTYLES_DATA_DIR"


def _default_data_dir() -> str:
    base = os.environ.get("XDG_DATA_HOME") or os.path.join(Path.home(), ".local", "share")
    return os.path.join(base, "userstyles")


@dataclass(frozen=True)
class UserstylesConfig:
    data_dir: str = "."
    styles_subdir: str = "styles"
    db_name: str = "styles.db"
    extension: str = ".css"
    host: str = "127.0.0.1"
    port: int = 5000

    @property
    def styles_dir(self) -> Path:
        return Path(self.data_dir) / self.styles_subdir

    @property
    def db_path(self) -> Path:
        return Path(self.data_dir) / self.db_name

    @classmethod
    def from_env(cls, **overrides) -> UserstylesConfig:
        """Build a config whose data directory comes from ``USERSTYLES_DATA_DIR``."""
        overrides.setdefault("data_dir", os.environ.get(DATA_DIR_ENV) or _default_data_dir())
        return cls(**overrides)
