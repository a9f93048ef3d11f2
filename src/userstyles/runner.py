from __future__ import annotations

import logging
from pathlib import Path

from userstyles.config import UserstylesConfig
from userstyles.discovery import DirectoryDiscovery
from userstyles.events.bus import EventBus
from userstyles.injection.base import InjectionCapability
from userstyles.injection.memory import MemoryInjection
from userstyles.registry import Registry
from userstyles.store.db import Database
from userstyles.store.migrations import run_migrations
from userstyles.store.repositories import EnabledStateRepository

logger = logging.getLogger(__name__)


class UserstylesRunner:
    """Wires the database, discovery, injection capability and registry."""

    def __init__(
        self,
        config: UserstylesConfig,
        *,
        injection: InjectionCapability | None = None,
        event_bus: EventBus | None = None,
        db: Database | None = None,
    ) -> None:
        self.config = config
        self._db = db
        self._injection = injection or MemoryInjection()
        self._event_bus = event_bus or EventBus()
        self._registry: Registry | None = None

    def initialize(self) -> Registry:
        """Open the database, create tables and build the registry."""
        if self._db is None:
            Path(self.config.data_dir).mkdir(parents=True, exist_ok=True)
            self._db = Database(str(self.config.db_path))
            self._db.connect()
        run_migrations(self._db)
        discovery = DirectoryDiscovery(self.config.styles_dir, self.config.extension)
        self._registry = Registry(
            discovery,
            EnabledStateRepository(self._db),
            self._injection,
            bus=self._event_bus,
        )
        logger.debug("Stylesheets directory: %s", self.config.styles_dir)
        return self._registry

    @property
    def registry(self) -> Registry:
        assert self._registry is not None, "Runner not initialized"
        return self._registry

    @property
    def injection(self) -> InjectionCapability:
        return self._injection

    def close(self) -> None:
        if self._registry is not None:
            self._registry.unload()
        if self._db is not None:
            self._db.close()
            self._db = None
