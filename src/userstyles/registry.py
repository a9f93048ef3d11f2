"""Registry: owns the loaded stylesheets and the open page views.

Every state change (reload, toggle, navigation, global-enable override)
re-applies all rule blocks to the affected views.  Reload builds the new
collection off to the side and swaps it in with one assignment, so readers
only ever see a complete tuple of stylesheets.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from typing import Protocol

from userstyles.events.bus import EventBus
from userstyles.events.types import (
    StylesheetsReloaded,
    StylesheetToggled,
    ViewClosed,
    ViewNavigated,
)
from userstyles.injection.base import InjectionCapability
from userstyles.matching.engine import Activation, apply_to_view
from userstyles.model.diagnostic import Diagnostic, Severity
from userstyles.stylesheet.errors import LegacyFormatRejected, StylesheetError
from userstyles.stylesheet.model import RuleBlock, Stylesheet
from userstyles.stylesheet.parser import parse_stylesheet
from userstyles.views import PageView

logger = logging.getLogger(__name__)


class StylesheetSource(Protocol):
    """Discovery collaborator."""

    def list_files(self) -> list[str]: ...

    def read(self, file_id: str) -> str: ...


class EnabledStore(Protocol):
    """Persistence collaborator for the per-file enabled flag."""

    def get(self, file_id: str) -> bool: ...

    def set(self, file_id: str, enabled: bool) -> None: ...


@dataclass(frozen=True)
class ReloadResult:
    """Outcome of a reload: what loaded and what was skipped."""

    loaded: tuple[str, ...] = ()
    failures: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(d.file_id for d in self.failures)


class Registry:
    """The set of loaded stylesheets plus the views they are applied to.

    Every public method that mutates state or re-applies styles holds one
    re-entrant lock, so a threaded host (the web API) serializes reloads,
    toggles and view triggers through a single path.
    """

    def __init__(
        self,
        discovery: StylesheetSource,
        store: EnabledStore,
        injection: InjectionCapability,
        bus: EventBus | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._discovery = discovery
        self._store = store
        self._injection = injection
        self.bus = bus or EventBus()
        self._stylesheets: tuple[Stylesheet, ...] = ()
        self._views: dict[str, PageView] = {}

    # --- read access --------------------------------------------------------

    @property
    def stylesheets(self) -> tuple[Stylesheet, ...]:
        return self._stylesheets

    @property
    def views(self) -> tuple[PageView, ...]:
        with self._lock:
            return tuple(self._views.values())

    def get(self, file_id: str) -> Stylesheet | None:
        for stylesheet in self._stylesheets:
            if stylesheet.file_id == file_id:
                return stylesheet
        return None

    def view(self, view_id: str) -> PageView:
        with self._lock:
            try:
                return self._views[view_id]
            except KeyError:
                raise KeyError(f"Unknown view: {view_id!r}") from None

    def is_active(self, stylesheet: Stylesheet, view_id: str) -> bool:
        """True if *stylesheet* is enabled and styles part of *view_id*."""
        if not stylesheet.enabled:
            return False
        return any(block.handle.is_active(view_id) for block in stylesheet.rule_blocks)

    # --- loading ------------------------------------------------------------

    def build_stylesheet(self, file_id: str, source: str) -> Stylesheet:
        """Parse *source* and register one handle per rule block.

        Raises ``StylesheetError`` before any handle is registered.
        """
        parsed = parse_stylesheet(source, file_id=file_id)
        enabled = self._store.get(file_id)
        blocks = tuple(
            RuleBlock(
                predicates=block.predicates,
                css=block.css,
                handle=self._injection.register(block.css),
            )
            for block in parsed
        )
        return Stylesheet(file_id=file_id, rule_blocks=blocks, enabled=enabled)

    def _load(self, file_id: str) -> Stylesheet:
        return self.build_stylesheet(file_id, self._discovery.read(file_id))

    def reload(self) -> ReloadResult:
        """Re-read every discovered stylesheet and apply the new set.

        Files that fail to read or parse are skipped and reported in the
        result; the rest still load.  If the listing itself fails, the
        current stylesheets stay in place and the failure is reported.
        """
        with self._lock:
            try:
                file_ids = self._discovery.list_files()
            except OSError as exc:
                source = str(getattr(self._discovery, "directory", "<discovery>"))
                logger.error("Could not list stylesheets in '%s': %s", source, exc)
                failure = _diagnostic("io_error", Severity.ERROR, exc, source)
                self.bus.emit(StylesheetsReloaded(loaded=(), failed=(source,)))
                return ReloadResult(failures=(failure,))

            new: list[Stylesheet] = []
            seen: set[str] = set()
            failures: list[Diagnostic] = []

            for file_id in file_ids:
                if file_id in seen:
                    logger.warning("Skipping duplicate stylesheet '%s'", file_id)
                    failures.append(
                        Diagnostic(
                            rule="duplicate_file",
                            severity=Severity.WARNING,
                            message="Stylesheet already loaded",
                            file_id=file_id,
                        )
                    )
                    continue
                seen.add(file_id)
                try:
                    new.append(self._load(file_id))
                except LegacyFormatRejected as exc:
                    logger.warning("Not loading stylesheet '%s': %s", file_id, exc)
                    failures.append(_diagnostic("legacy_format", Severity.WARNING, exc, file_id))
                except StylesheetError as exc:
                    logger.error(
                        "Not loading stylesheet '%s' (%s): %s", file_id, exc.location(), exc
                    )
                    failures.append(_diagnostic("malformed_section", Severity.ERROR, exc, file_id))
                except (OSError, UnicodeDecodeError, sqlite3.Error) as exc:
                    logger.error("Could not load stylesheet '%s': %s", file_id, exc)
                    failures.append(_diagnostic("io_error", Severity.ERROR, exc, file_id))

            old, self._stylesheets = self._stylesheets, tuple(new)
            for stylesheet in old:
                stylesheet.release()
            self.refresh()

            result = ReloadResult(
                loaded=tuple(s.file_id for s in new),
                failures=tuple(failures),
            )
            logger.info(
                "Loaded %d stylesheets (%d failed)", len(result.loaded), len(result.failures)
            )
            self.bus.emit(StylesheetsReloaded(loaded=result.loaded, failed=result.failed))
            return result

    def unload(self) -> None:
        """Release every handle and forget all stylesheets."""
        with self._lock:
            old, self._stylesheets = self._stylesheets, ()
            for stylesheet in old:
                stylesheet.release()

    # --- enabled state ------------------------------------------------------

    def set_enabled(self, file_id: str, enabled: bool) -> Stylesheet:
        """Persist the enabled flag of *file_id*, then set it and re-apply.

        If the store raises, the in-memory flag and the handles are left
        as they were.
        """
        with self._lock:
            stylesheet = self.get(file_id)
            if stylesheet is None:
                raise KeyError(f"Unknown stylesheet: {file_id!r}")
            self._store.set(file_id, enabled)
            stylesheet.enabled = enabled
            self.refresh()
            self.bus.emit(StylesheetToggled(file_id=file_id, enabled=enabled))
            return stylesheet

    def toggle(self, file_id: str) -> bool:
        """Flip the enabled flag of *file_id* and return the new value."""
        with self._lock:
            stylesheet = self.get(file_id)
            if stylesheet is None:
                raise KeyError(f"Unknown stylesheet: {file_id!r}")
            return self.set_enabled(file_id, not stylesheet.enabled).enabled

    # --- views --------------------------------------------------------------

    def open_view(self, view: PageView) -> list[Activation]:
        with self._lock:
            self._views[view.view_id] = view
            return apply_to_view(view, self._stylesheets)

    def close_view(self, view_id: str) -> None:
        with self._lock:
            view = self._views.pop(view_id, None)
            if view is None:
                return
            for stylesheet in self._stylesheets:
                for block in stylesheet.rule_blocks:
                    block.handle.deactivate(view_id)
            self.bus.emit(ViewClosed(view_id=view_id))

    def navigate(self, view_id: str, uri: str) -> list[Activation]:
        with self._lock:
            view = self.view(view_id)
            view.uri = uri
            activations = apply_to_view(view, self._stylesheets)
            self.bus.emit(ViewNavigated(view_id=view_id, uri=uri))
            return activations

    def set_global_enabled(self, view_id: str, enabled: bool) -> list[Activation]:
        """Change the per-view override that suppresses all styles."""
        with self._lock:
            view = self.view(view_id)
            view.styles_enabled = enabled
            return apply_to_view(view, self._stylesheets)

    def refresh(self, view_id: str | None = None) -> None:
        """Re-apply every stylesheet to one view, or to all open views."""
        with self._lock:
            views = [self.view(view_id)] if view_id is not None else list(self._views.values())
            stylesheets = self._stylesheets
            for view in views:
                apply_to_view(view, stylesheets)


def _diagnostic(rule: str, severity: Severity, exc: Exception, file_id: str) -> Diagnostic:
    return Diagnostic(
        rule=rule,
        severity=severity,
        message=str(exc),
        file_id=file_id,
        line=getattr(exc, "line", None),
        column=getattr(exc, "column", None),
    )
