"""Tests for the stylesheet registry: reload, toggle and view triggers."""

from __future__ import annotations

import logging
import sqlite3

import pytest

from userstyles.events import StylesheetsReloaded, StylesheetToggled, ViewNavigated
from userstyles.model.diagnostic import Severity
from userstyles.registry import Registry
from userstyles.views import PageView

from tests.conftest import DARK_EXAMPLE, DOCS_AND_NEWS, GLOBAL_FONTS, LEGACY, MALFORMED


def _active_files(registry, view_id: str) -> list[str]:
    return [s.file_id for s in registry.stylesheets if registry.is_active(s, view_id)]


# ---------------------------------------------------------------------------
# Reload
# ---------------------------------------------------------------------------


class TestReload:
    def test_loads_in_discovery_order(self, registry, discovery):
        discovery.files = {"dark.css": DARK_EXAMPLE, "docs.css": DOCS_AND_NEWS}
        result = registry.reload()
        assert result.ok
        assert result.loaded == ("dark.css", "docs.css")
        assert [s.file_id for s in registry.stylesheets] == ["dark.css", "docs.css"]

    def test_one_handle_per_block(self, registry, discovery, injection):
        discovery.files = {"docs.css": DOCS_AND_NEWS}
        registry.reload()
        stylesheet = registry.get("docs.css")
        assert len(stylesheet.rule_blocks) == 2
        assert len(injection.live_handles) == 2
        assert [b.handle.css for b in stylesheet.rule_blocks] == [
            b.css for b in stylesheet.rule_blocks
        ]

    def test_malformed_file_is_skipped(self, registry, discovery, caplog):
        discovery.files = {"bad.css": MALFORMED, "dark.css": DARK_EXAMPLE}
        with caplog.at_level(logging.ERROR):
            result = registry.reload()

        assert result.loaded == ("dark.css",)
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.file_id == "bad.css"
        assert failure.rule == "malformed_section"
        assert failure.severity is Severity.ERROR
        assert failure.line == 2
        assert "bad.css" in caplog.text

    def test_legacy_file_is_skipped_with_warning(self, registry, discovery):
        discovery.files = {"old.css": LEGACY, "fonts.css": GLOBAL_FONTS}
        result = registry.reload()
        assert result.loaded == ("fonts.css",)
        assert result.failed == ("old.css",)
        assert result.failures[0].rule == "legacy_format"
        assert result.failures[0].is_warning

    def test_unreadable_file_is_reported(self, registry, discovery):
        discovery.files = {"locked.css": DARK_EXAMPLE, "docs.css": DOCS_AND_NEWS}
        discovery.unreadable.add("locked.css")
        result = registry.reload()
        assert result.loaded == ("docs.css",)
        assert result.failures[0].rule == "io_error"
        assert "Permission denied" in result.failures[0].message

    def test_failed_file_registers_no_handles(self, registry, discovery, injection):
        discovery.files = {"bad.css": MALFORMED}
        registry.reload()
        assert injection.handles == []
        assert registry.stylesheets == ()

    def test_releases_previous_handles(self, registry, discovery, injection):
        discovery.files = {"dark.css": DARK_EXAMPLE}
        registry.reload()
        old_handles = list(injection.live_handles)

        registry.reload()

        assert all(h.released for h in old_handles)
        assert all(h.css == "" for h in old_handles)
        assert len(injection.live_handles) == 1

    def test_removed_file_is_dropped(self, registry, discovery, injection):
        discovery.files = {"dark.css": DARK_EXAMPLE, "docs.css": DOCS_AND_NEWS}
        registry.reload()
        del discovery.files["docs.css"]
        registry.reload()
        assert registry.get("docs.css") is None
        assert len(injection.live_handles) == 1

    def test_enabled_flag_from_store(self, registry, discovery, store):
        store.set("dark.css", False)
        discovery.files = {"dark.css": DARK_EXAMPLE, "docs.css": DOCS_AND_NEWS}
        registry.reload()
        assert registry.get("dark.css").enabled is False
        assert registry.get("docs.css").enabled is True

    def test_reapplies_open_views(self, registry, discovery):
        registry.open_view(PageView(view_id="v1", uri="https://www.example.com/"))
        assert _active_files(registry, "v1") == []

        discovery.files = {"dark.css": DARK_EXAMPLE}
        registry.reload()

        assert _active_files(registry, "v1") == ["dark.css"]

    def test_emits_reloaded_event(self, registry, discovery):
        events = []
        registry.bus.subscribe(StylesheetsReloaded, events.append)
        discovery.files = {"dark.css": DARK_EXAMPLE, "bad.css": MALFORMED}
        registry.reload()
        assert events == [StylesheetsReloaded(loaded=("dark.css",), failed=("bad.css",))]

    def test_swap_replaces_collection(self, registry, discovery):
        discovery.files = {"dark.css": DARK_EXAMPLE}
        registry.reload()
        before = registry.stylesheets
        registry.reload()
        assert registry.stylesheets is not before
        assert before[0] is not registry.stylesheets[0]


class TestUnload:
    def test_releases_everything(self, registry, discovery, injection):
        discovery.files = {"dark.css": DARK_EXAMPLE, "docs.css": DOCS_AND_NEWS}
        registry.reload()
        registry.unload()
        assert registry.stylesheets == ()
        assert injection.live_handles == []


# ---------------------------------------------------------------------------
# Enabled state
# ---------------------------------------------------------------------------


class TestToggle:
    @pytest.fixture
    def loaded(self, registry, discovery):
        discovery.files = {"dark.css": DARK_EXAMPLE, "fonts.css": GLOBAL_FONTS}
        registry.reload()
        registry.open_view(PageView(view_id="v1", uri="https://example.com/"))
        return registry

    def test_toggle_off_deactivates_only_that_stylesheet(self, loaded):
        assert _active_files(loaded, "v1") == ["dark.css", "fonts.css"]
        assert loaded.toggle("dark.css") is False
        dark = loaded.get("dark.css")
        assert not any(b.handle.is_active("v1") for b in dark.rule_blocks)
        assert _active_files(loaded, "v1") == ["fonts.css"]

    def test_toggle_back_on(self, loaded):
        loaded.toggle("dark.css")
        assert loaded.toggle("dark.css") is True
        assert _active_files(loaded, "v1") == ["dark.css", "fonts.css"]

    def test_toggle_persists(self, loaded, store):
        loaded.toggle("fonts.css")
        assert store.get("fonts.css") is False

    def test_persisted_state_survives_reload(self, loaded):
        loaded.toggle("fonts.css")
        loaded.reload()
        assert loaded.get("fonts.css").enabled is False
        assert _active_files(loaded, "v1") == ["dark.css"]

    def test_set_enabled(self, loaded, store):
        loaded.set_enabled("dark.css", False)
        loaded.set_enabled("dark.css", False)
        assert loaded.get("dark.css").enabled is False
        assert store.get("dark.css") is False

    def test_unknown_file(self, loaded):
        with pytest.raises(KeyError):
            loaded.toggle("missing.css")

    def test_emits_toggled_event(self, loaded):
        events = []
        loaded.bus.subscribe(StylesheetToggled, events.append)
        loaded.toggle("dark.css")
        assert events == [StylesheetToggled(file_id="dark.css", enabled=False)]


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


class TestViews:
    @pytest.fixture
    def loaded(self, registry, discovery):
        discovery.files = {"dark.css": DARK_EXAMPLE, "docs.css": DOCS_AND_NEWS}
        registry.reload()
        return registry

    def test_open_view_applies(self, loaded):
        activations = loaded.open_view(PageView(view_id="v1", uri="https://shop.example.com/"))
        assert [a.active for a in activations] == [True, False, False]
        assert _active_files(loaded, "v1") == ["dark.css"]

    def test_navigate_reapplies(self, loaded):
        loaded.open_view(PageView(view_id="v1", uri="https://example.com/"))
        loaded.navigate("v1", "https://docs.python.org/3/library/re.html")
        assert _active_files(loaded, "v1") == ["docs.css"]
        assert loaded.view("v1").uri == "https://docs.python.org/3/library/re.html"

    def test_navigate_emits_event(self, loaded):
        events = []
        loaded.bus.subscribe(ViewNavigated, events.append)
        loaded.open_view(PageView(view_id="v1"))
        loaded.navigate("v1", "https://example.com/")
        assert events == [ViewNavigated(view_id="v1", uri="https://example.com/")]

    def test_navigate_unknown_view(self, loaded):
        with pytest.raises(KeyError):
            loaded.navigate("nope", "https://example.com/")

    def test_global_disable_and_enable(self, loaded):
        loaded.open_view(PageView(view_id="v1", uri="https://example.com/"))
        loaded.set_global_enabled("v1", False)
        assert _active_files(loaded, "v1") == []
        loaded.set_global_enabled("v1", True)
        assert _active_files(loaded, "v1") == ["dark.css"]

    def test_global_disable_is_per_view(self, loaded):
        loaded.open_view(PageView(view_id="v1", uri="https://example.com/"))
        loaded.open_view(PageView(view_id="v2", uri="https://example.com/"))
        loaded.set_global_enabled("v1", False)
        assert _active_files(loaded, "v1") == []
        assert _active_files(loaded, "v2") == ["dark.css"]

    def test_close_view_deactivates(self, loaded):
        loaded.open_view(PageView(view_id="v1", uri="https://example.com/"))
        loaded.close_view("v1")
        assert _active_files(loaded, "v1") == []
        assert loaded.views == ()

    def test_close_unknown_view_is_noop(self, loaded):
        loaded.close_view("nope")

    def test_refresh_single_view(self, loaded):
        view = PageView(view_id="v1", uri="https://example.com/")
        loaded.open_view(view)
        view.uri = "https://other.org/"
        loaded.refresh("v1")
        assert _active_files(loaded, "v1") == []


# ---------------------------------------------------------------------------
# Collaborator failures
# ---------------------------------------------------------------------------


class LockedStore:
    """Store whose writes fail, as with a locked database."""

    def __init__(self, store) -> None:
        self._store = store

    def get(self, file_id: str) -> bool:
        return self._store.get(file_id)

    def set(self, file_id: str, enabled: bool) -> None:
        raise sqlite3.OperationalError("database is locked")


class TestCollaboratorFailures:
    def test_failed_persist_leaves_state_unchanged(self, discovery, store, injection):
        registry = Registry(discovery, LockedStore(store), injection)
        discovery.files = {"dark.css": DARK_EXAMPLE}
        registry.reload()
        registry.open_view(PageView(view_id="v1", uri="https://example.com/"))
        events = []
        registry.bus.subscribe(StylesheetToggled, events.append)

        with pytest.raises(sqlite3.OperationalError):
            registry.toggle("dark.css")

        assert registry.get("dark.css").enabled is True
        assert _active_files(registry, "v1") == ["dark.css"]
        assert events == []

    def test_listing_failure_is_reported(self, registry, discovery, monkeypatch):
        discovery.files = {"dark.css": DARK_EXAMPLE}
        registry.reload()

        def unreadable_directory():
            raise PermissionError("Permission denied: styles")

        monkeypatch.setattr(discovery, "list_files", unreadable_directory)
        result = registry.reload()

        assert result.loaded == ()
        assert len(result.failures) == 1
        assert result.failures[0].rule == "io_error"
        assert "Permission denied" in result.failures[0].message

    def test_listing_failure_keeps_loaded_stylesheets(self, registry, discovery, monkeypatch):
        discovery.files = {"dark.css": DARK_EXAMPLE}
        registry.reload()
        registry.open_view(PageView(view_id="v1", uri="https://example.com/"))

        def failing_listing():
            raise OSError("Input/output error")

        monkeypatch.setattr(discovery, "list_files", failing_listing)
        registry.reload()

        assert [s.file_id for s in registry.stylesheets] == ["dark.css"]
        assert _active_files(registry, "v1") == ["dark.css"]
