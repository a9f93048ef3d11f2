"""Per-window stylesheet menus.

Rows live in an explicit ``window_id -> rows`` mapping and are erased when
the window's menu closes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from userstyles.events.types import StylesheetsReloaded, StylesheetToggled
from userstyles.registry import Registry
from userstyles.stylesheet.model import Stylesheet

COLUMNS = ("Stylesheets", "State", "Affects")


class RowState(Enum):
    DISABLED = "Disabled"
    ENABLED = "Enabled"
    ACTIVE = "Active"


@dataclass(frozen=True)
class MenuRow:
    title: str
    state: RowState
    affects: str
    file_id: str

    def cells(self) -> tuple[str, str, str]:
        return (self.title, self.state.value, self.affects)


def describe_affected_pages(stylesheet: Stylesheet) -> str:
    """Comma-joined distinct predicate descriptions, in order of appearance."""
    affects: list[str] = []
    for predicate in stylesheet.predicates:
        desc = predicate.describe()
        if desc not in affects:
            affects.append(desc)
    return ", ".join(affects)


@dataclass
class _MenuState:
    view_id: str
    rows: list[MenuRow]


class StylesheetMenu:
    """Builds and refreshes the stylesheet list shown in each window."""

    def __init__(self, registry: Registry) -> None:
        self._registry = registry
        self._menus: dict[str, _MenuState] = {}
        registry.bus.subscribe(StylesheetToggled, self._on_change)
        registry.bus.subscribe(StylesheetsReloaded, self._on_change)

    def _on_change(self, event: object) -> None:
        self.refresh_all()

    def row_for(self, stylesheet: Stylesheet, view_id: str) -> MenuRow:
        if not stylesheet.enabled:
            state = RowState.DISABLED
        elif not self._registry.is_active(stylesheet, view_id):
            state = RowState.ENABLED
        else:
            state = RowState.ACTIVE
        return MenuRow(
            title=stylesheet.file_id,
            state=state,
            affects=describe_affected_pages(stylesheet),
            file_id=stylesheet.file_id,
        )

    def _build(self, view_id: str) -> list[MenuRow]:
        return [self.row_for(s, view_id) for s in self._registry.stylesheets]

    def open(self, window_id: str, view_id: str) -> list[MenuRow]:
        """Build the menu of *window_id* for the view shown in it."""
        rows = self._build(view_id)
        self._menus[window_id] = _MenuState(view_id=view_id, rows=rows)
        return list(rows)

    def is_open(self, window_id: str) -> bool:
        return window_id in self._menus

    def rows(self, window_id: str) -> list[MenuRow]:
        return list(self._menus[window_id].rows)

    def refresh(self, window_id: str) -> list[MenuRow]:
        state = self._menus[window_id]
        state.rows = self._build(state.view_id)
        return list(state.rows)

    def refresh_all(self) -> None:
        for window_id in list(self._menus):
            self.refresh(window_id)

    def toggle_row(self, window_id: str, index: int) -> bool:
        """Toggle the stylesheet at row *index* and return its new flag."""
        if index < 0:
            raise IndexError(f"Menu row index must not be negative: {index}")
        row = self._menus[window_id].rows[index]
        return self._registry.toggle(row.file_id)

    def close(self, window_id: str) -> None:
        self._menus.pop(window_id, None)

    def detach(self) -> None:
        """Stop following registry events and drop all menus."""
        self._registry.bus.unsubscribe(StylesheetToggled, self._on_change)
        self._registry.bus.unsubscribe(StylesheetsReloaded, self._on_change)
        self._menus.clear()
