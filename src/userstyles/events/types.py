"""Event types emitted by the stylesheet registry."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StylesheetsReloaded:
    loaded: tuple[str, ...]
    failed: tuple[str, ...]


@dataclass(frozen=True)
class StylesheetToggled:
    file_id: str
    enabled: bool


@dataclass(frozen=True)
class ViewNavigated:
    view_id: str
    uri: str


@dataclass(frozen=True)
class ViewClosed:
    view_id: str
