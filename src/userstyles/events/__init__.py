"""Event system: bus and event types for stylesheet lifecycle."""

from userstyles.events.bus import EventBus
from userstyles.events.types import (
    StylesheetsReloaded,
    StylesheetToggled,
    ViewClosed,
    ViewNavigated,
)

__all__ = [
    "EventBus",
    "StylesheetToggled",
    "StylesheetsReloaded",
    "ViewClosed",
    "ViewNavigated",
]
