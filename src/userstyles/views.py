"""Page views the registry applies stylesheets to."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PageView:
    """A displayed page.

    ``styles_enabled`` is the per-view override a page or extension uses to
    suppress all user styles for this view.
    """

    view_id: str
    uri: str = ""
    styles_enabled: bool = True

    def enable_styles(self) -> bool:
        return self.styles_enabled is not False
