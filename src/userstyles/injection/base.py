"""Interfaces of the CSS injection capability."""

from __future__ import annotations

from typing import Protocol


class StyleHandle(Protocol):
    """One piece of CSS registered with the injection capability.

    Activation state is tracked per page view.
    """

    def activate(self, view_id: str) -> None: ...

    def deactivate(self, view_id: str) -> None: ...

    def is_active(self, view_id: str) -> bool: ...

    def set_source(self, css: str) -> None: ...

    def release(self) -> None:
        """Deactivate the CSS in every view and drop the handle.

        The handle must not be used afterwards.
        """
        ...


class InjectionCapability(Protocol):
    """Accepts CSS source and hands back a handle that controls it."""

    def register(self, css: str) -> StyleHandle:
        """Register *css* and return an inactive handle for it."""
        ...
