"""In-process injection capability that records activation state."""

from __future__ import annotations

import itertools


class MemoryHandle:
    """Handle whose activation state lives in a set of view ids."""

    def __init__(self, handle_id: int, css: str) -> None:
        self.handle_id = handle_id
        self.css = css
        self.released = False
        self._active_views: set[str] = set()

    def _check(self) -> None:
        if self.released:
            raise RuntimeError(f"Style handle {self.handle_id} has been released")

    def activate(self, view_id: str) -> None:
        self._check()
        self._active_views.add(view_id)

    def deactivate(self, view_id: str) -> None:
        self._check()
        self._active_views.discard(view_id)

    def is_active(self, view_id: str) -> bool:
        return not self.released and view_id in self._active_views

    @property
    def active_views(self) -> frozenset[str]:
        return frozenset(self._active_views)

    def set_source(self, css: str) -> None:
        self._check()
        self.css = css

    def release(self) -> None:
        """Deactivate everywhere and drop the handle."""
        self._check()
        self._active_views.clear()
        self.released = True

    def __repr__(self) -> str:
        state = "released" if self.released else f"active in {sorted(self._active_views)}"
        return f"MemoryHandle({self.handle_id}, {state})"


class MemoryInjection:
    """Injection capability that keeps every registered handle in memory."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.handles: list[MemoryHandle] = []

    def register(self, css: str) -> MemoryHandle:
        handle = MemoryHandle(next(self._ids), css)
        self.handles.append(handle)
        return handle

    @property
    def live_handles(self) -> list[MemoryHandle]:
        return [h for h in self.handles if not h.released]

    def active_css(self, view_id: str) -> list[str]:
        """CSS of every handle active in *view_id*, in registration order."""
        return [h.css for h in self.handles if h.is_active(view_id)]
