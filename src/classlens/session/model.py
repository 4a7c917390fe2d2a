"""Workspace session models: views, their layout, and the aggregate state."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from ..classpath.entries import ClassLocation, ClasspathEntry
from ..navigation.history import NavigationHistory

__all__ = ["SplitLayout", "ViewSession", "SessionState"]


def _generate_view_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class SplitLayout:
    """Opaque split descriptor owned by the presentation layer.

    ``mode`` and ``ratios`` are stored and restored verbatim; ``extra``
    carries any further keys the presentation layer chose to persist.
    """

    mode: str = "none"
    ratios: list[float] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ViewSession:
    """An open view: the class it shows plus its navigation history."""

    location: ClassLocation
    history: NavigationHistory = field(default_factory=NavigationHistory)
    layout: SplitLayout = field(default_factory=SplitLayout)
    view_id: str = field(default_factory=_generate_view_id)

    @classmethod
    def open(cls, location: ClassLocation, layout: SplitLayout | None = None) -> "ViewSession":
        """Create a view whose history starts at ``location``."""

        history = NavigationHistory()
        history.visit(location)
        return cls(location=location, history=history, layout=layout or SplitLayout())

    @property
    def current_location(self) -> ClassLocation:
        current = self.history.current
        return current.location if current is not None else self.location

    @property
    def title(self) -> str:
        return self.current_location.display_name


@dataclass(slots=True)
class SessionState:
    """Everything a workspace document persists."""

    entries: list[ClasspathEntry] = field(default_factory=list)
    views: list[ViewSession] = field(default_factory=list)
    active_view_index: int = 0

    @property
    def active_view(self) -> ViewSession | None:
        if not self.views:
            return None
        index = max(0, min(self.active_view_index, len(self.views) - 1))
        return self.views[index]
