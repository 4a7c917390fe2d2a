"""Per-view back/forward navigation history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from ..classpath.entries import ClassLocation

__all__ = ["NavigationEntry", "NavigationHistory", "HistoryListener"]

LOGGER = logging.getLogger(__name__)

HistoryListener = Callable[[bool, bool], None]


@dataclass(slots=True)
class NavigationEntry:
    """A visited class location plus opaque view display state."""

    location: ClassLocation
    state: dict[str, Any] = field(default_factory=dict)


class NavigationHistory:
    """Browser-style history: visiting from mid-history discards forward entries.

    The index is ``-1`` while empty and otherwise always addresses an entry.
    Listeners receive ``(can_go_back, can_go_forward)`` after every mutation.
    """

    def __init__(self, entries: Iterable[NavigationEntry] = (), index: int | None = None) -> None:
        self._entries: list[NavigationEntry] = list(entries)
        if not self._entries:
            self._index = -1
        elif index is None:
            self._index = len(self._entries) - 1
        else:
            self._index = max(0, min(index, len(self._entries) - 1))
        self._listeners: list[HistoryListener] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def visit(
        self, location: ClassLocation, state: Mapping[str, Any] | None = None
    ) -> NavigationEntry:
        current = self.current
        if current is not None and current.location == location:
            if state is not None:
                current.state = dict(state)
            return current
        if self._index < len(self._entries) - 1:
            discarded = len(self._entries) - self._index - 1
            del self._entries[self._index + 1 :]
            LOGGER.debug("History truncated %d forward entries", discarded)
        entry = NavigationEntry(location, dict(state or {}))
        self._entries.append(entry)
        self._index = len(self._entries) - 1
        self._notify()
        return entry

    def back(self) -> NavigationEntry | None:
        if not self.can_go_back:
            return None
        self._index -= 1
        self._notify()
        return self._entries[self._index]

    def forward(self) -> NavigationEntry | None:
        if not self.can_go_forward:
            return None
        self._index += 1
        self._notify()
        return self._entries[self._index]

    def update_state(self, state: Mapping[str, Any]) -> None:
        """Record display state (scroll, selection) for the current entry."""

        current = self.current
        if current is not None:
            current.state = dict(state)

    def clear(self) -> None:
        self._entries.clear()
        self._index = -1
        self._notify()

    def add_listener(self, listener: HistoryListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: HistoryListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:  # pragma: no cover
            pass

    def _notify(self) -> None:
        back, forward = self.can_go_back, self.can_go_forward
        for listener in list(self._listeners):
            listener(back, forward)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def index(self) -> int:
        return self._index

    @property
    def entries(self) -> tuple[NavigationEntry, ...]:
        return tuple(self._entries)

    @property
    def current(self) -> NavigationEntry | None:
        if self._index < 0:
            return None
        return self._entries[self._index]

    @property
    def can_go_back(self) -> bool:
        return self._index > 0

    @property
    def can_go_forward(self) -> bool:
        return 0 <= self._index < len(self._entries) - 1

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"NavigationHistory(entries={len(self._entries)}, index={self._index})"
