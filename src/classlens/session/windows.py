"""Registry of live top-level browser windows in creation order."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterator

from ..services.settings import WindowBounds

__all__ = ["WindowHandle", "WindowRegistry", "NEW_FRAME_OFFSET"]

LOGGER = logging.getLogger(__name__)
NEW_FRAME_OFFSET = 22


@dataclass(slots=True, frozen=True)
class WindowHandle:
    """Opaque window identity ordered by creation sequence."""

    sequence: int
    id: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False)


class WindowRegistry:
    """Tracks live windows for cyclic next/previous navigation.

    Handles are kept in a dict keyed by sequence number; dicts preserve
    insertion order and handles are only ever appended with increasing
    sequence numbers, so iteration order is creation order.
    """

    def __init__(self) -> None:
        self._handles: dict[int, WindowHandle] = {}
        self._next_sequence = 1
        self._active: WindowHandle | None = None

    def create(self) -> WindowHandle:
        handle = WindowHandle(sequence=self._next_sequence)
        self.register(handle)
        return handle

    def register(self, handle: WindowHandle) -> None:
        if handle.sequence in self._handles:
            return
        if self._handles and handle.sequence < next(reversed(self._handles)):
            raise ValueError(
                f"Window sequence {handle.sequence} is older than the newest registered window"
            )
        self._handles[handle.sequence] = handle
        self._next_sequence = max(self._next_sequence, handle.sequence + 1)
        if self._active is None:
            self._active = handle
        LOGGER.debug("Window registered: #%d (%d live)", handle.sequence, len(self._handles))

    def unregister(self, handle: WindowHandle) -> None:
        if self._handles.pop(handle.sequence, None) is None:
            return
        if self._active == handle:
            self._active = next(iter(self._handles.values()), None)
        LOGGER.debug("Window unregistered: #%d (%d live)", handle.sequence, len(self._handles))

    def next(self, current: WindowHandle) -> WindowHandle:
        return self._step(current, 1)

    def previous(self, current: WindowHandle) -> WindowHandle:
        return self._step(current, -1)

    def _step(self, current: WindowHandle, delta: int) -> WindowHandle:
        order = list(self._handles.values())
        try:
            position = order.index(current)
        except ValueError:
            raise KeyError(f"Unknown window: #{current.sequence}") from None
        return order[(position + delta) % len(order)]

    def has_multiple(self) -> bool:
        return len(self._handles) > 1

    @property
    def active(self) -> WindowHandle | None:
        return self._active

    def activate(self, handle: WindowHandle) -> WindowHandle:
        if handle.sequence not in self._handles:
            raise KeyError(f"Unknown window: #{handle.sequence}")
        self._active = handle
        return handle

    def handles(self) -> tuple[WindowHandle, ...]:
        return tuple(self._handles.values())

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[WindowHandle]:
        return iter(self.handles())

    @staticmethod
    def offset_bounds(bounds: WindowBounds) -> WindowBounds:
        """Return bounds for a new window cascaded below ``bounds``."""

        return replace(bounds, x=bounds.x + NEW_FRAME_OFFSET, y=bounds.y + NEW_FRAME_OFFSET)
