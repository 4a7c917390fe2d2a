"""Event bus connecting the browser model to whatever presents it.

The model publishes plain dataclass events; a presentation layer subscribes
to the ones it renders (titles, notices, enabled states) without the model
knowing about it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Generic, TypeVar
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all events published on the :class:`EventBus`."""


@dataclass(slots=True)
class ClasspathChanged(Event):
    """Emitted when classpath entries are added, removed or replaced.

    Attributes:
        entry_count: Number of entries after the change.
    """

    entry_count: int


@dataclass(slots=True)
class ViewOpened(Event):
    """Emitted when a class is opened in a new view.

    Attributes:
        view_id: Identifier of the new view.
        file_name: Class location the view shows.
    """

    view_id: str
    file_name: str


@dataclass(slots=True)
class ViewClosed(Event):
    """Emitted when a view is closed."""

    view_id: str


@dataclass(slots=True)
class HistoryChanged(Event):
    """Emitted after a navigation history mutation in the active view.

    Attributes:
        view_id: Identifier of the view whose history changed.
        can_go_back: Whether the backward command should be enabled.
        can_go_forward: Whether the forward command should be enabled.
    """

    view_id: str
    can_go_back: bool
    can_go_forward: bool


@dataclass(slots=True)
class WorkspaceOpened(Event):
    """Emitted once a workspace document has been applied to the model."""

    path: str
    view_count: int


@dataclass(slots=True)
class WorkspaceSaved(Event):
    """Emitted after a workspace document was written."""

    path: str


@dataclass(slots=True)
class WindowTitleChanged(Event):
    """Emitted when the window title should change."""

    title: str


@dataclass(slots=True)
class NoticePosted(Event):
    """A user-visible message.

    Attributes:
        message: Text to show.
        level: ``"info"``, ``"warning"`` or ``"error"``.
    """

    message: str
    level: str = "info"


class EventBus(Generic[E]):
    """Synchronous publish-subscribe bus.

    Bound-method handlers are held weakly so subscribers can be garbage
    collected without unsubscribing. Handler exceptions are logged and do not
    stop delivery to the remaining handlers.

    This bus is not thread-safe; publish only from the coordinating thread.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        self._handlers[event_type].append(_HandlerRef.create(handler))
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return
        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                return

    def publish(self, event: E) -> None:
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        if not handlers:
            return

        logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(handlers))
        dead_indices: list[int] = []
        for i, handler_ref in enumerate(list(handlers)):
            handler = handler_ref.resolve()
            if handler is None:
                dead_indices.append(i)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for i in reversed(dead_indices):
            handlers.pop(i)

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Weak reference for bound methods, strong reference for other callables."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: WeakMethod | ref | Handler, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref  # type: ignore[return-value]
        return self._ref()  # type: ignore[operator]

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Any) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        return f"{type(handler.__self__).__name__}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "ClasspathChanged",
    "ViewOpened",
    "ViewClosed",
    "HistoryChanged",
    "WorkspaceOpened",
    "WorkspaceSaved",
    "WindowTitleChanged",
    "NoticePosted",
]
