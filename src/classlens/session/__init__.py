"""Workspace session state, persistence, recency and window tracking."""

from .model import SessionState, SplitLayout, ViewSession
from .recent import RecentEntries
from .windows import WindowHandle, WindowRegistry

__all__ = [
    "SessionState",
    "SplitLayout",
    "ViewSession",
    "RecentEntries",
    "WindowHandle",
    "WindowRegistry",
]
