"""Per-view navigation history."""

from .history import NavigationEntry, NavigationHistory

__all__ = ["NavigationEntry", "NavigationHistory"]
