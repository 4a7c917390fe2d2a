"""Bounded most-recent-first list of workspace files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from ..classpath.entries import normalize_path

__all__ = ["RecentEntries", "DEFAULT_CAPACITY"]

LOGGER = logging.getLogger(__name__)
DEFAULT_CAPACITY = 10


class RecentEntries:
    """Recency list: touching a path moves it to the front, the oldest falls off."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._paths: list[str] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def touch(self, path: Path | str) -> str:
        normalized = normalize_path(path)
        if normalized in self._paths:
            self._paths.remove(normalized)
        self._paths.insert(0, normalized)
        if len(self._paths) > self._capacity:
            evicted = self._paths[self._capacity :]
            del self._paths[self._capacity :]
            LOGGER.debug("Recent entries evicted: %s", evicted)
        return normalized

    def remove(self, path: Path | str) -> bool:
        normalized = normalize_path(path)
        if normalized not in self._paths:
            return False
        self._paths.remove(normalized)
        return True

    def clear(self) -> None:
        self._paths.clear()

    def list(self) -> list[str]:
        return list(self._paths)

    def load(self, paths: Iterable[Path | str]) -> None:
        """Replace the contents from a stored most-recent-first sequence."""

        self._paths = []
        for path in paths:
            normalized = normalize_path(path)
            if normalized in self._paths:
                continue
            self._paths.append(normalized)
            if len(self._paths) >= self._capacity:
                break

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return normalize_path(path) in self._paths
