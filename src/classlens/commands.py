"""Command objects exposed to menus and toolbars.

A command pairs a name with an effect and an enabled predicate. The
presentation layer renders commands and routes every activation through
:meth:`CommandRegistry.dispatch`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

__all__ = ["Command", "CommandRegistry", "CommandDisabledError"]

LOGGER = logging.getLogger(__name__)


class CommandDisabledError(RuntimeError):
    """Raised when dispatching a command whose predicate is false."""


def _always() -> bool:
    return True


@dataclass(slots=True)
class Command:
    """A named operation with an enabled predicate."""

    name: str
    text: str
    effect: Callable[..., Any]
    enabled: Callable[[], bool] = _always
    shortcut: str | None = None
    status_tip: str | None = None

    def is_enabled(self) -> bool:
        return bool(self.enabled())


class CommandRegistry:
    """Ordered set of commands with a single dispatch point."""

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        if command.name in self._commands:
            raise ValueError(f"Command already registered: {command.name}")
        self._commands[command.name] = command

    def get(self, name: str) -> Command:
        try:
            return self._commands[name]
        except KeyError:
            raise KeyError(f"Unknown command: {name}") from None

    def enabled_states(self) -> dict[str, bool]:
        """Return the current enabled flag of every command."""

        return {name: command.is_enabled() for name, command in self._commands.items()}

    def dispatch(self, name: str, *args: Any) -> Any:
        """Run the effect of ``name``, forwarding ``args`` such as a chosen path."""

        command = self.get(name)
        if not command.is_enabled():
            raise CommandDisabledError(f"Command is disabled: {name}")
        LOGGER.debug("Dispatching command %s", name)
        return command.effect(*args)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(tuple(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)
