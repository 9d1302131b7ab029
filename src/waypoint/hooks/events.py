"""
Ordered, synchronous notification events fired around commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List

EventHandler = Callable[[Any, "SaveEventArgs"], None]


@dataclass(frozen=True)
class SaveEventArgs:
    """Base for the payload handed to commit-boundary handlers."""


@dataclass(frozen=True)
class PreSaveEventArgs(SaveEventArgs):
    pass


@dataclass(frozen=True)
class PostSaveEventArgs(SaveEventArgs):
    pass


class Event:
    """
    A named list of handlers invoked in subscription order.

    The same handler may be subscribed more than once and then fires once per
    subscription. ``unsubscribe`` drops the most recent registration.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> EventHandler:
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: EventHandler) -> None:
        for index in range(len(self._handlers) - 1, -1, -1):
            if self._handlers[index] == handler:
                del self._handlers[index]
                return

    def fire(self, sender: Any, args: SaveEventArgs) -> None:
        # Snapshot so handlers may (un)subscribe while firing.
        for handler in list(self._handlers):
            handler(sender, args)

    def clear(self) -> None:
        self._handlers.clear()

    def __contains__(self, handler: object) -> bool:
        return handler in self._handlers

    def __iter__(self) -> Iterator[EventHandler]:
        return iter(list(self._handlers))

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"Event({self.name!r}, handlers={len(self._handlers)})"
