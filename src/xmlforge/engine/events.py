"""Event bus and action sequencer used by entities and scenes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

logger = logging.getLogger(__name__)

Step = Sequence[Callable[[Any], None]]


class EventBus:
    """Named event dispatch; callbacks run in the order they were bound."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}

    def bind(self, name: str, callback: Callable[..., Any]) -> None:
        self._handlers.setdefault(name, []).append(callback)

    def unbind(self, name: str, callback: Callable[..., Any]) -> None:
        handlers = self._handlers.get(name, [])
        if callback in handlers:
            handlers.remove(callback)

    def bound(self, name: str) -> list[Callable[..., Any]]:
        return list(self._handlers.get(name, []))

    def trigger(self, name: str, *args: Any) -> None:
        for callback in self.bound(name):
            callback(*args)


class Sequencer:
    """Plays registered action sequences one step at a time."""

    def __init__(self) -> None:
        self.sequences: dict[str, list[Step]] = {}
        self.active: str | None = None
        self._step = 0

    def add_sequence(self, id: str, steps: Sequence[Step]) -> None:
        self.sequences[id] = list(steps)

    def play_sequence(self, id: str) -> None:
        if id not in self.sequences:
            msg = f'Sequence "{id}" not registered'
            raise KeyError(msg)
        self.active = id
        self._step = 0

    def advance(self, host: Any) -> bool:
        """Run the next step of the active sequence; False once it has finished."""
        if self.active is None:
            return False
        steps = self.sequences[self.active]
        if self._step >= len(steps):
            logger.debug("Sequence %s finished", self.active)
            self.active = None
            return False
        for action in steps[self._step]:
            action(host)
        self._step += 1
        return True
