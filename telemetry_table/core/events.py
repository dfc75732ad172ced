"""
Minimal synchronous event emitter.

Listeners run in registration order on the emitting thread.  `on()` returns a
deregistration callable so owners can keep a flat list of teardown handles.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable


Listener = Callable[..., None]


class EventEmitter:
    """`on` / `off` / `emit` keyed by event name."""

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        self._listeners[event].append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass  # already removed

    def emit(self, event: str, *args: Any) -> None:
        # copy: listeners may deregister themselves while running
        for listener in list(self._listeners.get(event, ())):
            listener(*args)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
