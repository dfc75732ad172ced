"""
Cooperative scheduling primitives.

* `Scheduler` – structural protocol: "yield" means ``call_soon(fn)``
* `TaskQueue` – deterministic in-process FIFO, drained explicitly

The Qt-backed implementation lives in `telemetry_table.app.scheduler`.
"""

from __future__ import annotations

import itertools
from collections import deque
from threading import Lock
from typing import Callable, Optional, Protocol, runtime_checkable

Task = Callable[[], None]


@runtime_checkable
class Scheduler(Protocol):
    """Minimal API any scheduler must expose."""

    def call_soon(self, fn: Task) -> int: ...
    def cancel(self, handle: int) -> None: ...


class TaskQueue:
    """
    FIFO of pending continuations.  Nothing runs until `run_next()` or
    `run_all()` is called, which makes chunk boundaries observable.

    `call_soon` may be called from any thread; draining happens on the
    caller's thread.
    """

    def __init__(self) -> None:
        self._tasks: deque[tuple[int, Task]] = deque()
        self._cancelled: set[int] = set()
        self._ids = itertools.count(1)
        self._lock = Lock()
        self._scheduled_ctr = 0

    def call_soon(self, fn: Task) -> int:
        with self._lock:
            handle = next(self._ids)
            self._tasks.append((handle, fn))
            self._scheduled_ctr += 1
            return handle

    def cancel(self, handle: int) -> None:
        with self._lock:
            self._cancelled.add(handle)

    def _pop(self) -> Optional[Task]:
        with self._lock:
            while self._tasks:
                handle, fn = self._tasks.popleft()
                if handle in self._cancelled:
                    self._cancelled.discard(handle)
                    continue
                return fn
            return None

    def run_next(self) -> bool:
        """Run one pending task; False when the queue was empty."""
        fn = self._pop()
        if fn is None:
            return False
        fn()
        return True

    def run_all(self, limit: int = 1_000_000) -> int:
        """Drain the queue, including tasks enqueued while draining."""
        ran = 0
        while ran < limit and self.run_next():
            ran += 1
        return ran

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for handle, _ in self._tasks if handle not in self._cancelled)

    @property
    def scheduled_count(self) -> int:
        return self._scheduled_ctr


__all__ = ["Scheduler", "Task", "TaskQueue"]
