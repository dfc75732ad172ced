# telemetry_table/app/scheduler.py
"""
`QtScheduler` – cooperative continuations on the Qt event loop.

``call_soon`` emits a queued signal, so the continuation runs on the thread
that owns the scheduler (normally the GUI thread) after pending events have
been processed.  It is safe to call from worker threads.
"""

from __future__ import annotations

import itertools
import logging
from threading import Lock

from PySide6.QtCore import QObject, Qt, Signal, Slot

from telemetry_table.core.scheduler import Task

logger = logging.getLogger(__name__)


class QtScheduler(QObject):
    """`Scheduler` implementation backed by a queued `Signal`."""

    _post = Signal(object, object)  # (handle, task)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._ids = itertools.count(1)
        self._cancelled: set[int] = set()
        self._lock = Lock()
        self._post.connect(self._run, Qt.QueuedConnection)

    def call_soon(self, fn: Task) -> int:
        with self._lock:
            handle = next(self._ids)
        self._post.emit(handle, fn)
        return handle

    def cancel(self, handle: int) -> None:
        with self._lock:
            self._cancelled.add(handle)

    @Slot(object, object)
    def _run(self, handle: int, fn: Task) -> None:
        with self._lock:
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                return
        fn()
