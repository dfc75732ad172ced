# telemetry_table/core/rows.py
"""
`RowSequence` – bounded, strictly FIFO row store shared by the historical
loader (bulk reset) and the live buffer (append).

Events (via `EventEmitter`):

* ``"row_added"``    (index)       after an append
* ``"row_removed"``  (index)       after an eviction, always index 0
* ``"rows_discarded"`` (rows)      after a head trim by predicate
* ``"reset"``        ()            after a bulk replace or clear
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable, Iterator

from telemetry_table.core.events import EventEmitter
from telemetry_table.core.types import Row

DEFAULT_MAX_ROWS = 100_000


class RowSequence(EventEmitter):
    """Overflow evicts the oldest row *before* the new row goes in."""

    def __init__(self, capacity: int = DEFAULT_MAX_ROWS) -> None:
        super().__init__()
        if capacity < 1:
            raise ValueError("RowSequence capacity must be >= 1")
        self._capacity = capacity
        self._rows: deque[Row] = deque()
        self._append_ctr = 0     # total appends
        self._evict_ctr = 0      # total evictions

    # ------------------------------------------------------------------ #
    #  Mutation
    # ------------------------------------------------------------------ #

    def append(self, row: Row) -> None:
        if len(self._rows) >= self._capacity:
            self._rows.popleft()
            self._evict_ctr += 1
            self.emit("row_removed", 0)
        self._rows.append(row)
        self._append_ctr += 1
        self.emit("row_added", len(self._rows) - 1)

    def reset(self, rows: Iterable[Row] = ()) -> None:
        """Replace every row; only the newest `capacity` rows are kept."""
        self._rows = deque(rows)
        while len(self._rows) > self._capacity:
            self._rows.popleft()
            self._evict_ctr += 1
        self.emit("reset")

    def clear(self) -> None:
        self.reset()

    def discard_while(self, predicate: Callable[[Row], bool]) -> list[Row]:
        """Drop rows from the head while *predicate* holds."""
        discarded: list[Row] = []
        while self._rows and predicate(self._rows[0]):
            discarded.append(self._rows.popleft())
        if discarded:
            self.emit("rows_discarded", discarded)
        return discarded

    # ------------------------------------------------------------------ #
    #  Read access
    # ------------------------------------------------------------------ #

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def append_count(self) -> int:
        return self._append_ctr

    @property
    def evict_count(self) -> int:
        return self._evict_ctr

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index: int) -> Row:
        return self._rows[index]

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def snapshot(self) -> list[Row]:
        return list(self._rows)
