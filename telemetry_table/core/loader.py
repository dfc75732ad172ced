# telemetry_table/core/loader.py
"""
`HistoricalLoader` – turns per-object historical result sets into rows without
monopolising the scheduler thread.

Per load cycle:

1.  One ``request(obj, bounds)`` per object, all in flight together.
2.  Each response is re-posted onto the scheduler (futures may complete on
    any thread).
3.  The response is converted ``batch_size`` records at a time; after every
    chunk the next step is enqueued with ``call_soon`` so other work can run.
4.  When the finished-object counter reaches the object count, the
    per-object blocks are concatenated in request order and the cycle's
    future resolves.

A new `load()` bumps the generation counter and cancels pending handles;
continuations that still run compare generations and drop themselves.
"""

from __future__ import annotations

import heapq
import logging
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Optional, Sequence

from telemetry_table.core.configuration import TableConfiguration
from telemetry_table.core.errors import SourceError
from telemetry_table.core.providers import LimitEvaluator, TelemetryProvider
from telemetry_table.core.scheduler import Scheduler
from telemetry_table.core.types import DomainObject, Record, Row, TimeBounds

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


@dataclass
class _LoadCycle:
    generation: int
    objects: list[DomainObject]
    future: Future
    interleave_by: Optional[str] = None
    blocks: list[list[Row]] = field(default_factory=list)
    finished: int = 0
    failed: bool = False


def _domain_sort_key(title: str, row: Row) -> tuple[int, Any]:
    cell = row.get(title)
    if cell is None or not cell.valid or cell.value is None:
        return (1, 0)
    return (0, cell.value)


def interleave_blocks(blocks: Sequence[Sequence[Row]], title: str) -> list[Row]:
    """k-way merge of per-object blocks by the value under *title*.

    Each block must already be ordered by that value; ties keep block order.
    """
    return list(heapq.merge(*blocks, key=partial(_domain_sort_key, title)))


class HistoricalLoader:
    """Batched, cancellable historical row conversion."""

    def __init__(
        self,
        telemetry: TelemetryProvider,
        configuration: TableConfiguration,
        scheduler: Scheduler,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._telemetry = telemetry
        self._configuration = configuration
        self._scheduler = scheduler
        self.batch_size = batch_size

        self._generation = 0
        self._cycle: Optional[_LoadCycle] = None
        self._pending: dict[int, int] = {}      # object index -> scheduler handle
        self._continuations_ctr = 0

    # ------------------------------------------------------------------ #
    #  Public API
    # ------------------------------------------------------------------ #

    @property
    def in_flight(self) -> bool:
        return self._cycle is not None

    @property
    def continuations_scheduled(self) -> int:
        """Chunk continuations scheduled since construction."""
        return self._continuations_ctr

    def load(
        self,
        objects: Sequence[DomainObject],
        bounds: TimeBounds,
        *,
        interleave_by: Optional[str] = None,
    ) -> Future:
        """
        Start a load cycle and return a future of the merged rows.

        Parameters
        ----------
        objects : objects to request, in block order
        bounds  : inclusive ``start`` / ``end`` of the request
        interleave_by : column title to merge blocks chronologically by;
                        ``None`` keeps one contiguous block per object
        """
        self.cancel()
        self._generation += 1

        future: Future = Future()
        future.set_running_or_notify_cancel()
        cycle = _LoadCycle(
            generation=self._generation,
            objects=list(objects),
            future=future,
            interleave_by=interleave_by,
            blocks=[[] for _ in objects],
        )
        self._cycle = cycle
        logger.info(
            "Historical load #%d: %d object(s), bounds %s..%s",
            cycle.generation, len(cycle.objects), bounds.start, bounds.end,
        )

        if not cycle.objects:
            self._finish(cycle)
            return future

        for index, obj in enumerate(cycle.objects):
            try:
                pending = self._telemetry.request(obj, bounds)
            except Exception as exc:
                self._fail(cycle, obj, exc)
                break
            pending.add_done_callback(partial(self._on_response_ready, cycle, index, obj))
        return future

    def cancel(self) -> None:
        """Drop the in-flight cycle, if any.  Its future gets `CancelledError`."""
        self._cancel_pending()
        cycle, self._cycle = self._cycle, None
        if cycle is None:
            return
        self._generation += 1
        if not cycle.future.done():
            cycle.future.set_exception(CancelledError())
            logger.debug("Historical load #%d cancelled", cycle.generation)

    # ------------------------------------------------------------------ #
    #  Continuations
    # ------------------------------------------------------------------ #

    def _is_current(self, cycle: _LoadCycle) -> bool:
        return cycle.generation == self._generation and not cycle.failed

    def _cancel_pending(self) -> None:
        for handle in self._pending.values():
            self._scheduler.cancel(handle)
        self._pending.clear()

    def _on_response_ready(
        self, cycle: _LoadCycle, index: int, obj: DomainObject, response: Future
    ) -> None:
        # may run on the provider's thread
        self._scheduler.call_soon(partial(self._on_response, cycle, index, obj, response))

    def _on_response(
        self, cycle: _LoadCycle, index: int, obj: DomainObject, response: Future
    ) -> None:
        if not self._is_current(cycle):
            return
        try:
            records = list(response.result())
        except Exception as exc:
            self._fail(cycle, obj, exc)
            return
        logger.debug("Object %r returned %d record(s)", obj.identifier, len(records))
        self._process(cycle, index, records, 0, self._telemetry.limit_evaluator(obj))

    def _process(
        self,
        cycle: _LoadCycle,
        index: int,
        records: list[Record],
        offset: int,
        limit_evaluator: LimitEvaluator,
    ) -> None:
        if not self._is_current(cycle):
            return
        self._pending.pop(index, None)

        if offset >= len(records):
            cycle.finished += 1
            if cycle.finished == len(cycle.objects):
                self._finish(cycle)
            return

        chunk = records[offset:offset + self.batch_size]
        cycle.blocks[index].extend(
            self._configuration.get_row_values(limit_evaluator, record) for record in chunk
        )

        # yield before the next chunk
        self._pending[index] = self._scheduler.call_soon(
            partial(self._process, cycle, index, records, offset + self.batch_size, limit_evaluator)
        )
        self._continuations_ctr += 1

    def _finish(self, cycle: _LoadCycle) -> None:
        if cycle.interleave_by is not None:
            rows = interleave_blocks(cycle.blocks, cycle.interleave_by)
        else:
            rows = [row for block in cycle.blocks for row in block]
        self._cycle = None
        logger.info("Historical load #%d finished: %d row(s)", cycle.generation, len(rows))
        cycle.future.set_result(rows)

    def _fail(self, cycle: _LoadCycle, obj: DomainObject, exc: BaseException) -> None:
        if cycle.failed:
            return
        cycle.failed = True
        self._cancel_pending()
        self._cycle = None

        if isinstance(exc, SourceError):
            error = exc
        else:
            error = SourceError(
                f"historical request for {obj.identifier!r} failed: {exc}", obj.identifier
            )
            error.__cause__ = exc
        logger.warning("Historical load #%d failed: %s", cycle.generation, error)
        cycle.future.set_exception(error)
