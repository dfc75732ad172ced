# telemetry_table/app/controller.py
"""
`TelemetryTableController` – the *only* class a host application talks to.

Responsibilities
----------------
* Resolve the contributing objects (root + composition children).
* Rebuild columns / visibility whenever the object set changes.
* Run one historical load cycle, then open live subscriptions.
* React to object mutation and to the time conductor (bounds, time system,
  follow mode).
* Tear everything down exactly once in `destroy()`.
"""

from __future__ import annotations

import logging
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional, Sequence

from telemetry_table.core.columns import build_columns, select_domain_columns
from telemetry_table.core.configuration import TableConfiguration
from telemetry_table.core.errors import SourceError, TelemetryTableError
from telemetry_table.core.events import EventEmitter
from telemetry_table.core.live import LiveSubscriptionBuffer
from telemetry_table.core.loader import HistoricalLoader
from telemetry_table.core.providers import (
    CompositionProvider,
    MetadataProvider,
    ObjectObserver,
    TelemetryProvider,
    TimeAuthority,
)
from telemetry_table.core.rows import RowSequence
from telemetry_table.core.scheduler import Scheduler
from telemetry_table.core.time_system import select_sort_column
from telemetry_table.core.types import (
    DomainObject,
    Row,
    TableSettings,
    TableState,
    TimeBounds,
    TimeSystem,
)

logger = logging.getLogger(__name__)


@dataclass
class TableServices:
    """External collaborators injected into a controller."""

    telemetry: TelemetryProvider
    metadata: MetadataProvider
    composition: CompositionProvider
    objects: ObjectObserver
    conductor: TimeAuthority


class TelemetryTableController(EventEmitter):
    """
    Owns one table's state and drives it from its data sources.

    Events: ``"headers"`` (list[str]), ``"loading"`` (bool), ``"sort"``
    (str | None), ``"autoscroll"`` (bool), ``"error"`` (Exception).

    Usage
    -----
    >>> controller = TelemetryTableController(obj, services, QtScheduler())
    >>> controller.start()
    >>> ...
    >>> controller.destroy()
    """

    def __init__(
        self,
        domain_object: DomainObject,
        services: TableServices,
        scheduler: Scheduler,
        settings: TableSettings | None = None,
    ) -> None:
        super().__init__()
        self.domain_object = domain_object
        self.settings = settings or TableSettings()
        self._services = services
        self._scheduler = scheduler

        self.state = TableState(auto_scroll=services.conductor.follow())
        self.rows = RowSequence(self.settings.max_rows)
        self.table = TableConfiguration(domain_object, services.telemetry.get_value_formatter)
        self.loader = HistoricalLoader(
            services.telemetry, self.table, scheduler, batch_size=self.settings.batch_size
        )
        self.live = LiveSubscriptionBuffer(services.telemetry, self.table, self.rows)

        self._cycle = 0
        self._result: Optional[Future] = None
        self._deregister: list[Callable[[], None]] = []
        self._conductor_listeners: list[tuple[str, Callable[..., None]]] = []
        self._destroyed = False

    # ------------------------------------------------------------------ #
    #  Lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> Future:
        """Register listeners and kick off the first load cycle."""
        self.register_change_listeners()
        return self.get_data()

    def destroy(self) -> None:
        """Release subscriptions, pending work and listeners.  Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        self.live.close()
        self.loader.cancel()
        self._deregister_listeners()
        self._supersede_result()
        logger.info("Table %r destroyed", self.domain_object.identifier)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # ------------------------------------------------------------------ #
    #  Listeners
    # ------------------------------------------------------------------ #

    def register_change_listeners(self) -> None:
        """Attach to object mutation and conductor events (replacing old ones)."""
        self._deregister_listeners()

        self._deregister.append(
            self._services.objects.observe(self.domain_object, "*", self._on_object_changed)
        )

        conductor = self._services.conductor
        for event, listener in (
            ("timeSystem", self.sort_by_time_system),
            ("bounds", self._on_bounds),
            ("follow", self._on_follow),
        ):
            conductor.on(event, listener)
            self._conductor_listeners.append((event, listener))

    def _deregister_listeners(self) -> None:
        deregister, self._deregister = self._deregister, []
        for fn in deregister:
            fn()
        listeners, self._conductor_listeners = self._conductor_listeners, []
        for event, listener in listeners:
            self._services.conductor.off(event, listener)

    def _on_object_changed(self, domain_object: DomainObject) -> None:
        self.domain_object = domain_object
        self.table.set_domain_object(domain_object)
        self.get_data()

    def _on_bounds(self, bounds: TimeBounds) -> None:
        if self._services.conductor.follow():
            self._discard_out_of_bounds(bounds)
        elif self.settings.reload_on_bounds:
            self.get_data()

    def _on_follow(self, follow: bool) -> None:
        self.state.auto_scroll = bool(follow)
        self.emit("autoscroll", self.state.auto_scroll)

    # ------------------------------------------------------------------ #
    #  Columns
    # ------------------------------------------------------------------ #

    def sort_by_time_system(self, time_system: Optional[TimeSystem]) -> None:
        """Nominate the column matching *time_system* as the default sort."""
        self.state.default_sort = select_sort_column(time_system, self.table.columns)
        self.emit("sort", self.state.default_sort)

    def load_columns(self, objects: Sequence[DomainObject]) -> Sequence[DomainObject]:
        """Rebuild columns, time columns and headers from *objects*' metadata."""
        if not objects:
            return objects

        metadata = self._services.metadata
        metadata_sets = [metadata.get_metadata(obj) for obj in objects]
        all_fields = metadata.common_values_for_hints(metadata_sets, [])

        self.table.populate_columns(build_columns([all_fields], self.table.formatter_lookup))
        self.state.time_columns = [m.name for m in select_domain_columns([all_fields])]
        self.filter_columns()
        self.sort_by_time_system(self._services.conductor.time_system())
        return objects

    def filter_columns(self) -> None:
        """Recompute visible headers from the column configuration."""
        self._set_headers(self.table.visible_headers())

    def _set_headers(self, headers: list[str]) -> None:
        self.state.headers = headers
        self.emit("headers", list(headers))

    def _set_loading(self, loading: bool) -> None:
        self.state.loading = loading
        self.emit("loading", loading)

    def _time_title(self) -> Optional[str]:
        if self.state.default_sort is not None:
            return self.state.default_sort
        return self.state.time_columns[0] if self.state.time_columns else None

    # ------------------------------------------------------------------ #
    #  Load cycle
    # ------------------------------------------------------------------ #

    def get_data(self) -> Future:
        """
        Run one load cycle; the future resolves to the historical rows.

        Rows from the previous successful cycle stay in `rows` until this
        cycle completes; a failed cycle leaves them in place.
        """
        result: Future = Future()
        result.set_running_or_notify_cancel()
        if self._destroyed:
            result.set_exception(TelemetryTableError("table has been destroyed"))
            return result

        self._supersede_result()
        self._cycle += 1
        self._result = result
        cycle = self._cycle

        self.live.unsubscribe_all()
        self.loader.cancel()
        self.state.error = None
        self._set_headers([])
        self._set_loading(True)

        root = self.domain_object
        try:
            composition = self._services.composition.get(root)
            pending = composition.load() if composition is not None else None
        except Exception as exc:
            self._fail(cycle, self._source_error(root, exc))
            return result
        if pending is None:
            self._on_domain_objects(cycle, [root])
            return result
        pending.add_done_callback(
            lambda f: self._scheduler.call_soon(partial(self._on_children, cycle, root, f))
        )
        return result

    def _supersede_result(self) -> None:
        if self._result is not None and not self._result.done():
            self._result.set_exception(CancelledError())
        self._result = None

    def _is_current(self, cycle: int) -> bool:
        return cycle == self._cycle and not self._destroyed

    @staticmethod
    def _source_error(obj: DomainObject, exc: BaseException) -> SourceError:
        if isinstance(exc, SourceError):
            return exc
        error = SourceError(f"composition of {obj.identifier!r} failed to load: {exc}", obj.identifier)
        error.__cause__ = exc
        return error

    def _on_children(self, cycle: int, root: DomainObject, pending: Future) -> None:
        if not self._is_current(cycle):
            return
        try:
            children = list(pending.result())
        except Exception as exc:
            self._fail(cycle, self._source_error(root, exc))
            return
        self._on_domain_objects(cycle, [root, *children])

    def _on_domain_objects(self, cycle: int, objects: Sequence[DomainObject]) -> None:
        telemetry = self._services.telemetry
        try:
            objects = [obj for obj in objects if telemetry.can_provide_telemetry(obj)]
            self.load_columns(objects)
        except Exception as exc:
            error = SourceError(f"metadata fetch failed: {exc}")
            error.__cause__ = exc
            self._fail(cycle, error)
            return

        interleave_by = self._time_title() if self.settings.interleave_history else None
        pending = self.loader.load(
            objects, self._services.conductor.bounds(), interleave_by=interleave_by
        )
        pending.add_done_callback(partial(self._on_historical, cycle, objects))

    def _on_historical(self, cycle: int, objects: Sequence[DomainObject], pending: Future) -> None:
        if not self._is_current(cycle):
            return
        try:
            rows: list[Row] = pending.result()
        except CancelledError:
            return
        except Exception as exc:
            self._fail(cycle, exc)
            return

        self.rows.reset(rows)
        self._set_loading(False)
        self.live.subscribe(objects)
        logger.info(
            "Table %r loaded %d row(s) from %d object(s)",
            self.domain_object.identifier, len(self.rows), len(objects),
        )
        if self._result is not None and not self._result.done():
            self._result.set_result(rows)

    def _fail(self, cycle: int, exc: BaseException) -> None:
        if not self._is_current(cycle):
            return
        self.state.error = exc
        self._set_loading(False)
        logger.error("Table %r failed to load: %s", self.domain_object.identifier, exc)
        self.emit("error", exc)
        if self._result is not None and not self._result.done():
            self._result.set_exception(exc)

    # ------------------------------------------------------------------ #
    #  Real-time trimming
    # ------------------------------------------------------------------ #

    def _discard_out_of_bounds(self, bounds: TimeBounds) -> list[Row]:
        title = self._time_title()
        if title is None:
            return []

        def before_start(row: Row) -> bool:
            cell = row.get(title)
            if cell is None or not cell.valid or cell.value is None:
                return False
            try:
                return cell.value < bounds.start
            except TypeError:
                return False

        discarded = self.rows.discard_while(before_start)
        if discarded:
            logger.debug("Discarded %d row(s) before %s", len(discarded), bounds.start)
        return discarded
