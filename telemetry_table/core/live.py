"""Live subscriptions feeding the bounded `RowSequence`."""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional, Sequence

from telemetry_table.core.configuration import TableConfiguration
from telemetry_table.core.errors import SubscriptionError
from telemetry_table.core.providers import LimitEvaluator, TelemetryProvider, Unsubscribe
from telemetry_table.core.rows import RowSequence
from telemetry_table.core.types import DomainObject, Record

logger = logging.getLogger(__name__)


class LiveSubscriptionBuffer:
    """
    One subscription per object; every datum becomes a row immediately.

    Failures stay with the object that caused them: they are logged and
    recorded in `last_errors`, and the other subscriptions keep running.
    """

    def __init__(
        self,
        telemetry: TelemetryProvider,
        configuration: TableConfiguration,
        rows: RowSequence,
    ) -> None:
        self._telemetry = telemetry
        self._configuration = configuration
        self._rows = rows
        self._subscriptions: list[Unsubscribe] = []
        self._closed = False

        self.error_count = 0
        self.last_errors: dict[DomainObject, SubscriptionError] = {}

    @property
    def active(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, objects: Sequence[DomainObject]) -> list[Unsubscribe]:
        """Open a subscription for each object; returns the new handles."""
        if self._closed:
            return []
        handles: list[Unsubscribe] = []
        for obj in objects:
            try:
                limit_evaluator = self._telemetry.limit_evaluator(obj)
                handle = self._telemetry.subscribe(
                    obj, partial(self._on_datum, obj, limit_evaluator), {}
                )
            except Exception as exc:  # isolate per object
                self.report_error(obj, exc)
                continue
            # track before the next object can fail
            self._subscriptions.append(handle)
            handles.append(handle)
        logger.info("Subscribed to %d of %d object(s)", len(handles), len(objects))
        return handles

    def _on_datum(self, obj: DomainObject, limit_evaluator: LimitEvaluator, datum: Record) -> None:
        if self._closed:
            return
        try:
            row = self._configuration.get_row_values(limit_evaluator, datum)
            self._rows.append(row)
        except Exception as exc:  # isolate per object
            self.report_error(obj, exc)

    def report_error(self, obj: DomainObject, exc: BaseException) -> None:
        """Record a live failure for *obj*; no retry at this layer."""
        error = SubscriptionError(
            f"live telemetry for {obj.identifier!r} failed: {exc}", obj.identifier
        )
        error.__cause__ = exc
        self.error_count += 1
        self.last_errors[obj] = error
        logger.warning("%s", error)

    def unsubscribe_all(self) -> None:
        """Cancel every open subscription.  Safe when none are open."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for unsubscribe in subscriptions:
            unsubscribe()
        if subscriptions:
            logger.info("Unsubscribed from %d object(s)", len(subscriptions))

    def close(self) -> None:
        """Teardown: unsubscribe and ignore any late callbacks."""
        self.unsubscribe_all()
        self._closed = True

    def error_for(self, obj: DomainObject) -> Optional[SubscriptionError]:
        return self.last_errors.get(obj)
