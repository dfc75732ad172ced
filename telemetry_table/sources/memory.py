# telemetry_table/sources/memory.py
"""
In-process implementations of the provider protocols.

Used by the CLI demo and the test-suite.  Everything completes synchronously:
request futures are already resolved when returned and `emit()` calls
subscribers on the caller's thread.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import Future
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from telemetry_table.core.columns import common_values_for_hints
from telemetry_table.core.formatting import FormatterRegistry, ValueFormatter
from telemetry_table.core.providers import LimitEvaluator, Unsubscribe
from telemetry_table.core.types import (
    DomainObject,
    LimitViolation,
    Record,
    TelemetryMetadatum,
    TimeBounds,
)

logger = logging.getLogger(__name__)

Limits = Mapping[str, tuple[float, float]]   # key -> (low, high)


def _resolved(value: Any) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _failed(exc: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exc)
    return future


class InMemoryTelemetry:
    """Metadata + telemetry provider backed by plain lists."""

    def __init__(self, formatters: FormatterRegistry | None = None) -> None:
        self._formatters = formatters or FormatterRegistry()
        self._metadata: dict[str, list[TelemetryMetadatum]] = {}
        self._history: dict[str, list[Record]] = {}
        self._limits: dict[str, Limits] = {}
        self._subscribers: defaultdict[str, list[Callable[[Record], None]]] = defaultdict(list)
        self._failures: dict[str, BaseException] = {}
        self.requests: list[tuple[DomainObject, TimeBounds]] = []

    # ------------------------------------------------------------------ #
    #  Setup helpers
    # ------------------------------------------------------------------ #

    def define(
        self,
        obj: DomainObject,
        metadata: Sequence[TelemetryMetadatum],
        history: Iterable[Record] = (),
        *,
        limits: Limits | None = None,
    ) -> None:
        self._metadata[obj.identifier] = list(metadata)
        self._history[obj.identifier] = list(history)
        self._limits[obj.identifier] = dict(limits or {})

    def fail_requests(self, obj: DomainObject, exc: BaseException | None) -> None:
        """Make every following request for *obj* fail with *exc* (None clears)."""
        if exc is None:
            self._failures.pop(obj.identifier, None)
        else:
            self._failures[obj.identifier] = exc

    def emit(self, obj: DomainObject, datum: Record) -> None:
        """Record a live sample and push it to subscribers."""
        self._history.setdefault(obj.identifier, []).append(datum)
        for callback in list(self._subscribers.get(obj.identifier, ())):
            callback(datum)

    def subscriber_count(self, obj: DomainObject) -> int:
        return len(self._subscribers.get(obj.identifier, ()))

    # ------------------------------------------------------------------ #
    #  MetadataProvider
    # ------------------------------------------------------------------ #

    def get_metadata(self, obj: DomainObject) -> list[TelemetryMetadatum]:
        return list(self._metadata.get(obj.identifier, ()))

    def common_values_for_hints(
        self,
        metadata_sets: Sequence[Sequence[TelemetryMetadatum]],
        hints: Sequence[str],
    ) -> list[TelemetryMetadatum]:
        return common_values_for_hints(metadata_sets, hints)

    # ------------------------------------------------------------------ #
    #  TelemetryProvider
    # ------------------------------------------------------------------ #

    def can_provide_telemetry(self, obj: DomainObject) -> bool:
        return obj.identifier in self._metadata

    def request(self, obj: DomainObject, bounds: TimeBounds) -> Future:
        self.requests.append((obj, bounds))
        failure = self._failures.get(obj.identifier)
        if failure is not None:
            return _failed(failure)

        records = self._history.get(obj.identifier, [])
        domain = next((m.key for m in self.get_metadata(obj) if m.is_domain), None)
        if domain is None:
            return _resolved(list(records))
        return _resolved([r for r in records if domain in r and bounds.contains(r[domain])])

    def subscribe(
        self,
        obj: DomainObject,
        callback: Callable[[Record], None],
        options: Mapping[str, Any],
    ) -> Unsubscribe:
        subscribers = self._subscribers[obj.identifier]
        subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    def limit_evaluator(self, obj: DomainObject) -> LimitEvaluator:
        limits = self._limits.get(obj.identifier, {})

        def evaluate(record: Record, key: str) -> Optional[LimitViolation]:
            if key not in limits:
                return None
            low, high = limits[key]
            value = record.get(key)
            if value is None:
                return None
            if value < low:
                return LimitViolation(css_class="s-limit-lwr", name="low")
            if value > high:
                return LimitViolation(css_class="s-limit-upr", name="high")
            return None

        return evaluate

    def get_value_formatter(self, format_id: Optional[str]) -> ValueFormatter:
        return self._formatters(format_id)


class _StaticComposition:
    def __init__(self, children: Sequence[DomainObject]) -> None:
        self._children = list(children)

    def load(self) -> Future:
        return _resolved(list(self._children))


class InMemoryComposition:
    """`CompositionProvider` over a ``{parent id: [children]}`` mapping."""

    def __init__(self) -> None:
        self._children: dict[str, list[DomainObject]] = {}

    def set_children(self, parent: DomainObject, children: Sequence[DomainObject]) -> None:
        self._children[parent.identifier] = list(children)

    def get(self, obj: DomainObject) -> Optional[_StaticComposition]:
        children = self._children.get(obj.identifier)
        if children is None:
            return None
        return _StaticComposition(children)


class InMemoryObjects:
    """`ObjectObserver` with an explicit `mutate()` to publish changes."""

    def __init__(self) -> None:
        self._observers: defaultdict[str, list[Callable[[DomainObject], None]]] = defaultdict(list)

    def observe(
        self,
        obj: DomainObject,
        path: str,
        callback: Callable[[DomainObject], None],
    ) -> Unsubscribe:
        observers = self._observers[obj.identifier]
        observers.append(callback)

        def deregister() -> None:
            if callback in observers:
                observers.remove(callback)

        return deregister

    def mutate(self, obj: DomainObject) -> None:
        logger.debug("Object %r changed", obj.identifier)
        for callback in list(self._observers.get(obj.identifier, ())):
            callback(obj)

    def observer_count(self, obj: DomainObject) -> int:
        return len(self._observers.get(obj.identifier, ()))
