"""
Capability contracts the table consumes.

* `MetadataProvider`    – field descriptions per object
* `TelemetryProvider`   – historical requests, live subscriptions, limits
* `CompositionProvider` – child objects of a container
* `ObjectObserver`      – change notifications for an object's stored model
* `TimeAuthority`       – bounds / time system / follow mode

Structural protocols only; concrete implementations are injected.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import (
    Any,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from telemetry_table.core.formatting import ValueFormatter
from telemetry_table.core.types import (
    DomainObject,
    LimitViolation,
    Record,
    TelemetryMetadatum,
    TimeBounds,
    TimeSystem,
)

Unsubscribe = Callable[[], None]
LimitEvaluator = Callable[[Record, str], Optional[LimitViolation]]


@runtime_checkable
class MetadataProvider(Protocol):
    def get_metadata(self, obj: DomainObject) -> Sequence[TelemetryMetadatum]: ...
    def common_values_for_hints(
        self,
        metadata_sets: Sequence[Sequence[TelemetryMetadatum]],
        hints: Sequence[str],
    ) -> list[TelemetryMetadatum]: ...


@runtime_checkable
class TelemetryProvider(Protocol):
    def can_provide_telemetry(self, obj: DomainObject) -> bool: ...
    def request(self, obj: DomainObject, bounds: TimeBounds) -> Future: ...
    def subscribe(
        self,
        obj: DomainObject,
        callback: Callable[[Record], None],
        options: Mapping[str, Any],
    ) -> Unsubscribe: ...
    def limit_evaluator(self, obj: DomainObject) -> LimitEvaluator: ...
    def get_value_formatter(self, format_id: Optional[str]) -> ValueFormatter: ...


class Composition(Protocol):
    def load(self) -> Future: ...


@runtime_checkable
class CompositionProvider(Protocol):
    def get(self, obj: DomainObject) -> Optional[Composition]: ...


@runtime_checkable
class ObjectObserver(Protocol):
    def observe(
        self,
        obj: DomainObject,
        path: str,
        callback: Callable[[DomainObject], None],
    ) -> Unsubscribe: ...


@runtime_checkable
class TimeAuthority(Protocol):
    def bounds(self) -> TimeBounds: ...
    def time_system(self) -> Optional[TimeSystem]: ...
    def follow(self) -> bool: ...
    def on(self, event: str, listener: Callable[..., None]) -> Any: ...
    def off(self, event: str, listener: Callable[..., None]) -> None: ...


__all__ = [
    "Composition",
    "CompositionProvider",
    "LimitEvaluator",
    "MetadataProvider",
    "ObjectObserver",
    "TelemetryProvider",
    "TimeAuthority",
    "Unsubscribe",
]
