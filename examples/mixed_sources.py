"""Example script: one table over three sources, one of which is broken.

Builds the in-memory providers by hand (no CLI), loads history on a
`TaskQueue`, then streams live samples.  The failing source shows how a
`SourceError` surfaces and how the prior rows survive a failed reload.
"""

import logging

import colorlogging

from telemetry_table.app.conductor import TimeConductor
from telemetry_table.app.controller import TableServices, TelemetryTableController
from telemetry_table.core.scheduler import TaskQueue
from telemetry_table.core.types import DomainObject, TableSettings, TelemetryMetadatum, TimeBounds, TimeSystem
from telemetry_table.sources.memory import InMemoryComposition, InMemoryObjects, InMemoryTelemetry

logger = logging.getLogger(__name__)

METADATA = [
    TelemetryMetadatum(key="value", name="Value"),
    TelemetryMetadatum(key="time", name="Time", hints={"x": 1}),
]


def run_mixed_sources() -> None:
    """Load, stream, then reload with one source failing."""
    telemetry = InMemoryTelemetry()
    composition = InMemoryComposition()
    root = DomainObject(identifier="folder", name="Folder", type="folder")
    sources = [DomainObject(identifier=f"src-{i}", name=f"Source {i}") for i in range(3)]
    composition.set_children(root, sources)
    for i, src in enumerate(sources):
        history = [{"time": t, "value": 10 * i + t} for t in range(5)]
        telemetry.define(src, METADATA, history, limits={"value": (0, 20)})

    conductor = TimeConductor(TimeBounds(0, 10), TimeSystem(key="time", name="Time"))
    services = TableServices(telemetry, telemetry, composition, InMemoryObjects(), conductor)
    scheduler = TaskQueue()
    controller = TelemetryTableController(root, services, scheduler, TableSettings(batch_size=2))

    pending = controller.start()
    scheduler.run_all()
    logger.info("Loaded %d rows, sorted by %s", len(pending.result()), controller.state.default_sort)

    for t in range(5, 8):
        for src in sources:
            telemetry.emit(src, {"time": t, "value": t})
    logger.info("After live updates: %d rows", len(controller.rows))

    # Reload with a broken source: the error surfaces, the rows stay.
    telemetry.fail_requests(sources[1], ConnectionError("archive offline"))
    conductor.set_bounds(TimeBounds(0, 20))
    scheduler.run_all()
    logger.info("Reload error: %s (rows kept: %d)", controller.state.error, len(controller.rows))

    controller.destroy()


def main() -> None:
    colorlogging.configure()
    run_mixed_sources()


if __name__ == "__main__":
    main()
