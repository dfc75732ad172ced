"""CLI entry-point:  python -m telemetry_table --objects 3 --records 5000"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass

import colorlogging

from telemetry_table.app.conductor import TimeConductor
from telemetry_table.app.controller import TableServices, TelemetryTableController
from telemetry_table.core.scheduler import TaskQueue
from telemetry_table.core.types import DomainObject, TableSettings, TimeBounds, TimeSystem
from telemetry_table.sources.memory import InMemoryComposition, InMemoryObjects, InMemoryTelemetry
from telemetry_table.sources.synthetic import UTC_KEY, SineGenerator, make_objects, synthetic_metadata

logger = logging.getLogger(__name__)


@dataclass
class Demo:
    root: DomainObject
    services: TableServices
    telemetry: InMemoryTelemetry
    conductor: TimeConductor
    generators: list[SineGenerator]


def build_demo(
    n_objects: int,
    n_records: int,
    *,
    now_ms: float,
    window_ms: float = 60_000.0,
    follow: bool = False,
) -> Demo:
    """A container object whose children each carry a synthetic sine stream."""
    telemetry = InMemoryTelemetry()
    composition = InMemoryComposition()
    objects = InMemoryObjects()

    root = DomainObject(identifier="demo-table", name="Demo Table", type="table")
    children = make_objects(n_objects)
    composition.set_children(root, children)

    start_ms = now_ms - window_ms
    generators = []
    for i, child in enumerate(children):
        gen = SineGenerator(child, period_ms=window_ms / (i + 1), phase=0.5 * i, seed=i)
        telemetry.define(
            child,
            synthetic_metadata(),
            gen.history(start_ms, now_ms, n_records),
            limits={"sin": (-0.9, 0.9)},
        )
        generators.append(gen)

    conductor = TimeConductor(
        TimeBounds(start_ms, now_ms),
        TimeSystem(key=UTC_KEY, name="UTC"),
        follow=follow,
    )
    services = TableServices(
        telemetry=telemetry,
        metadata=telemetry,
        composition=composition,
        objects=objects,
        conductor=conductor,
    )
    return Demo(root, services, telemetry, conductor, generators)


def push_live(demo: Demo, t_ms: float) -> None:
    for gen in demo.generators:
        demo.telemetry.emit(gen.obj, gen.sample(t_ms))


def run_headless(demo: Demo, settings: TableSettings, *, live_samples: int, rate_hz: float) -> TelemetryTableController:
    """Drain a `TaskQueue` instead of a Qt event loop."""
    scheduler = TaskQueue()
    controller = TelemetryTableController(demo.root, demo.services, scheduler, settings)

    t0 = time.perf_counter()
    pending = controller.start()
    steps = scheduler.run_all()
    rows = pending.result(timeout=0)
    logger.info(
        "Historical: %d row(s), %d chunk continuation(s), %d scheduler step(s), %.3f s",
        len(rows), controller.loader.continuations_scheduled, steps, time.perf_counter() - t0,
    )
    logger.info("Headers: %s (default sort: %s)", controller.state.headers, controller.state.default_sort)

    dt_ms = 1000.0 / rate_hz
    t_ms = demo.conductor.bounds().end
    for _ in range(live_samples):
        t_ms += dt_ms
        push_live(demo, t_ms)
        if demo.conductor.follow():
            demo.conductor.advance(dt_ms)
    logger.info(
        "Live: %d sample(s) per object, table now %d row(s), %d evicted",
        live_samples, len(controller.rows), controller.rows.evict_count,
    )
    return controller


def run_window(demo: Demo, settings: TableSettings, *, rate_hz: float) -> int:
    from PySide6.QtCore import QTimer
    from PySide6.QtWidgets import QApplication

    from telemetry_table.app.scheduler import QtScheduler
    from telemetry_table.ui.window import TableWindow

    app = QApplication.instance() or QApplication(sys.argv)
    scheduler = QtScheduler()
    controller = TelemetryTableController(demo.root, demo.services, scheduler, settings)
    window = TableWindow(controller)
    controller.start()
    window.show()

    dt_ms = 1000.0 / rate_hz
    clock = {"t": demo.conductor.bounds().end}

    def tick() -> None:
        clock["t"] += dt_ms
        push_live(demo, clock["t"])
        if demo.conductor.follow():
            demo.conductor.advance(dt_ms)

    live_timer = QTimer()
    live_timer.setInterval(max(1, int(dt_ms)))
    live_timer.timeout.connect(tick)
    live_timer.start()

    return app.exec()


def main() -> None:
    colorlogging.configure()

    parser = argparse.ArgumentParser(description="Telemetry table demo")
    parser.add_argument("--objects", type=int, default=3, help="number of telemetry objects")
    parser.add_argument("--records", type=int, default=5000, help="historical records per object")
    parser.add_argument("--batch-size", type=int, default=1000, help="records per conversion chunk")
    parser.add_argument("--max-rows", type=int, default=100_000, help="row capacity")
    parser.add_argument("--rate", type=float, default=10.0, help="live samples per second per object")
    parser.add_argument("--live", type=int, default=100, help="live samples to push (headless only)")
    parser.add_argument("--interleave", action="store_true", help="merge historical rows by time")
    parser.add_argument("--follow", action="store_true", help="start in real-time mode")
    parser.add_argument("--headless", action="store_true", help="run without a window")
    args = parser.parse_args()

    try:
        settings = TableSettings(
            batch_size=args.batch_size,
            max_rows=args.max_rows,
            interleave_history=args.interleave,
        )
    except ValueError as e:
        parser.error(str(e))
    if args.rate <= 0:
        parser.error("--rate must be positive")

    demo = build_demo(args.objects, args.records, now_ms=time.time() * 1000.0, follow=args.follow)
    if args.headless:
        controller = run_headless(demo, settings, live_samples=args.live, rate_hz=args.rate)
        controller.destroy()
        return
    sys.exit(run_window(demo, settings, rate_hz=args.rate))


if __name__ == "__main__":
    main()
