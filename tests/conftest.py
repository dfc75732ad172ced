"""Pytest configuration and fixtures."""

import os

# Qt widgets must not need a display in CI.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from telemetry_table.app.conductor import TimeConductor
from telemetry_table.app.controller import TableServices, TelemetryTableController
from telemetry_table.core.scheduler import TaskQueue
from telemetry_table.core.types import DomainObject, TableSettings, TelemetryMetadatum, TimeBounds, TimeSystem
from telemetry_table.sources.memory import InMemoryComposition, InMemoryObjects, InMemoryTelemetry


TIME_METADATA = [
    TelemetryMetadatum(key="value", name="Value"),
    TelemetryMetadatum(key="time", name="Time", hints={"x": 1}),
]


def records(n, *, start=0, value_offset=0):
    """``n`` records with ``time`` = start..start+n-1."""
    return [{"time": start + i, "value": value_offset + i} for i in range(n)]


@pytest.fixture
def scheduler():
    return TaskQueue()


@pytest.fixture
def telemetry():
    return InMemoryTelemetry()


@pytest.fixture
def composition():
    return InMemoryComposition()


@pytest.fixture
def objects_service():
    return InMemoryObjects()


@pytest.fixture
def conductor():
    return TimeConductor(TimeBounds(0, 1000), TimeSystem(key="time", name="Time"))


@pytest.fixture
def services(telemetry, composition, objects_service, conductor):
    return TableServices(
        telemetry=telemetry,
        metadata=telemetry,
        composition=composition,
        objects=objects_service,
        conductor=conductor,
    )


@pytest.fixture
def root():
    return DomainObject(identifier="root", name="Root", type="table")


@pytest.fixture
def three_sources(telemetry, composition, root):
    """Three children of ``root``, each with 3 historical records."""
    children = [DomainObject(identifier=f"obj-{i}", name=f"Object {i}") for i in range(3)]
    for i, child in enumerate(children):
        telemetry.define(child, TIME_METADATA, records(3, value_offset=100 * i))
    composition.set_children(root, children)
    return children


@pytest.fixture
def make_controller(root, services, scheduler):
    created = []

    def factory(settings=None, domain_object=None):
        controller = TelemetryTableController(domain_object or root, services, scheduler, settings or TableSettings())
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        controller.destroy()
