"""Qt model/view tests (pytest-qt)."""

import pytest
from PySide6.QtCore import QModelIndex, Qt

from conftest import TIME_METADATA
from telemetry_table.core.types import TableSettings
from telemetry_table.ui.table import TelemetryTableModel, TelemetryTableView
from telemetry_table.ui.window import TableWindow


@pytest.fixture
def loaded(make_controller, three_sources, scheduler):
    controller = make_controller(TableSettings(max_rows=10))
    controller.start()
    scheduler.run_all()
    return controller


@pytest.fixture
def model(qapp, loaded):
    model = TelemetryTableModel(loaded)
    yield model
    model.close()


def test_model_mirrors_rows_and_headers(model):
    assert model.rowCount() == 9
    assert model.columnCount() == 2
    assert model.headerData(0, Qt.Horizontal) == "Time"
    assert model.headerData(1, Qt.Horizontal) == "Value"
    assert model.headerData(0, Qt.Vertical) is None


def test_model_data_roles(model):
    index = model.index(3, 1)
    assert model.data(index) == "100"
    assert model.data(index, Qt.UserRole) == 100
    assert model.data(index, Qt.ForegroundRole) is None
    assert model.data(QModelIndex()) is None


def test_model_follows_appends_and_evictions(qtbot, model, telemetry, three_sources):
    with qtbot.waitSignal(model.rowsInserted, timeout=1000):
        telemetry.emit(three_sources[0], {"time": 5, "value": 50})
    assert model.rowCount() == 10

    with qtbot.waitSignal(model.rowsRemoved, timeout=1000):
        telemetry.emit(three_sources[0], {"time": 6, "value": 60})
    assert model.rowCount() == 10
    assert model.data(model.index(9, 1)) == "60"
    assert model.data(model.index(0, 1)) == "1"


def test_limit_colour(qapp, make_controller, telemetry, root, scheduler):
    telemetry.define(root, TIME_METADATA, [{"time": 0, "value": 99}], limits={"value": (0, 10)})
    controller = make_controller()
    controller.start()
    scheduler.run_all()
    model = TelemetryTableModel(controller)

    colour = model.data(model.index(0, 1), Qt.ForegroundRole)
    assert colour is not None
    assert colour.name().lower() == "#ff6b6b"
    model.close()


def test_header_change_resets_model(qtbot, model, loaded):
    with qtbot.waitSignal(model.modelReset, timeout=1000):
        loaded.filter_columns()
    assert model.headers == ["Time", "Value"]


def test_closed_model_stops_listening(model, loaded, telemetry, three_sources):
    model.close()
    assert loaded.rows.listener_count("row_added") == 0
    telemetry.emit(three_sources[0], {"time": 5, "value": 50})
    assert len(loaded.rows) == 10


def test_view_auto_scroll_follows_conductor(qtbot, loaded, conductor):
    view = TelemetryTableView(loaded)
    qtbot.addWidget(view)
    assert not view.auto_scroll

    conductor.set_follow(True)
    assert view.auto_scroll

    conductor.set_follow(False)
    assert not view.auto_scroll
    view.close_model()
    assert loaded.listener_count("autoscroll") == 0


def test_window_status_and_close(qtbot, loaded, telemetry, three_sources):
    window = TableWindow(loaded)
    qtbot.addWidget(window)
    window.show()

    window.status.refresh()
    message = window.statusBar().currentMessage()
    assert "rows:      9/10" in message
    assert "sort:Time" in message

    window.close()
    assert loaded.destroyed
    assert all(telemetry.subscriber_count(obj) == 0 for obj in three_sources)
