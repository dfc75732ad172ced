# telemetry_table/ui/window.py
"""
`TableWindow` – Qt front-end for one `TelemetryTableController`.

Composes:  | TelemetryTableView |  + status bar
"""

from __future__ import annotations

from PySide6.QtCore    import QTimer
from PySide6.QtWidgets import QMainWindow, QStatusBar, QWidget

from telemetry_table.app.controller import TelemetryTableController
from telemetry_table.ui.statusbar   import TableStatusBar
from telemetry_table.ui.table       import TelemetryTableView


class TableWindow(QMainWindow):
    """Main window; destroys the controller when closed."""

    def __init__(
        self,
        controller: TelemetryTableController,
        *,
        width: int = 900,
        height: int = 550,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.resize(width, height)
        self.setWindowTitle(controller.domain_object.name or "Telemetry Table")

        self._controller = controller

        # -- table ------------------------------------------------------------ #
        self._view = TelemetryTableView(controller, self)
        self.setCentralWidget(self._view)

        # -- status bar ------------------------------------------------------- #
        self.setStatusBar(QStatusBar(self))
        self._status = TableStatusBar(self.statusBar(), controller)

        # -- ~4 Hz status refresh -------------------------------------------- #
        self._status_timer = QTimer(self)
        self._status_timer.setInterval(250)
        self._status_timer.timeout.connect(self._status.refresh)
        self._status_timer.start()

    @property
    def view(self) -> TelemetryTableView:
        return self._view

    @property
    def status(self) -> TableStatusBar:
        return self._status

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._status_timer.stop()
        self._view.close_model()
        self._controller.destroy()
        super().closeEvent(event)
