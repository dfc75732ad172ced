# telemetry_table/ui/table.py
"""
`TelemetryTableModel` – Qt model over a controller's `RowSequence`.

No data loading happens here; the model only mirrors row/header events.
Pure PySide6.
"""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore    import Qt, QAbstractTableModel, QModelIndex
from PySide6.QtGui     import QColor
from PySide6.QtWidgets import QAbstractItemView, QTableView

from telemetry_table.app.controller import TelemetryTableController
from telemetry_table.core.types import Row

_CSS_COLOURS: dict[str, QColor] = {
    "s-limit-upr": QColor("#FF6B6B"),
    "s-limit-lwr": QColor("#F7DC6F"),
    "invalid":     QColor("#888888"),
}


class TelemetryTableModel(QAbstractTableModel):
    """One Qt row per table row, one Qt column per visible header."""

    def __init__(self, controller: TelemetryTableController, parent=None) -> None:
        super().__init__(parent)
        self._rows = controller.rows
        self._headers: list[str] = list(controller.state.headers)
        self._unlisten: list[Callable[[], None]] = [
            self._rows.on("row_added", self._on_row_added),
            self._rows.on("row_removed", self._on_row_removed),
            self._rows.on("rows_discarded", self._on_rows_discarded),
            self._rows.on("reset", self._on_reset),
            controller.on("headers", self.set_headers),
        ]

    # ── Qt API ────────────────────────────────────────────────────────────
    def rowCount(self, *_):          # type: ignore[override]
        return len(self._rows)

    def columnCount(self, *_):       # type: ignore[override]
        return len(self._headers)

    def headerData(self, section: int, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal and 0 <= section < len(self._headers):
            return self._headers[section]
        return None

    def data(self, index: QModelIndex, role=Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        cell = self.row(index.row()).get(self._headers[index.column()])
        if cell is None:
            return None
        if role == Qt.DisplayRole:
            return cell.text
        if role == Qt.UserRole:
            return cell.value
        if role == Qt.ForegroundRole and cell.css_class is not None:
            return _CSS_COLOURS.get(cell.css_class)
        return None

    # ── public API ────────────────────────────────────────────────────────
    @property
    def headers(self) -> list[str]:
        return list(self._headers)

    def row(self, index: int) -> Row:
        return self._rows[index]

    def set_headers(self, headers: list[str]) -> None:
        self.beginResetModel()
        self._headers = list(headers)
        self.endResetModel()

    def close(self) -> None:
        """Stop mirroring the controller."""
        unlisten, self._unlisten = self._unlisten, []
        for fn in unlisten:
            fn()

    # ── row events (already applied to the sequence) ──────────────────────
    def _on_row_added(self, index: int) -> None:
        self.beginInsertRows(QModelIndex(), index, index)
        self.endInsertRows()

    def _on_row_removed(self, index: int) -> None:
        self.beginRemoveRows(QModelIndex(), index, index)
        self.endRemoveRows()

    def _on_rows_discarded(self, rows: list[Row]) -> None:
        self.beginRemoveRows(QModelIndex(), 0, len(rows) - 1)
        self.endRemoveRows()

    def _on_reset(self) -> None:
        self.beginResetModel()
        self.endResetModel()


class TelemetryTableView(QTableView):
    """
    Thin wrapper that owns its `TelemetryTableModel` and follows the newest
    row while the conductor is in real-time mode.
    """

    def __init__(self, controller: TelemetryTableController, parent=None) -> None:
        super().__init__(parent)
        self._model = TelemetryTableModel(controller, self)
        self.setModel(self._model)
        self._auto_scroll = controller.state.auto_scroll
        self._unlisten = controller.on("autoscroll", self.set_auto_scroll)

        self.horizontalHeader().setStretchLastSection(True)
        self.verticalHeader().hide()
        self.setSelectionMode(QAbstractItemView.NoSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)

        self._model.rowsInserted.connect(self._follow_newest)

    @property
    def auto_scroll(self) -> bool:
        return self._auto_scroll

    def set_auto_scroll(self, enabled: bool) -> None:
        self._auto_scroll = enabled
        if enabled:
            self.scrollToBottom()

    def _follow_newest(self, *_) -> None:
        if self._auto_scroll:
            self.scrollToBottom()

    def close_model(self) -> None:
        self._unlisten()
        self._model.close()
